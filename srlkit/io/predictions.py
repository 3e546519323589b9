"""
srlkit/io/predictions.py

Line-oriented prediction writer.

Without a format every line reads `<node> <token>:<score> ...`. A format
string mixes literal text with %-segments:

    %ID                node id
    %class, %label     true class token (UNKNOWN when not known)
    %predictlabel      predicted (arg-max) class token
    %predictscore      score of the predicted class
    %prediction        predicted token and score, as token:score
    %ESTIMATE!<token>  token:score, printed only when token is not the prediction
    %<token>           score of that class (-1 when the node has no vector)
    %%                 a literal percent sign
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Hashable, List, Optional, TextIO

from srlkit.classifiers.classification import UNKNOWN, Classification
from srlkit.classifiers.estimate import Estimate

logger = logging.getLogger(__name__)

Segment = Callable[[Hashable, Estimate, Optional[Classification]], str]

_SEGMENT = re.compile(r"%(%|[A-Za-z0-9_]+(?:![A-Za-z0-9_]+)?)")


def _number(value: float) -> str:
    return str(float(value))


def _score(estimate: Estimate, node: Hashable, token: str) -> str:
    vector = estimate.get(node)
    if vector is None:
        return _number(-1)
    idx = estimate.attribute.index(token)
    if idx < 0 or idx >= vector.shape[0]:
        return _number(-1)
    return _number(vector[idx])


def _predicted(estimate: Estimate, node: Hashable):
    idx = estimate.classification_of(node)
    if idx == UNKNOWN:
        return "UNKNOWN", -1.0
    return estimate.attribute.token(idx), float(estimate.get(node)[idx])


def _constant(text: str) -> Segment:
    return lambda node, estimate, known: text


def _node_id(node, estimate, known) -> str:
    return str(node)


def _true_class(node, estimate, known) -> str:
    label = UNKNOWN if known is None else known.get(node)
    return "UNKNOWN" if label == UNKNOWN else estimate.attribute.token(label)


def _prediction_label(node, estimate, known) -> str:
    return _predicted(estimate, node)[0]


def _prediction_score(node, estimate, known) -> str:
    return _number(_predicted(estimate, node)[1])


def _prediction(node, estimate, known) -> str:
    label, score = _predicted(estimate, node)
    return f"{label}:{_number(score)}"


def _class_score(token: str) -> Segment:
    return lambda node, estimate, known: _score(estimate, node, token)


def _other_estimate(token: str) -> Segment:
    def segment(node, estimate, known) -> str:
        if _predicted(estimate, node)[0] == token:
            return ""
        return f"{token}:{_score(estimate, node, token)}"
    return segment


class PredictionWriter:
    """
    Writes one line per node describing its estimate.

    Args:
        output: Text stream to write to (may be set later)
        fmt: Optional format string, see the module docstring
    """

    def __init__(self, output: Optional[TextIO] = None, fmt: Optional[str] = None):
        self.output = output
        self.format: Optional[str] = None
        self._segments: List[Segment] = []
        self.set_format(fmt)

    def set_format(self, fmt: Optional[str]) -> None:
        self.format = fmt
        self._segments = []
        if fmt is None:
            return
        pos = 0
        for match in _SEGMENT.finditer(fmt):
            if match.start() > pos:
                self._segments.append(_constant(fmt[pos:match.start()]))
            segment = self._parse_segment(match.group(1))
            if segment is not None:
                self._segments.append(segment)
            pos = match.end()
        if pos < len(fmt):
            self._segments.append(_constant(fmt[pos:]))

    def _parse_segment(self, name: str) -> Optional[Segment]:
        key = name.lower()
        if name == "%":
            return _constant("%")
        if key == "id":
            return _node_id
        if key in ("class", "label"):
            return _true_class
        if key == "predictlabel":
            return _prediction_label
        if key == "predictscore":
            return _prediction_score
        if key == "prediction":
            return _prediction
        if key == "estimate" or key.startswith("estimate!"):
            _, _, token = name.partition("!")
            if not token:
                logger.warning("Invalid segment %%%s - should read %%ESTIMATE!<token>", name)
                return None
            return _other_estimate(token)
        return _class_score(name)

    def format_line(self, node: Hashable, estimate: Estimate, known: Optional[Classification] = None) -> str:
        """Render the line for one node without writing it."""
        if self._segments:
            return "".join(segment(node, estimate, known) for segment in self._segments)

        parts = [str(node)]
        vector = estimate.get(node)
        for c, token in enumerate(estimate.attribute.tokens):
            parts.append(f"{token}:{_number(vector[c])}" if vector is not None else f"{token}:-1")
        return " ".join(parts)

    def println(self, node: Hashable, estimate: Estimate, known: Optional[Classification] = None) -> None:
        if self.output is None:
            raise ValueError("PredictionWriter has no output stream")
        self.output.write(self.format_line(node, estimate, known))
        self.output.write("\n")
