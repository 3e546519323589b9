"""
srlkit/classifiers/classification.py

Hard label assignment: one class index per node, or -1 for unknown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Hashable, Iterator, Mapping, Optional

import networkx as nx
import numpy as np

from srlkit.classifiers.attribute import LabelAttribute

if TYPE_CHECKING:
    from srlkit.classifiers.estimate import Estimate

logger = logging.getLogger(__name__)

UNKNOWN = -1


class Classification:
    """
    Per-node class assignment.

    Only known labels are stored; any node not present reads as UNKNOWN.
    Iteration yields the nodes with a known label, in insertion order.
    """

    def __init__(
        self,
        attribute: LabelAttribute,
        graph: Optional[nx.Graph] = None,
        labels: Optional[Mapping[Hashable, int]] = None,
    ):
        self.attribute = attribute
        self.graph = graph
        self._labels: Dict[Hashable, int] = {}
        self._priors: Optional[np.ndarray] = None
        if labels:
            for node, value in labels.items():
                self.set(node, value)

    @classmethod
    def from_estimate(cls, estimate: "Estimate") -> "Classification":
        """Arg-max view of an estimate."""
        result = cls(estimate.attribute, estimate.graph)
        for node in estimate:
            result.set(node, estimate.classification_of(node))
        return result

    @classmethod
    def from_graph(cls, graph: nx.Graph, attribute: LabelAttribute) -> "Classification":
        """
        Read known labels from node data.

        A node is labeled when its data holds a known token under the
        attribute name; missing, None or unrecognized tokens leave it unknown.
        """
        result = cls(attribute, graph)
        for node, value in graph.nodes(data=attribute.name):
            if value is None:
                continue
            idx = attribute.index(value)
            if idx == UNKNOWN:
                logger.warning("Node %r has unknown %s token %r", node, attribute.name, value)
                continue
            result.set(node, idx)
        return result

    def _check_value(self, value: int) -> None:
        if value >= self.attribute.size:
            raise ValueError(
                f"Class value ({value}) is invalid. It must be in the range [0:{self.attribute.size}]"
            )

    def get(self, node: Hashable) -> int:
        """Class index of a node, or UNKNOWN."""
        return self._labels.get(node, UNKNOWN)

    def set(self, node: Hashable, value: int) -> None:
        """Assign a class index; a negative value marks the node unknown."""
        value = int(value)
        if value < 0:
            self.set_unknown(node)
            return
        self._check_value(value)
        self._labels[node] = value
        self._priors = None

    def set_unknown(self, node: Hashable) -> None:
        if self._labels.pop(node, None) is not None:
            self._priors = None

    def is_unknown(self, node: Hashable) -> bool:
        return node not in self._labels

    def clear(self) -> None:
        self._labels.clear()
        self._priors = None

    def class_distribution(self) -> np.ndarray:
        """Fraction of known nodes in each class (all zeros when nothing is known)."""
        if self._priors is None:
            counts = np.zeros(self.attribute.size, dtype=np.float64)
            for value in self._labels.values():
                counts[value] += 1.0
            if self._labels:
                counts /= len(self._labels)
            self._priors = counts
        return self._priors.copy()

    def majority_class(self) -> int:
        return int(np.argmax(self.class_distribution()))

    def base_accuracy(self) -> float:
        """Accuracy of always guessing the majority class."""
        return float(self.class_distribution()[self.majority_class()])

    def base_error(self) -> float:
        return 1.0 - self.base_accuracy()

    def as_binary(self, token: str) -> "Classification":
        """
        One-versus-rest view: class 0 is `token`, class 1 is everything else.
        """
        c_idx = self.attribute.index(token)
        if c_idx == UNKNOWN:
            raise ValueError(f"Class ({token}) not found - classes: {self.attribute}")
        binary = LabelAttribute(self.attribute.name, (token, f"not{token}"))
        return Classification(
            binary,
            self.graph,
            {node: (0 if value == c_idx else 1) for node, value in self._labels.items()},
        )

    def copy(self) -> "Classification":
        return Classification(self.attribute, self.graph, self._labels)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, node: Hashable) -> bool:
        return node in self._labels

    def __repr__(self) -> str:
        lines = [f"Classification[{self.attribute.name}]={{{','.join(self.attribute.tokens)}}}:"]
        lines.append(f"   Distrib: {np.array2string(self.class_distribution(), precision=4)}")
        for node, value in self._labels.items():
            lines.append(f"   Node[{node}]={value}")
        return "\n".join(lines)
