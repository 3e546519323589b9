"""
srlkit/classifiers/network.py

Call contract between the collective inference engine and a per-node
relational predictor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Hashable, Protocol, Sequence

import numpy as np

from srlkit.classifiers.attribute import LabelAttribute
from srlkit.classifiers.classification import UNKNOWN
from srlkit.classifiers.estimate import Estimate
from srlkit.core.vector_math import argmax


class NetworkClassifier(Protocol):
    """
    Protocol for the predictor the inference methods call once per node.

    `prior` is the context estimate holding the current beliefs about the
    neighbors. When `update_prior` is true the classifier also writes its
    result for `node` into `prior` (removing the node's entry on failure).
    """

    def begin_run(self, unknown: Sequence[Hashable]) -> None: ...
    def initialize_run(self, prior: Estimate, unknown: Sequence[Hashable]) -> None: ...
    def estimate(self, node: Hashable, prior: Estimate, out: np.ndarray, update_prior: bool) -> bool: ...
    def classify(self, node: Hashable, prior: Estimate, update_prior: bool) -> int: ...


class NetworkClassifierBase(ABC):
    """
    Convenience base implementing the protocol on top of a single hook.

    Subclasses implement `_estimate`, filling `out` and returning False when
    no prediction can be made for the node.
    """

    short_name: str = "base"

    def __init__(self, attribute: LabelAttribute):
        self.attribute = attribute

    @abstractmethod
    def _estimate(self, node: Hashable, prior: Estimate, out: np.ndarray) -> bool:
        ...

    def begin_run(self, unknown: Sequence[Hashable]) -> None:
        """Hook called once when an inference run starts."""

    def initialize_run(self, prior: Estimate, unknown: Sequence[Hashable]) -> None:
        """Hook called once per sweep before any node is visited."""

    def estimate(self, node: Hashable, prior: Estimate, out: np.ndarray, update_prior: bool = False) -> bool:
        ok = self._estimate(node, prior, out)
        if update_prior:
            prior.set(node, out if ok else None)
        return ok

    def classify(self, node: Hashable, prior: Estimate, update_prior: bool = False) -> int:
        out = np.zeros(self.attribute.size, dtype=np.float64)
        if not self.estimate(node, prior, out, False):
            if update_prior:
                prior.remove(node)
            return UNKNOWN
        result = argmax(out)
        if update_prior:
            prior.set_class(node, result)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.attribute})"
