"""
srlkit/classifiers/estimate.py

Probability table: one score vector over the label attribute per node.

Every stored vector has exactly `attribute.size` entries. Scores are
non-negative but only sum to one where an operation normalizes explicitly.
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterator, Mapping, Optional

import networkx as nx
import numpy as np

from srlkit.classifiers.attribute import LabelAttribute
from srlkit.classifiers.classification import UNKNOWN, Classification
from srlkit.core.vector_math import argmax, normalize, sample_index


class Estimate:
    """
    Per-node class-score vectors.

    Vectors are copied on the way in; `get` returns the stored array so that
    callers inside the engine can read without copying. Do not mutate what
    `get` returns unless you own the Estimate.
    """

    def __init__(
        self,
        attribute: LabelAttribute,
        graph: Optional[nx.Graph] = None,
        estimates: Optional[Mapping[Hashable, np.ndarray]] = None,
    ):
        self.attribute = attribute
        self.graph = graph
        self._vectors: Dict[Hashable, np.ndarray] = {}
        if estimates:
            for node, vector in estimates.items():
                self.set(node, vector)

    @classmethod
    def from_classification(cls, labels: Classification) -> "Estimate":
        """One-hot estimate for every known node of a classification."""
        result = cls(labels.attribute, labels.graph)
        for node in labels:
            result.set_class(node, labels.get(node))
        return result

    @property
    def num_classes(self) -> int:
        return self.attribute.size

    def _check_vector(self, vector: np.ndarray) -> np.ndarray:
        arr = np.array(vector, dtype=np.float64).reshape(-1)
        if arr.shape[0] != self.attribute.size:
            raise ValueError(
                f"Distribution array is the wrong size ({arr.shape[0]}) - expected {self.attribute.size}"
            )
        return arr

    def get(self, node: Hashable, default: Optional[np.ndarray] = None) -> Optional[np.ndarray]:
        """Stored vector for a node, or `default` when the node has none."""
        return self._vectors.get(node, default)

    def set(self, node: Hashable, vector: Optional[np.ndarray]) -> None:
        """Overwrite a node's vector with a copy; None removes the node."""
        if vector is None:
            self._vectors.pop(node, None)
            return
        arr = self._check_vector(vector)
        current = self._vectors.get(node)
        if current is None:
            self._vectors[node] = arr
        else:
            current[:] = arr

    def set_class(self, node: Hashable, value: int) -> None:
        """Overwrite a node's vector with the one-hot vector of `value`."""
        if value < 0 or value >= self.attribute.size:
            raise ValueError(
                f"Class value ({value}) is invalid. It must be in the range [0:{self.attribute.size}]"
            )
        vector = self._vectors.get(node)
        if vector is None:
            vector = np.zeros(self.attribute.size, dtype=np.float64)
            self._vectors[node] = vector
        else:
            vector.fill(0.0)
        vector[value] = 1.0

    def remove(self, node: Hashable) -> None:
        self._vectors.pop(node, None)

    def clear(self) -> None:
        self._vectors.clear()

    def score(self, node: Hashable, value: int) -> float:
        """Score of one class, NaN when the node has no vector."""
        vector = self._vectors.get(node)
        if vector is None or value < 0 or value >= vector.shape[0]:
            return float("nan")
        return float(vector[value])

    def sample(self, node: Hashable, rng: np.random.Generator) -> int:
        """Class index drawn proportionally to the node's scores, or -1."""
        return sample_index(self._vectors.get(node), rng)

    def normalize(self, node: Hashable) -> None:
        vector = self._vectors.get(node)
        if vector is not None:
            normalize(vector)

    def classification_of(self, node: Hashable) -> int:
        """Arg-max class of a node (first maximum wins), or UNKNOWN."""
        vector = self._vectors.get(node)
        if vector is None:
            return UNKNOWN
        return argmax(vector)

    def as_classification(self) -> Classification:
        return Classification.from_estimate(self)

    def copy(self) -> "Estimate":
        result = Estimate(self.attribute, self.graph)
        self.copy_into(result)
        return result

    def copy_into(self, result: "Estimate") -> None:
        """Replace the contents of `result` with copies of these vectors."""
        if result.attribute != self.attribute:
            raise ValueError("Copying Estimate into an estimate with a different attribute")
        result._vectors = {node: vector.copy() for node, vector in self._vectors.items()}

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._vectors))

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, node: Hashable) -> bool:
        return node in self._vectors

    def __repr__(self) -> str:
        lines = [f"Estimate({self.attribute}):"]
        for node, vector in self._vectors.items():
            lines.append(f"  node-{node}={np.array2string(vector, precision=4)}")
        return "\n".join(lines)
