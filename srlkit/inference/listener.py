"""
srlkit/inference/listener.py

Observer interface for inference progress.
"""

from __future__ import annotations

from typing import Hashable, Optional, Sequence

import networkx as nx

from srlkit.classifiers.classification import Classification
from srlkit.classifiers.estimate import Estimate


class InferenceListener:
    """
    Receives results as an inference method materializes them.

    Callbacks run synchronously in registration order. An exception raised
    by a callback propagates out of the inference run.
    """

    def estimate(self, estimate: Estimate, unknown: Sequence[Hashable]) -> None:
        """Called with the current estimate after every sweep."""

    def classify(self, classification: Classification, unknown: Sequence[Hashable]) -> None:
        """Called when a run's result is materialized as a classification."""

    def iterate(self, graph: Optional[nx.Graph], unknown: Sequence[Hashable]) -> None:
        """Called once a sweep over the unknown nodes has finished."""
