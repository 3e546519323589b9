"""
srlkit/inference/null.py

Single-shot baseline: one classifier call per node against the initial prior.
"""

from __future__ import annotations

from typing import Hashable, Iterable

from srlkit.classifiers.network import NetworkClassifier
from srlkit.core.vector_math import RandomSource
from srlkit.inference.base import InferenceMethod


class NullInference(InferenceMethod):
    """
    Estimates every unknown node once from the initial prior.

    The first sweep stores the classifier's estimates in the working
    estimate; every later sweep is a no-op reporting no change. Useful to
    seed another method with a non-trivial starting point.
    """

    name = "NullInference"
    short_name = "NullInference"
    description = "Estimates every unknown once, using only the initial priors"
    DEFAULT_ITERATIONS = 1

    def __init__(self, config=None, *, rng: RandomSource = None):
        self.called = False
        super().__init__(config, rng=rng)

    def reset(self, unknowns: Iterable[Hashable], rng: RandomSource = None) -> None:
        super().reset(unknowns, rng=rng)
        self.called = False

    def _iterate(self, classifier: NetworkClassifier) -> bool:
        if self.called:
            return False
        self.called = True
        for node in self.unknown:
            if classifier.estimate(node, self.initial_prior, self.tmp_predict, False):
                self.curr_prior.set(node, self.tmp_predict)
        return True
