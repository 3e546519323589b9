"""
srlkit/inference/iterative.py

Iterative classification (ICA).
"""

from __future__ import annotations

from typing import Hashable, Iterable, Optional

from srlkit.classifiers.classification import UNKNOWN
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifier
from srlkit.core.vector_math import RandomSource, argmax
from srlkit.inference.base import InferenceMethod


class IterativeClassification(InferenceMethod):
    """
    Asynchronous greedy relabeling in a fixed node order.

    The classifier sees a scratch estimate holding the current hard label
    (one-hot) of every node relabeled so far, so an update is visible to the
    nodes after it in the same sweep. The scratch starts empty: in the first
    sweep unknown neighbors contribute nothing. A sweep reports a change when
    any node's label differs from its label before the sweep; a node the
    classifier declines to estimate keeps its label in the scratch estimate,
    and the decline counts as a change if it had one.
    """

    name = "IterativeClassification"
    short_name = "Iterative"
    description = (
        "Classifies unknowns in order, making use of the classifications "
        "already updated during the sweep"
    )
    DEFAULT_ITERATIONS = 1000

    def __init__(self, config=None, *, rng: RandomSource = None):
        self.scratch: Optional[Estimate] = None
        super().__init__(config, rng=rng)

    def reset(self, unknowns: Iterable[Hashable], rng: RandomSource = None) -> None:
        super().reset(unknowns, rng=rng)
        self.scratch = Estimate(self.curr_prior.attribute, self.curr_prior.graph)

    def _iterate(self, classifier: NetworkClassifier) -> bool:
        changed = False
        for node in self.unknown:
            previous = self.scratch.classification_of(node)
            if classifier.estimate(node, self.scratch, self.tmp_predict, False):
                self.curr_prior.set(node, self.tmp_predict)
                label = argmax(self.tmp_predict)
                self.scratch.set_class(node, label)
                if label != previous:
                    changed = True
            elif previous != UNKNOWN:
                # declined: the label stays visible to later nodes
                changed = True
        return changed
