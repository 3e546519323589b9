"""
srlkit/inference/relaxation.py

Relaxation labeling: synchronous, damped re-estimation of every node.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, Optional

import numpy as np

from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifier
from srlkit.core.config import Configuration
from srlkit.core.vector_math import RandomSource, merge
from srlkit.inference.base import ConfigLike, InferenceMethod
from srlkit.inference.buffers import DoubleBuffer

logger = logging.getLogger(__name__)


class RelaxationLabeling(InferenceMethod):
    """
    Re-estimates all unknown nodes at once from the previous sweep's beliefs.

    Each sweep reads the `current` buffer and writes the `next` buffer,
    merging with the old vector as beta * new + (1 - beta) * old when
    beta < 1; the buffers are swapped afterwards and beta is multiplied by
    `decay`. Sweeps always report a change, so the full budget is used.

    Options:
        beta: Initial weight of new estimates, clamped to [0, 1]; a
            non-finite value means the default (default 1)
        decay: Per-sweep beta multiplier; outside [0, 1] it is replaced by
            the clamped beta (default 0.99)
    """

    name = "RelaxationLabeling"
    short_name = "RelaxationLabeling"
    description = (
        "Classifies unknowns by estimating all unknowns at the same time, "
        "iterating until some stopping criterion is met"
    )
    DEFAULT_ITERATIONS = 99
    DEFAULT_BETA = 1.0
    DEFAULT_DECAY = 0.99

    def __init__(self, config: ConfigLike = None, *, rng: RandomSource = None):
        self.beta0 = self.DEFAULT_BETA
        self.beta = self.DEFAULT_BETA
        self.decay = self.DEFAULT_DECAY
        self.buffers: Optional[DoubleBuffer[Estimate]] = None
        super().__init__(config, rng=rng)

    @classmethod
    def default_configuration(cls) -> Configuration:
        cfg = super().default_configuration()
        cfg.set("beta", cls.DEFAULT_BETA)
        cfg.set("decay", cls.DEFAULT_DECAY)
        return cfg

    def configure(self, config: ConfigLike = None) -> None:
        cfg = Configuration.coerce(config)
        super().configure(cfg)
        beta = cfg.get_float("beta", self.DEFAULT_BETA)
        if not np.isfinite(beta):
            beta = self.DEFAULT_BETA
        self.beta0 = float(np.clip(beta, 0.0, 1.0))
        self.beta = self.beta0
        decay = cfg.get_float("decay", self.DEFAULT_DECAY)
        self.decay = decay if 0.0 <= decay <= 1.0 else self.beta0
        logger.debug("%s configure: beta=%s decay=%s", self.name, self.beta, self.decay)

    def reset(self, unknowns: Iterable[Hashable], rng: RandomSource = None) -> None:
        super().reset(unknowns, rng=rng)
        self.buffers = DoubleBuffer(self.curr_prior, self.curr_prior.copy())
        self.beta = self.beta0

    def _iterate(self, classifier: NetworkClassifier) -> bool:
        current, nxt = self.buffers.current, self.buffers.next
        for node in self.unknown:
            old = current.get(node)
            if classifier.estimate(node, current, self.tmp_predict, False):
                result = self.tmp_predict
                if old is not None and self.beta < 1.0:
                    result = merge(self.beta, old, self.tmp_predict)
                nxt.set(node, result)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("relaxation node-%s=%s", node, nxt.get(node))
            else:
                nxt.set(node, old)
        self.beta *= self.decay
        self.curr_prior = self.buffers.swap()
        return True
