"""
srlkit/inference/gibbs.py

Gibbs sampling over the unknown labels.

Every chain is a fixed random visiting order of the unknown nodes. Within a
sweep the chains run one after the other over a shared scratch estimate that
holds one sampled (one-hot) label per node. For each visited node the
classifier predicts from the scratch estimate, a label is drawn in proportion
to the prediction and written back. After the burn-in sweeps every draw is
tallied; the current estimate is the row-normalized tally.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, List, Optional

import numpy as np

from srlkit.classifiers.classification import UNKNOWN
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifier
from srlkit.core.config import Configuration
from srlkit.core.vector_math import RandomSource
from srlkit.inference.base import ConfigLike, InferenceMethod

logger = logging.getLogger(__name__)


class GibbsSampling(InferenceMethod):
    """
    Markov-chain Monte Carlo estimate of the label marginals.

    Options (non-positive values fall back to the defaults):
        burnin: Sweeps discarded before counting (default 200)
        numit: Counted sampling sweeps (default 2000)
        numchains: Independent visiting orders (default 10)

    The sweep budget is burnin + numit. Sweeps always report a change.
    """

    name = "GibbsSampling"
    short_name = "Gibbs"
    description = "Gibbs sampling of the unknown labels"
    DEFAULT_BURNIN = 200
    DEFAULT_ITERATIONS = 2000
    DEFAULT_CHAINS = 10

    def __init__(self, config: ConfigLike = None, *, rng: RandomSource = None):
        self.burnin = self.DEFAULT_BURNIN
        self.sampling_iterations = self.DEFAULT_ITERATIONS
        self.num_chains = self.DEFAULT_CHAINS
        self.chains: List[np.ndarray] = []
        self.scratch: Optional[Estimate] = None
        self.counts: Optional[np.ndarray] = None
        self.iteration = 0
        self.samples_counted = 0
        super().__init__(config, rng=rng)

    @classmethod
    def default_configuration(cls) -> Configuration:
        cfg = super().default_configuration()
        cfg.set("burnin", cls.DEFAULT_BURNIN)
        cfg.set("numchains", cls.DEFAULT_CHAINS)
        return cfg

    def configure(self, config: ConfigLike = None) -> None:
        cfg = Configuration.coerce(config)
        super().configure(cfg)
        burnin = cfg.get_int("burnin", self.DEFAULT_BURNIN)
        sampling = cfg.get_int("numit", self.DEFAULT_ITERATIONS)
        chains = cfg.get_int("numchains", self.DEFAULT_CHAINS)
        self.burnin = burnin if burnin >= 1 else self.DEFAULT_BURNIN
        self.sampling_iterations = sampling if sampling >= 1 else self.DEFAULT_ITERATIONS
        self.num_chains = chains if chains >= 1 else self.DEFAULT_CHAINS
        self.num_iterations = self.burnin + self.sampling_iterations
        logger.debug(
            "%s configure: burnin=%d gibbsIterations=%d numchains=%d",
            self.name, self.burnin, self.sampling_iterations, self.num_chains,
        )

    def reset(self, unknowns: Iterable[Hashable], rng: RandomSource = None) -> None:
        super().reset(unknowns, rng=rng)
        n = len(self.unknown)
        self.chains = [self.rng.permutation(n) for _ in range(self.num_chains)]

        # start every chain from one draw of the initial prior
        self.scratch = Estimate(self.curr_prior.attribute, self.curr_prior.graph)
        for node in self.unknown:
            sampled = self.curr_prior.sample(node, self.rng)
            if sampled != UNKNOWN:
                self.scratch.set(node, self.id_matrix[sampled])

        self.iteration = 0
        self.samples_counted = 0
        self.counts = np.zeros((n, self.curr_prior.num_classes), dtype=np.float64)

    def current_estimate(self) -> Estimate:
        """
        Empirical label marginals. Before any sweep has been counted, and for
        nodes that were never sampled, this is the working copy of the
        initial prior.
        """
        estimate = super().current_estimate()
        if self.counts is None or self.samples_counted == 0:
            return estimate
        for i, node in enumerate(self.unknown):
            if self.counts[i].sum() <= 0.0:
                continue
            estimate.set(node, self.counts[i])
            estimate.normalize(node)
        return estimate

    def _iterate(self, classifier: NetworkClassifier) -> bool:
        self.iteration += 1
        counting = self.iteration > self.burnin
        for chain in self.chains:
            for idx in chain:
                node = self.unknown[idx]
                if not classifier.estimate(node, self.scratch, self.tmp_predict, False):
                    continue
                self.scratch.set(node, self.tmp_predict)
                sampled = self.scratch.sample(node, self.rng)
                if sampled == UNKNOWN:
                    continue
                self.scratch.set(node, self.id_matrix[sampled])
                if counting:
                    self.counts[idx, sampled] += 1.0
        if counting:
            self.samples_counted += 1
        return True
