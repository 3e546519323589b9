"""
srlkit/classifiers/wvrn.py

Weighted-vote relational neighbor classifier (wvRN).

The class scores of a node are the edge-weighted average of its neighbors'
beliefs: a neighbor with a known label votes its one-hot label, any other
neighbor votes its vector from the context estimate. Reference: Macskassy &
Provost, "Classification in Networked Data".
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Hashable, Mapping, Optional, Sequence, Union

import networkx as nx
import numpy as np

from srlkit.classifiers.classification import Classification
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifierBase
from srlkit.core.config import Configuration
from srlkit.core.vector_math import normalize
from srlkit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class LaplaceCorrection(Enum):
    """Initial pseudo-counts added before the neighbor votes."""
    NONE = "none"
    CLASS_PRIOR = "classprior"
    SMOOTHED = "smoothed"


class WeightedVoteRelationalNeighbor(NetworkClassifierBase):
    """
    wvRN over a networkx graph.

    Args:
        graph: Graph whose edges carry an optional numeric `weight`
        known: Known labels (the training nodes)
        config: Options `laplace` (none|classprior|smoothed), `lfactor`
            (pseudo-count multiplier) and `laplaceonce` (only apply the
            correction during the first sweep)
    """

    short_name = "wvRN"

    def __init__(
        self,
        graph: nx.Graph,
        known: Classification,
        config: Union[Configuration, Mapping[str, object], str, None] = None,
    ):
        super().__init__(known.attribute)
        self.graph = graph
        self.known = known
        self.laplace = LaplaceCorrection.NONE
        self.lfactor = 1.0
        self.laplace_once = False
        self.num_runs = 0
        self._laplace_init = np.zeros(self.attribute.size, dtype=np.float64)
        self._init = self._laplace_init.copy()
        self.configure(config)

    @staticmethod
    def default_configuration() -> Configuration:
        return Configuration({"laplace": "none", "lfactor": 1.0, "laplaceonce": False})

    def configure(self, config: Union[Configuration, Mapping[str, object], str, None]) -> None:
        cfg = Configuration.coerce(config)
        name = cfg.get("laplace", LaplaceCorrection.NONE.value).lower()
        try:
            self.laplace = LaplaceCorrection(name)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown laplace correction '{name}'", option="laplace") from exc
        self.lfactor = cfg.get_float("lfactor", 1.0)
        self.laplace_once = cfg.get_bool("laplaceonce", False)
        self.num_runs = 0

        if self.laplace is LaplaceCorrection.CLASS_PRIOR:
            self._laplace_init = self.known.class_distribution()
        elif self.laplace is LaplaceCorrection.SMOOTHED:
            self._laplace_init = np.full(self.attribute.size, 1.0 / self.attribute.size)
        else:
            self._laplace_init = np.zeros(self.attribute.size, dtype=np.float64)
        if self.laplace is not LaplaceCorrection.NONE:
            self._laplace_init *= self.lfactor
        self._init = self._laplace_init.copy()

        logger.debug(
            "wvRN configure: laplace=%s lfactor=%s laplaceonce=%s",
            self.laplace.value, self.lfactor, self.laplace_once,
        )

    def begin_run(self, unknown: Sequence[Hashable]) -> None:
        """Restore the pseudo-counts so `laplaceonce` applies to every run."""
        self.num_runs = 0
        self._init = self._laplace_init.copy()

    def initialize_run(self, prior: Estimate, unknown: Sequence[Hashable]) -> None:
        self.num_runs += 1
        if self.num_runs > 1 and self.laplace_once:
            self._init.fill(0.0)

    def _estimate(self, node: Hashable, prior: Optional[Estimate], out: np.ndarray) -> bool:
        out[:] = self._init
        for nbr in self.graph.neighbors(node):
            weight = float(self.graph[node][nbr].get("weight", 1.0))
            value = self.known.get(nbr)
            if value >= 0:
                out[value] += weight
            elif prior is not None:
                belief = prior.get(nbr)
                if belief is not None:
                    out += weight * belief
        if float(np.sum(out)) <= 0.0:
            return False
        normalize(out)
        return True
