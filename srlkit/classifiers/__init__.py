"""
Classifiers module: label data types and per-node relational predictors.
"""

from srlkit.classifiers.attribute import LabelAttribute
from srlkit.classifiers.classification import UNKNOWN, Classification
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifier, NetworkClassifierBase
from srlkit.classifiers.wvrn import LaplaceCorrection, WeightedVoteRelationalNeighbor

__all__ = [
    "LabelAttribute",
    "UNKNOWN",
    "Classification",
    "Estimate",
    "NetworkClassifier",
    "NetworkClassifierBase",
    "LaplaceCorrection",
    "WeightedVoteRelationalNeighbor",
]
