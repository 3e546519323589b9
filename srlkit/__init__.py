"""
srlkit: Statistical Relational Learning Toolkit

Collective classification of nodes in partially labeled graphs: a pluggable
per-node relational classifier combined with collective inference that
propagates label probabilities across linked nodes.

Key components:
- classifiers: Label data types (Estimate, Classification) and the
  relational classifier contract, with a weighted-vote neighbor classifier
- inference: Iteration driver and the null, iterative classification,
  relaxation labeling and Gibbs sampling strategies
- io: Prediction and Pajek snapshot writers
- core: Option parsing and vector helpers
"""

__version__ = "1.0.0"
__author__ = "SRLKit Team"

from srlkit.classifiers import (
    UNKNOWN,
    Classification,
    Estimate,
    LabelAttribute,
    NetworkClassifier,
    NetworkClassifierBase,
    WeightedVoteRelationalNeighbor,
)
from srlkit.core.config import Configuration
from srlkit.exceptions import ConfigurationError, IllegalStateError, SRLKitError
from srlkit.inference import (
    GibbsSampling,
    InferenceListener,
    InferenceMethod,
    InferenceState,
    InferenceStrategy,
    IterativeClassification,
    NullInference,
    RelaxationLabeling,
    create_inference,
)
from srlkit.solver import CollectiveResult, run_collective_inference

__all__ = [
    # Data types
    "UNKNOWN",
    "Classification",
    "Estimate",
    "LabelAttribute",
    # Classifiers
    "NetworkClassifier",
    "NetworkClassifierBase",
    "WeightedVoteRelationalNeighbor",
    # Inference
    "InferenceMethod",
    "InferenceState",
    "InferenceListener",
    "InferenceStrategy",
    "NullInference",
    "IterativeClassification",
    "RelaxationLabeling",
    "GibbsSampling",
    "create_inference",
    # Solver
    "run_collective_inference",
    "CollectiveResult",
    # Config and errors
    "Configuration",
    "SRLKitError",
    "ConfigurationError",
    "IllegalStateError",
]
