"""
Inference module: collective inference driver and strategies.
"""

from srlkit.inference.base import InferenceMethod, InferenceState
from srlkit.inference.buffers import DoubleBuffer
from srlkit.inference.gibbs import GibbsSampling
from srlkit.inference.iterative import IterativeClassification
from srlkit.inference.listener import InferenceListener
from srlkit.inference.null import NullInference
from srlkit.inference.registry import InferenceStrategy, create_inference, get_inference_class
from srlkit.inference.relaxation import RelaxationLabeling

__all__ = [
    "InferenceMethod",
    "InferenceState",
    "InferenceListener",
    "DoubleBuffer",
    "NullInference",
    "IterativeClassification",
    "RelaxationLabeling",
    "GibbsSampling",
    "InferenceStrategy",
    "create_inference",
    "get_inference_class",
]
