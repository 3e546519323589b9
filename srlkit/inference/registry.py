"""
srlkit/inference/registry.py

Closed set of inference strategies, selected by name.
"""

from __future__ import annotations

from enum import Enum
from typing import Type, Union

from srlkit.core.config import Configuration
from srlkit.core.vector_math import RandomSource
from srlkit.exceptions import ConfigurationError
from srlkit.inference.base import ConfigLike, InferenceMethod
from srlkit.inference.gibbs import GibbsSampling
from srlkit.inference.iterative import IterativeClassification
from srlkit.inference.null import NullInference
from srlkit.inference.relaxation import RelaxationLabeling


class InferenceStrategy(Enum):
    NULL = "null"
    ITERATIVE = "iterative"
    RELAXATION = "relaxation"
    GIBBS = "gibbs"

    @classmethod
    def parse(cls, name: Union[str, "InferenceStrategy"]) -> "InferenceStrategy":
        """Strategy for a name or alias (case and separators ignored)."""
        if isinstance(name, InferenceStrategy):
            return name
        key = str(name).strip().lower().replace("-", "").replace("_", "")
        try:
            return _ALIASES[key]
        except KeyError:
            raise ConfigurationError(f"Inference method {name} not supported", option="method") from None


_ALIASES = {
    "null": InferenceStrategy.NULL,
    "none": InferenceStrategy.NULL,
    "nullinference": InferenceStrategy.NULL,
    "iterative": InferenceStrategy.ITERATIVE,
    "ica": InferenceStrategy.ITERATIVE,
    "iterativeclassification": InferenceStrategy.ITERATIVE,
    "relaxation": InferenceStrategy.RELAXATION,
    "rl": InferenceStrategy.RELAXATION,
    "relaxationlabeling": InferenceStrategy.RELAXATION,
    "gibbs": InferenceStrategy.GIBBS,
    "gibbssampling": InferenceStrategy.GIBBS,
}


def get_inference_class(strategy: Union[str, InferenceStrategy]) -> Type[InferenceMethod]:
    """Returns a constructor"""
    strategy = InferenceStrategy.parse(strategy)
    if strategy is InferenceStrategy.NULL:
        return NullInference
    elif strategy is InferenceStrategy.ITERATIVE:
        return IterativeClassification
    elif strategy is InferenceStrategy.RELAXATION:
        return RelaxationLabeling
    elif strategy is InferenceStrategy.GIBBS:
        return GibbsSampling
    raise ConfigurationError(f"Inference method {strategy} not supported", option="method")


def create_inference(
    strategy: Union[str, InferenceStrategy],
    config: ConfigLike = None,
    rng: RandomSource = None,
) -> InferenceMethod:
    """
    Build and configure an inference method.

    Args:
        strategy: Strategy or name/alias ("ica", "rl", "gibbs", ...)
        config: Options for the method; None uses its defaults
        rng: Seed or Generator for the method's random source

    Returns:
        A configured InferenceMethod
    """
    cls = get_inference_class(strategy)
    return cls(Configuration.coerce(config), rng=rng)
