"""
Core module: option handling and vector helpers.
"""

from srlkit.core.config import Configuration
from srlkit.core.vector_math import (
    argmax,
    make_rng,
    merge,
    normalize,
    one_hot_table,
    sample_index,
)

__all__ = [
    "Configuration",
    "argmax",
    "make_rng",
    "merge",
    "normalize",
    "one_hot_table",
    "sample_index",
]
