"""
srlkit/core/vector_math.py

Vector helpers shared by the estimate types and the inference strategies.

All vectors are 1-D float arrays of class scores. Scores are non-negative but
are not required to sum to one.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

RandomSource = Union[None, int, np.random.Generator]


def make_rng(seed: RandomSource = None) -> np.random.Generator:
    """
    Build a random generator.

    Args:
        seed: None for fresh entropy, an int seed, or an existing Generator
            (returned unchanged)

    Returns:
        numpy Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def argmax(vector: Optional[np.ndarray]) -> int:
    """Index of the first maximum, or -1 for a missing or empty vector."""
    if vector is None or len(vector) == 0:
        return -1
    return int(np.argmax(vector))


def sample_index(vector: Optional[np.ndarray], rng: np.random.Generator) -> int:
    """
    Draw a class index with probability proportional to its score.

    Classes with zero score are never drawn.

    Returns:
        Sampled index, or -1 when the vector is missing or sums to zero
    """
    if vector is None:
        return -1
    cumulative = np.cumsum(vector, dtype=np.float64)
    if cumulative.size == 0 or cumulative[-1] <= 0.0:
        return -1
    r = rng.random() * cumulative[-1]
    idx = int(np.searchsorted(cumulative, r, side="right"))
    return min(idx, cumulative.size - 1)


def normalize(vector: np.ndarray) -> np.ndarray:
    """Scale a vector in place to sum to one. All-zero vectors are left as is."""
    total = float(np.sum(vector))
    if total > 0.0:
        vector /= total
    return vector


def merge(beta: float, old: np.ndarray, new: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Damped update: beta * new + (1 - beta) * old, elementwise.

    Args:
        beta: Weight of the new vector in [0, 1]
        old: Previous vector
        new: Freshly predicted vector
        out: Optional destination (may alias new or old)

    Returns:
        The merged vector
    """
    merged = beta * np.asarray(new, dtype=np.float64) + (1.0 - beta) * np.asarray(old, dtype=np.float64)
    if out is None:
        return merged
    out[:] = merged
    return out


def one_hot_table(num_classes: int) -> np.ndarray:
    """K x K identity rows used to turn a class index into a one-hot vector."""
    return np.eye(num_classes, dtype=np.float64)
