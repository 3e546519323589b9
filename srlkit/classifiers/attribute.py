"""
srlkit/classifiers/attribute.py

Categorical label attribute.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LabelAttribute:
    """
    A categorical attribute whose values are the class labels.

    Attributes:
        name: Attribute name (also the node-data key in a networkx graph)
        tokens: Class tokens; position is the class index
    """
    name: str
    tokens: Tuple[str, ...]

    def __post_init__(self):
        tokens = tuple(str(t) for t in self.tokens)
        if len(set(tokens)) != len(tokens):
            raise ValueError(f"Duplicate tokens in attribute '{self.name}': {tokens}")
        object.__setattr__(self, "tokens", tokens)

    @property
    def size(self) -> int:
        return len(self.tokens)

    def token(self, index: int) -> str:
        """Token for a class index."""
        if index < 0 or index >= len(self.tokens):
            raise ValueError(f"Class index {index} out of range [0:{len(self.tokens)}]")
        return self.tokens[index]

    def index(self, token: str) -> int:
        """Class index of a token, or -1 if the token is not known."""
        try:
            return self.tokens.index(str(token))
        except ValueError:
            return -1

    def __len__(self) -> int:
        return len(self.tokens)

    def __str__(self) -> str:
        return f"{self.name}{{{','.join(self.tokens)}}}"
