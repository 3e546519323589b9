"""
srlkit/exceptions.py

Exception hierarchy for the toolkit.

All toolkit errors inherit from SRLKitError so callers can catch them with a
single except clause. Length mismatches and invalid class indices on the data
types are programming errors and raise ValueError instead.
"""

from __future__ import annotations

from typing import Optional


class SRLKitError(Exception):
    """
    Base exception for all toolkit errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
    """

    code: str = "srlkit_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SRLKitError):
    """
    An option could not be interpreted.

    Raised for malformed numeric option strings and unknown strategy names.
    Out-of-range values are clamped by the component reading them instead.

    Attributes:
        option: Name of the offending option, if any
    """

    code: str = "configuration_error"

    def __init__(self, message: str, option: Optional[str] = None) -> None:
        self.option = option
        super().__init__(message)


class IllegalStateError(SRLKitError):
    """An operation was called before its preconditions were met."""

    code: str = "illegal_state"
