"""
srlkit/core/config.py

String-keyed option store used to configure inference methods and classifiers.

Options arrive as strings (command line, files) or as Python numbers. Parsing
is lazy: a malformed value only fails when a component asks for it with a
typed getter, and then fails with ConfigurationError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from srlkit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

OptionValue = Union[str, int, float, bool]

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


class Configuration:
    """
    Option store with an optional parent holding defaults.

    Lookups check this store first, then the parent chain, then the default
    passed by the caller.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, OptionValue]] = None,
        defaults: Optional["Configuration"] = None,
    ):
        self.values: Dict[str, OptionValue] = {}
        self.defaults = defaults
        if values:
            for name, value in values.items():
                self.set(name, value)

    @classmethod
    def from_string(cls, text: str, defaults: Optional["Configuration"] = None) -> "Configuration":
        """
        Parse a comma separated list of key=value pairs.

        Example:
            >>> cfg = Configuration.from_string("numit=10, beta=0.5")
            >>> cfg.get_int("numit", 100)
            10
        """
        cfg = cls(defaults=defaults)
        for part in text.split(","):
            part = part.strip()
            if not part:
                continue
            if "=" not in part:
                raise ConfigurationError(f"Malformed option '{part}', expected key=value", option=part)
            name, value = part.split("=", 1)
            cfg.set(name.strip(), value.strip())
        return cfg

    @staticmethod
    def coerce(config: Union["Configuration", Mapping[str, OptionValue], str, None]) -> "Configuration":
        """Wrap a mapping, option string or None into a Configuration."""
        if isinstance(config, Configuration):
            return config
        if config is None:
            return Configuration()
        if isinstance(config, str):
            return Configuration.from_string(config)
        return Configuration(config)

    def set(self, name: str, value: OptionValue) -> None:
        self.values[name.lower()] = value

    def _lookup(self, name: str) -> Optional[OptionValue]:
        key = name.lower()
        if key in self.values:
            return self.values[key]
        if self.defaults is not None:
            return self.defaults._lookup(key)
        return None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._lookup(name)
        if value is None:
            return default
        return str(value)

    def get_int(self, name: str, default: int) -> int:
        value = self._lookup(name)
        if value is None:
            logger.debug("Configuration.get_int(%s)=default (%d)", name, default)
            return default
        if isinstance(value, bool):
            raise ConfigurationError(f"Option '{name}' must be an integer, got {value!r}", option=name)
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"Option '{name}' must be an integer, got {value!r}", option=name
            ) from exc

    def get_float(self, name: str, default: float) -> float:
        value = self._lookup(name)
        if value is None:
            logger.debug("Configuration.get_float(%s)=default (%s)", name, default)
            return default
        if isinstance(value, bool):
            raise ConfigurationError(f"Option '{name}' must be a number, got {value!r}", option=name)
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return float(str(value).strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"Option '{name}' must be a number, got {value!r}", option=name
            ) from exc

    def get_bool(self, name: str, default: bool) -> bool:
        value = self._lookup(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigurationError(f"Option '{name}' must be a boolean, got {value!r}", option=name)

    def keys(self) -> Iterator[str]:
        seen = set(self.values)
        yield from self.values
        if self.defaults is not None:
            for key in self.defaults.keys():
                if key not in seen:
                    seen.add(key)
                    yield key

    def as_dict(self) -> Dict[str, Any]:
        return {key: self._lookup(key) for key in self.keys()}

    def __contains__(self, name: str) -> bool:
        return self._lookup(name) is not None

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"Configuration({items})"
