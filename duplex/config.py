"""
Duplex configuration store.

A Config holds named settings (default, type, description) and a separate
cache of resolved values:

- reads are lazy: the first read of a key looks up the environment at the
  uppercased key, falls back to the stringified default, coerces by the
  declared type and caches the result;
- the cache is only ever overwritten by set(); later environment changes are
  not observed once a key has been read;
- undeclared keys are a usage error (UnknownSettingError), never ignored.

Example
    >>> config = Config({"DATABASE": "prod"})
    >>> _ = config.setting("database", default="dev", descr="database name")
    >>> _ = config.setting("workers", default=4, type=int)
    >>> config["database"], config["workers"]
    ('prod', 4)
    >>> _ = config.set("workers", "8")
    >>> config["workers"]
    8
"""
import logging
import os
from types import MappingProxyType
from typing import Any, NamedTuple

from .faults import FaultCode, UnknownSettingError
from .utils import Unset, coalesce, coerce

logger = logging.getLogger(__name__)


class Setting(NamedTuple):
    default: Any
    type: Any = str
    descr: str | None = None


class Config:
    def __init__(self, environ=Unset, /):
        self._environ = coalesce(environ, os.environ)
        self._settings = {}
        self._values = {}

    def setting(self, key, /, default=None, type=str, descr=None):
        """declare a setting; re-declaring a key replaces its spec (no merge)."""
        if not isinstance(key, str) or not (key := key.strip()):
            raise TypeError("Config setting key must be a non-empty string")
        self._settings[key] = Setting(default, type, descr)
        return self._settings[key]

    def _lookup(self, key):
        try:
            return self._settings[key]
        except KeyError:
            raise UnknownSettingError(
                f"unknown config key: {key}",
                code=FaultCode.UNKNOWN_SETTING,
                key=key,
                hint="type 'config' to see the available keys",
            ) from None

    def __getitem__(self, key):
        if key in self._values:
            return self._values[key]

        setting = self._lookup(key)
        raw = self._environ.get(key.upper(), "" if setting.default is None else str(setting.default))
        self._values[key] = value = coerce(raw, setting.type)
        logger.debug("resolved setting %s=%r", key, value)
        return value

    def get(self, key, /):
        return self[key]

    def set(self, key, value, /):
        setting = self._lookup(key)
        self._values[key] = coerce("" if value is None else str(value), setting.type)
        logger.debug("overrode setting %s=%r", key, self._values[key])
        return self._values[key]

    @property
    def settings(self):
        return MappingProxyType(self._settings)

    def to_dict(self):
        return {key: self[key] for key in self._settings}

    def __iter__(self):
        """yield (key, value, setting) in declaration order; each call restarts."""
        for key, setting in list(self._settings.items()):
            yield key, self[key], setting

    def __contains__(self, key):
        return key in self._settings

    def __len__(self):
        return len(self._settings)

    def __repr__(self):
        return f"config({', '.join(self._settings)})"


__all__ = (
    "Setting",
    "Config",
)
