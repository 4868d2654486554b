"""Placeholder expansion for templates such as log paths and mail bodies.

A placeholder looks like ``{{placeholder|:|udf_name|:|arg1|:|arg2}}``.
Supported functions:

- ``simple_mapping|:|key``: the value stored under ``key``
- ``get_time|:|format|:|offset_ms``: the current time, shifted, formatted
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping, Sequence

from .dateutil import format_now_with_diff

SEPARATOR = "|:|"
_PATTERN = re.compile(r"\{\{placeholder\|:\|([^}]+)\}\}")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _parse_offset(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        return 0
    value = int(text)
    return value if _I64_MIN <= value <= _I64_MAX else 0


class PlaceholderUtil:
    """Expands placeholders using a key/value mapping and the clock."""

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        self.mapping: dict[str, str] = dict(mapping or {})

    def init(self, mapping: Mapping[str, str]) -> None:
        """Replace the mapping used by ``simple_mapping``."""
        self.mapping = dict(mapping)

    def _simple_mapping(self, args: Sequence[str]) -> str:
        if not args:
            return ""
        return self.mapping.get(args[0], "")

    def _get_time(self, args: Sequence[str]) -> str:
        if not args:
            return ""
        offset_ms = _parse_offset(args[1]) if len(args) > 1 else 0
        return format_now_with_diff(args[0], offset_ms)

    def _expand(self, match: re.Match[str]) -> str:
        udf_name, *args = match.group(1).split(SEPARATOR)
        if udf_name == "simple_mapping":
            return self._simple_mapping(args)
        if udf_name == "get_time":
            return self._get_time(args)
        return "{placeholder" + SEPARATOR + udf_name + SEPARATOR + SEPARATOR.join(args)

    def replace_placeholders(self, template: str) -> str:
        """Return ``template`` with every placeholder expanded."""
        return _PATTERN.sub(self._expand, template)


_lock = threading.Lock()
_global_util: PlaceholderUtil | None = None
_initialized = False


def init_global(mapping: Mapping[str, str]) -> None:
    """Set up the shared instance; only the first call has an effect."""
    global _global_util, _initialized
    with _lock:
        if _initialized:
            return
        _initialized = True
        _global_util = PlaceholderUtil(mapping)


def add_global_mapping(key: str, value: str) -> None:
    """Add one key/value pair to the shared mapping, creating it if needed."""
    global _global_util
    with _lock:
        if _global_util is None:
            _global_util = PlaceholderUtil()
        _global_util.mapping[key] = value


def replace_placeholders(template: str) -> str:
    """Expand with the shared instance, or return the template unchanged."""
    with _lock:
        util = _global_util
    if util is None:
        return template
    return util.replace_placeholders(template)


def _reset_global() -> None:
    global _global_util, _initialized
    with _lock:
        _global_util = None
        _initialized = False