"""
validation/sanitize.py
----------------------
Strips markup and script vectors from free-text input before it is stored.
"""

import re
from collections.abc import Mapping
from typing import Any

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_URI = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def sanitize_text(value: Any) -> Any:
    """
    Remove ``<``/``>``, ``javascript:`` prefixes and ``onxxx=`` handler
    patterns from strings, then trim.

    Lists, tuples and dicts are sanitized recursively (dict keys are left
    alone). Any other value is returned unchanged.
    """
    if isinstance(value, str):
        value = _ANGLE_BRACKETS.sub("", value)
        value = _JAVASCRIPT_URI.sub("", value)
        value = _EVENT_HANDLER.sub("", value)
        return value.strip()
    if isinstance(value, Mapping):
        return {key: sanitize_text(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sanitize_text(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_text(item) for item in value)
    return value
