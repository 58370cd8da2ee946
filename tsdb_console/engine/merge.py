"""
Conversion between flat form input and nested configuration records.

A submitted form arrives as ordered (dotted key, string value) pairs such as
``("server.port", "6380")``. Each dotted key is expanded into nested mapping
levels and numeric strings are stored as numbers, giving the value of a
configuration record::

    >>> flatten_form_to_config([("server.port", "6380"), ("server.bind", "0.0.0.0")])
    {'server': {'port': 6380, 'bind': '0.0.0.0'}}

``config_to_form_entries`` is the inverse used to populate form fields from a
fetched record.

When a shorter and a longer dotted path share a prefix (``server`` and
``server.port``) the entry processed last wins at the conflicting level.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, Union

# Submitting this as a record value asks the API to delete the record
DELETE_SENTINEL = None

ConfigScalar = Union[str, int, float, None]
FormEntries = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]

PATH_SEPARATOR = "."


def coerce_value(raw: Any) -> Any:
    """Store numeric strings as numbers, leave everything else untouched.

    Integers stay integers ("6380" -> 6380), other finite numerals become
    floats ("0.5" -> 0.5). Strings that only look numeric to Python's parser
    ("1_000", "inf", "nan") stay strings. The delete sentinel and non-string
    values pass through unmodified.
    """
    if raw is DELETE_SENTINEL or not isinstance(raw, str):
        return raw

    text = raw.strip()
    if not text or "_" in text:
        return raw

    try:
        return int(text)
    except ValueError:
        pass

    try:
        number = float(text)
    except ValueError:
        return raw

    if not math.isfinite(number):
        return raw
    return number


def _iter_entries(entries: FormEntries) -> Iterable[tuple[str, Any]]:
    if isinstance(entries, Mapping):
        return entries.items()
    return entries


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def flatten_form_to_config(entries: FormEntries) -> dict[str, Any]:
    """Merge dotted form entries into one nested configuration mapping.

    Args:
        entries: Ordered (dotted key, value) pairs, or a mapping of them.

    Returns:
        Nested mapping mirroring the dotted paths. Entries whose trimmed
        value is empty are skipped.
    """
    config: dict[str, Any] = {}

    for key, value in _iter_entries(entries):
        if _is_blank(value):
            continue

        segments = key.split(PATH_SEPARATOR)
        current = config
        for segment in segments[:-1]:
            child = current.get(segment)
            if not isinstance(child, dict):
                child = {}
                current[segment] = child
            current = child

        current[segments[-1]] = coerce_value(value)

    return config


def config_to_form_entries(config: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten a nested configuration mapping into dotted form entries.

    Leaves are rendered as strings the way a form field would hold them.
    Empty nested mappings produce no entries.
    """
    entries: list[tuple[str, str]] = []
    for key, value in config.items():
        path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            entries.extend(config_to_form_entries(value, path))
        elif value is not None:
            entries.append((path, str(value)))
    return entries


def get_path(config: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    """Look up a dotted path in a nested mapping."""
    current: Any = config
    for segment in dotted_key.split(PATH_SEPARATOR):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current
