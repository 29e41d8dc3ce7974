"""Tagged property values and quote sanitization."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Union

DOUBLE_QUOTE = '"'


@dataclass(frozen=True)
class TextValue:
    """A plain string value, as read from the environment or a properties file."""

    text: str


@dataclass(frozen=True)
class BinarySourceValue:
    """Where to read attachment bytes from: a URI string or a local path."""

    source: Union[str, os.PathLike]


Value = Union[TextValue, BinarySourceValue]


@dataclass(frozen=True)
class ConfigEntry:
    """One externally supplied key/value pair."""

    key: str
    value: Value


def to_value(raw: Any) -> Value:
    """Wrap a raw mapping value into its tagged variant."""
    if isinstance(raw, (TextValue, BinarySourceValue)):
        return raw
    if isinstance(raw, str):
        return TextValue(raw)
    if isinstance(raw, os.PathLike):
        return BinarySourceValue(raw)
    return TextValue(str(raw))


def sanitize(value: Value, trim_double_quotes: bool) -> Value:
    """Strip one pair of wrapping double quotes from a text value, if enabled.

    A lone ``"`` is left untouched: both ends must be distinct characters.
    """
    if not trim_double_quotes or not isinstance(value, TextValue):
        return value
    text = value.text
    if len(text) >= 2 and text.startswith(DOUBLE_QUOTE) and text.endswith(DOUBLE_QUOTE):
        return TextValue(text[1:-1])
    return value
