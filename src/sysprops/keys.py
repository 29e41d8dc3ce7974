"""Namespaced key parsing: ``<kind>:<scope>:<suffix>``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

PROPERTY_PREFIX = "property"
ATTACHMENT_PREFIX = "attachment"
PREFIX_TEMPLATE = "%s:%s:"


@dataclass(frozen=True)
class PropertyKey:
    """Key targeting an object property; ``suffix`` is a property reference string."""

    scope: str
    suffix: str


@dataclass(frozen=True)
class AttachmentKey:
    """Key targeting a document attachment; ``suffix`` is an attachment reference string."""

    scope: str
    suffix: str


ParsedKey = Union[PropertyKey, AttachmentKey]


def key_prefixes(scope: str) -> tuple[str, str]:
    """Return the (property, attachment) prefixes for a scope."""
    return (
        PREFIX_TEMPLATE % (PROPERTY_PREFIX, scope),
        PREFIX_TEMPLATE % (ATTACHMENT_PREFIX, scope),
    )


def parse_key(raw_key: object, scope: str) -> ParsedKey | None:
    """Classify a raw key for ``scope``. Returns None when the key is not ours."""
    if not isinstance(raw_key, str):
        return None
    property_prefix, attachment_prefix = key_prefixes(scope)
    if raw_key.startswith(property_prefix):
        return PropertyKey(scope, raw_key[len(property_prefix) :])
    if raw_key.startswith(attachment_prefix):
        return AttachmentKey(scope, raw_key[len(attachment_prefix) :])
    return None
