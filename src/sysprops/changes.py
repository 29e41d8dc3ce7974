"""Write decisions for properties and attachments."""

from __future__ import annotations

import hashlib
from typing import Any

from sysprops.errors import DigestError

DIGEST_ALGORITHM = "sha256"


def property_needs_write(old: Any, new: Any, *, missing: bool = False) -> bool:
    """True when the property did not exist yet or its value differs."""
    if missing:
        return True
    return new != old


def content_digest(data: bytes) -> bytes:
    try:
        digest = hashlib.new(DIGEST_ALGORITHM)
    except ValueError as e:
        raise DigestError(f"Digest algorithm {DIGEST_ALGORITHM} unavailable") from e
    digest.update(data)
    return digest.digest()


def attachment_needs_write(existing: bytes | None, candidate: bytes) -> bool:
    """True when there is no current attachment or its content hash differs.

    Digests are compared byte-wise.
    """
    candidate_sum = content_digest(candidate)
    if existing is None:
        return True
    return content_digest(existing) != candidate_sum
