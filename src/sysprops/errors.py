"""Error taxonomy for the reconciliation engine.

Every error below is recovered per entry by the manager; none of them is
allowed to escape a reconciliation pass.
"""

from __future__ import annotations


class SyspropsError(Exception):
    """Base class for all sysprops errors."""


class ParseError(SyspropsError):
    """A key suffix could not be resolved into a reference."""


class FetchError(SyspropsError):
    """Attachment bytes could not be fetched from their source."""

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(message)
        self.uri = uri


class DigestError(SyspropsError):
    """The content hashing algorithm is unavailable."""


class StoreError(SyspropsError):
    """The document store failed to load or save a document."""
