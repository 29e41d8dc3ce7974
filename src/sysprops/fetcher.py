"""Attachment fetcher: resolve a source URI to raw bytes.

Supported schemes: http, https, file, data. Anything else is a FetchError.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path
from urllib.parse import unquote, unquote_to_bytes, urlsplit

import requests

from sysprops.errors import FetchError
from sysprops.values import BinarySourceValue, Value

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "sysprops/0.1"}


def resolve_source(value: Value) -> str:
    """Return the URI string an attachment value points to."""
    if isinstance(value, BinarySourceValue):
        source = value.source
        if isinstance(source, os.PathLike):
            return Path(source).resolve().as_uri()
        return str(source)
    return value.text


class AttachmentFetcher:
    """Fetch attachment payloads over HTTP(S), from local files or from data URIs."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def fetch(self, uri: str, reference: object = None) -> bytes:
        try:
            scheme = urlsplit(uri).scheme.lower()
        except ValueError as e:
            raise FetchError(f"Invalid attachment URI: {e}", uri) from e
        if scheme in ("http", "https"):
            data = self._fetch_http(uri)
        elif scheme == "file":
            data = self._fetch_file(uri)
        elif scheme == "data":
            data = self._decode_data_uri(uri)
        else:
            raise FetchError(f"Unsupported attachment URI scheme [{scheme}]", uri)
        logger.debug("Fetched %d bytes for attachment [%s] from [%s]", len(data), reference, uri)
        return data

    def _fetch_http(self, uri: str) -> bytes:
        try:
            with requests.Session() as session:
                with session.get(uri, headers=HEADERS, timeout=self.timeout) as response:
                    response.raise_for_status()
                    return response.content
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch URL: {e}", uri) from e

    def _fetch_file(self, uri: str) -> bytes:
        parts = urlsplit(uri)
        if parts.netloc not in ("", "localhost"):
            raise FetchError(f"Remote file host [{parts.netloc}] is not supported", uri)
        path = Path(unquote(parts.path))
        try:
            with path.open("rb") as f:
                return f.read()
        except OSError as e:
            raise FetchError(f"Failed to read file [{path}]: {e}", uri) from e

    @staticmethod
    def _decode_data_uri(uri: str) -> bytes:
        """Decode ``data:[<mediatype>][;base64],<data>``; incomplete URIs are rejected."""
        header, sep, payload = uri[len("data:") :].partition(",")
        if not sep:
            raise FetchError("Incomplete data URI (missing ',')", uri)
        params = header.split(";")
        if params[-1].strip().lower() == "base64":
            try:
                return base64.b64decode(unquote(payload), validate=True)
            except (binascii.Error, ValueError) as e:
                raise FetchError(f"Malformed base64 payload in data URI: {e}", uri) from e
        return unquote_to_bytes(payload)
