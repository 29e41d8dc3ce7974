"""Reconciliation manager: apply system properties to wiki documents.

For one wiki (scope) and a snapshot of key/value pairs:
1. Classify each key (property / attachment / not ours)
2. Property path: sanitize, resolve, compare with the stored value, save if changed
3. Attachment path: resolve the source URI, fetch, compare digests, save if changed
4. Log and skip failing entries; the pass always completes
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sysprops.changes import attachment_needs_write, property_needs_write
from sysprops.errors import FetchError, SyspropsError
from sysprops.fetcher import AttachmentFetcher, resolve_source
from sysprops.keys import AttachmentKey, PropertyKey, parse_key
from sysprops.references import ReferenceResolver
from sysprops.values import BinarySourceValue, ConfigEntry, Value, sanitize

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sysprops.sources import PropertySource
    from sysprops.store.base import DocumentStore

logger = logging.getLogger(__name__)

PROPERTY_COMMENT = "Updated property [%s] from system properties"
ATTACHMENT_COMMENT = "Updated attachment [%s] from system properties"


@dataclass
class ReconcileReport:
    """What one reconciliation pass did, by key."""

    scope: str
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: int = 0


def _text(value: Value) -> str:
    if isinstance(value, BinarySourceValue):
        return os.fspath(value.source)
    return value.text


class ReconciliationManager:
    """Apply property and attachment entries to the document store, one wiki at a time."""

    def __init__(
        self,
        store: DocumentStore,
        resolver: ReferenceResolver | None = None,
        fetcher: AttachmentFetcher | None = None,
        source: PropertySource | None = None,
        trim_double_quotes: bool = False,
    ) -> None:
        self.store = store
        self.resolver = resolver or ReferenceResolver()
        self.fetcher = fetcher or AttachmentFetcher()
        self.source = source
        self.trim_double_quotes = trim_double_quotes

    def update_properties(self, wiki_id: str) -> ReconcileReport:
        """Apply a fresh snapshot of the property source on the given wiki."""
        if self.source is None:
            raise RuntimeError("No property source configured")
        entries = self.source.entries()
        if logger.isEnabledFor(logging.DEBUG):
            for entry in entries:
                logger.debug("Found system property [%s] with value [%s]", entry.key, entry.value)
        return self.reconcile(wiki_id, entries)

    def reconcile(self, scope: str, entries: Iterable[ConfigEntry]) -> ReconcileReport:
        report = ReconcileReport(scope)
        for entry in entries:
            parsed = parse_key(entry.key, scope)
            if parsed is None:
                report.skipped += 1
                continue
            try:
                if isinstance(parsed, PropertyKey):
                    changed = self._update_property(parsed, entry.value)
                else:
                    changed = self._update_attachment(parsed, entry.value)
            except FetchError as e:
                logger.error(
                    "Failed to fetch attachment [%s] from [%s]: %s", parsed.suffix, e.uri, e, exc_info=True
                )
                report.failed.append(entry.key)
                continue
            except SyspropsError as e:
                logger.error(
                    "Failed to apply system property [%s] with value [%s]: %s",
                    entry.key,
                    entry.value,
                    e,
                    exc_info=True,
                )
                report.failed.append(entry.key)
                continue
            except Exception:
                logger.exception("Unexpected error applying system property [%s]", entry.key)
                report.failed.append(entry.key)
                continue
            (report.updated if changed else report.unchanged).append(entry.key)

        logger.info(
            "System properties applied on wiki [%s]: %d updated, %d unchanged, %d failed",
            scope,
            len(report.updated),
            len(report.unchanged),
            len(report.failed),
        )
        return report

    def _update_property(self, key: PropertyKey, value: Value) -> bool:
        reference = self.resolver.resolve_property(key.suffix, key.scope)
        new_value = _text(sanitize(value, self.trim_double_quotes))
        logger.debug("Found object reference [%s] for document [%s]", reference, reference.document)

        document = self.store.get_document(reference.document)
        class_name, number = reference.object.class_name, reference.object.number
        obj = self.store.get_object(document, class_name, number, create=False)
        old_value = None
        if obj is None:
            obj = self.store.get_object(document, class_name, number, create=True)
        else:
            old_value = self.store.get_property(obj, reference.name)

        if not property_needs_write(old_value, new_value, missing=old_value is None):
            logger.debug("Object property [%s] is already up to date", reference)
            return False

        logger.info("Updating object property [%s] to value [%s] from system properties", reference, new_value)
        if document.is_new:
            logger.info("Creating document [%s] for object property [%s]", reference.document, reference)
        self.store.set_property(obj, reference.name, new_value)
        self.store.save_document(document, PROPERTY_COMMENT % reference.name)
        return True

    def _update_attachment(self, key: AttachmentKey, value: Value) -> bool:
        reference = self.resolver.resolve_attachment(key.suffix, key.scope)
        data = self.fetcher.fetch(resolve_source(value), reference)

        document = self.store.get_document(reference.document)
        existing = self.store.get_attachment_content(document, reference.name)
        if not attachment_needs_write(existing, data):
            logger.debug("Attachment [%s] is already up to date", reference)
            return False

        logger.info("Updating attachment [%s] (%d bytes) from system properties", reference, len(data))
        if document.is_new:
            logger.info("Creating document [%s] for attachment [%s]", reference.document, reference)
        self.store.set_attachment_content(document, reference.name, data)
        self.store.save_document(document, ATTACHMENT_COMMENT % reference.name)
        return True
