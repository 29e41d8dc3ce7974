"""File-backed document store.

Markdown files are the source of truth. Objects, version and history live in
YAML frontmatter; attachments are plain files next to the document.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from sysprops.errors import StoreError
from sysprops.references import DocumentReference
from sysprops.store.base import Document, XObject

logger = logging.getLogger(__name__)

ATTACHMENTS_SUFFIX = ".attachments"
DEFAULT_KEEP_VERSIONS = 10
BACKUP_NAME = re.compile(r"\d{8}T\d{12}\.md")


class FileDocumentStore:
    """Read/write access to documents stored under ``root``."""

    def __init__(self, root: Path, keep_versions: int = DEFAULT_KEEP_VERSIONS) -> None:
        self.root = root
        self.keep_versions = keep_versions
        self._ensure_initialized()

    def _ensure_initialized(self) -> None:
        """Ensure base directories exist. Idempotent."""
        (self.root / ".versions").mkdir(parents=True, exist_ok=True)

    # ── Paths ─────────────────────────────────────────────────

    def _slugify(self, name: str) -> str:
        """Minimal slug: strip illegal chars, spaces to hyphens."""
        slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", name)
        slug = slug.strip().replace(" ", "-")
        if slug in ("", ".", ".."):
            return "unnamed"
        return slug

    def document_path(self, reference: DocumentReference) -> Path:
        parts = [self._slugify(p) for p in (reference.wiki, *reference.spaces)]
        return self.root.joinpath(*parts) / f"{self._slugify(reference.name)}.md"

    def _attachments_dir(self, reference: DocumentReference) -> Path:
        path = self.document_path(reference)
        return path.with_name(path.stem + ATTACHMENTS_SUFFIX)

    def _attachment_path(self, reference: DocumentReference, name: str) -> Path:
        return self._attachments_dir(reference) / self._slugify(name)

    # ── Documents ─────────────────────────────────────────────

    def get_document(self, reference: DocumentReference) -> Document:
        """Load a fresh handle from disk, or a new empty document."""
        path = self.document_path(reference)
        if not path.exists():
            return Document(reference=reference)
        try:
            post = frontmatter.load(str(path))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to load document [{reference}]: {e}") from e

        meta = post.metadata
        objects = [
            XObject(
                class_name=o["class"],
                number=int(o.get("number", 0)),
                properties=dict(o.get("properties") or {}),
            )
            for o in meta.get("objects") or []
        ]
        return Document(
            reference=reference,
            content=post.content,
            objects=objects,
            version=int(meta.get("version", 0)),
            history=list(meta.get("history") or []),
        )

    def get_object(
        self, document: Document, class_name: str, number: int | None = None, create: bool = True
    ) -> XObject | None:
        obj = document.get_object(class_name, number)
        if obj is None and create:
            obj = document.new_object(class_name, number)
        return obj

    def get_property(self, obj: XObject, name: str) -> Any:
        return obj.properties.get(name)

    def set_property(self, obj: XObject, name: str, value: Any) -> None:
        obj.properties[name] = value

    # ── Attachments ───────────────────────────────────────────

    def get_attachment_content(self, document: Document, name: str) -> bytes | None:
        if name in document.pending_attachments:
            return document.pending_attachments[name]
        path = self._attachment_path(document.reference, name)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Failed to read attachment [{document.reference}@{name}]: {e}") from e

    def set_attachment_content(self, document: Document, name: str, data: bytes) -> None:
        document.pending_attachments[name] = data

    # ── Saving ────────────────────────────────────────────────

    def save_document(self, document: Document, comment: str) -> None:
        """Write the document and its pending attachments. Previous revision goes to .versions/.

        Attachments are staged next to their final location and only moved
        into place once the markdown file has been written.
        """
        path = self.document_path(document.reference)
        version = document.version + 1
        history = document.history + [
            {
                "version": version,
                "date": datetime.now().isoformat(timespec="seconds"),
                "comment": comment,
            }
        ]
        post = frontmatter.Post(
            document.content,
            reference=str(document.reference),
            version=version,
            objects=[
                {"class": o.class_name, "number": o.number, "properties": dict(o.properties)}
                for o in document.objects
            ],
            history=history,
        )
        staged: list[tuple[Path, Path]] = []
        try:
            self._backup(path, document.reference)
            for name, data in document.pending_attachments.items():
                target = self._attachment_path(document.reference, name)
                target.parent.mkdir(parents=True, exist_ok=True)
                staging = target.with_name(f".{target.name}.tmp")
                staging.write_bytes(data)
                staged.append((staging, target))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        except (OSError, yaml.YAMLError) as e:
            for staging, _ in staged:
                staging.unlink(missing_ok=True)
            raise StoreError(f"Failed to save document [{document.reference}]: {e}") from e

        try:
            for staging, target in staged:
                staging.replace(target)
        except OSError as e:
            raise StoreError(f"Failed to store attachments of [{document.reference}]: {e}") from e

        document.version = version
        document.history = history
        document.pending_attachments.clear()
        logger.info("Saved document %s (version %d): %s", document.reference, version, comment)

    def _versions_dir(self, reference: DocumentReference) -> Path:
        parts = [self._slugify(p) for p in (reference.wiki, *reference.spaces, reference.name)]
        return self.root.joinpath(".versions", *parts)

    def _backup(self, path: Path, reference: DocumentReference) -> None:
        """Backup to .versions/<wiki>/<spaces>/<page>/, keep at most ``keep_versions``."""
        if not path.exists():
            return
        versions_dir = self._versions_dir(reference)
        versions_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        (versions_dir / f"{ts}.md").write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
        old = self.versions(reference)
        for f in old[: -self.keep_versions]:
            f.unlink()

    def versions(self, reference: DocumentReference) -> list[Path]:
        """Backed-up revisions of a document, oldest first."""
        versions_dir = self._versions_dir(reference)
        if not versions_dir.is_dir():
            return []
        return sorted(
            p for p in versions_dir.iterdir() if p.is_file() and BACKUP_NAME.fullmatch(p.name)
        )
