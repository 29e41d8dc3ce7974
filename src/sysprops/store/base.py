"""Document store protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from sysprops.references import DocumentReference


@dataclass
class XObject:
    """A structured object attached to a document."""

    class_name: str
    number: int = 0
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class Document:
    """Mutable document handle. Changes only persist through ``save_document``."""

    reference: DocumentReference
    content: str = ""
    objects: list[XObject] = field(default_factory=list)
    version: int = 0
    history: list[dict] = field(default_factory=list)
    pending_attachments: dict[str, bytes] = field(default_factory=dict)

    @property
    def is_new(self) -> bool:
        return self.version == 0

    def get_object(self, class_name: str, number: int | None = None) -> XObject | None:
        """First object of ``class_name``, or the one with the given number."""
        for obj in self.objects:
            if obj.class_name == class_name and (number is None or obj.number == number):
                return obj
        return None

    def new_object(self, class_name: str, number: int | None = None) -> XObject:
        if number is None:
            numbers = [o.number for o in self.objects if o.class_name == class_name]
            number = max(numbers) + 1 if numbers else 0
        obj = XObject(class_name=class_name, number=number)
        self.objects.append(obj)
        return obj


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol the reconciliation manager needs from a document store.

    ``get_document`` must return an isolated handle: mutating it never
    affects other readers until ``save_document`` is called.
    """

    def get_document(self, reference: DocumentReference) -> Document:
        """Load a document, or return a new empty one if it does not exist."""
        ...

    def get_object(
        self, document: Document, class_name: str, number: int | None = None, create: bool = True
    ) -> XObject | None: ...

    def get_property(self, obj: XObject, name: str) -> Any: ...

    def set_property(self, obj: XObject, name: str, value: Any) -> None: ...

    def get_attachment_content(self, document: Document, name: str) -> bytes | None:
        """Current attachment bytes, or None when the attachment does not exist."""
        ...

    def set_attachment_content(self, document: Document, name: str, data: bytes) -> None: ...

    def save_document(self, document: Document, comment: str) -> None:
        """Persist the handle. Raises StoreError on failure."""
        ...
