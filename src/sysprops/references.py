"""Entity references and the string resolver for key suffixes.

Syntax (``\\`` escapes the next character):

    document:   [wiki:]Space.Sub.Page
    property:   <document>^Class.Name[<number>].<property>
    attachment: <document>@<file name>
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sysprops.errors import ParseError

ESCAPE = "\\"
WIKI_SEPARATOR = ":"
SPACE_SEPARATOR = "."
OBJECT_SEPARATOR = "^"
PROPERTY_SEPARATOR = "."
ATTACHMENT_SEPARATOR = "@"
DEFAULT_SPACE = "Main"

_OBJECT_NUMBER = re.compile(r"^(.*)\[(\d+)\]$", re.DOTALL)
_ESCAPED_CHAR = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class DocumentReference:
    wiki: str
    spaces: tuple[str, ...]
    name: str

    def __str__(self) -> str:
        return f"{self.wiki}:{'.'.join(self.spaces)}.{self.name}"


@dataclass(frozen=True)
class ObjectReference:
    document: DocumentReference
    class_name: str
    number: int | None = None

    def __str__(self) -> str:
        suffix = f"[{self.number}]" if self.number is not None else ""
        return f"{self.document}^{self.class_name}{suffix}"


@dataclass(frozen=True)
class ObjectPropertyReference:
    object: ObjectReference
    name: str

    @property
    def document(self) -> DocumentReference:
        return self.object.document

    def __str__(self) -> str:
        return f"{self.object}.{self.name}"


@dataclass(frozen=True)
class AttachmentReference:
    document: DocumentReference
    name: str

    def __str__(self) -> str:
        return f"{self.document}@{self.name}"


def _separator_positions(text: str, sep: str) -> list[int]:
    """Indexes of ``sep`` in ``text`` that are not preceded by an escape."""
    positions = []
    i = 0
    while i < len(text):
        if text[i] == ESCAPE:
            i += 2
            continue
        if text[i] == sep:
            positions.append(i)
        i += 1
    return positions


def _unescape(text: str) -> str:
    return _ESCAPED_CHAR.sub(r"\1", text)


class ReferenceResolver:
    """Resolve key suffixes relative to the wiki (scope) they were found under."""

    def resolve_document(self, text: str, wiki: str) -> DocumentReference:
        wiki_marks = _separator_positions(text, WIKI_SEPARATOR)
        if wiki_marks:
            wiki, text = _unescape(text[: wiki_marks[0]]), text[wiki_marks[0] + 1 :]
            if not wiki:
                raise ParseError(f"Empty wiki name in document reference [{text}]")

        segments = []
        start = 0
        for pos in _separator_positions(text, SPACE_SEPARATOR):
            segments.append(text[start:pos])
            start = pos + 1
        segments.append(text[start:])
        segments = [_unescape(s) for s in segments]

        if any(not s for s in segments):
            raise ParseError(f"Empty segment in document reference [{text}]")
        if len(segments) == 1:
            return DocumentReference(wiki, (DEFAULT_SPACE,), segments[0])
        return DocumentReference(wiki, tuple(segments[:-1]), segments[-1])

    def resolve_property(self, text: str, wiki: str) -> ObjectPropertyReference:
        """Resolve ``<document>^<Class>[n].<property>``."""
        object_marks = _separator_positions(text, OBJECT_SEPARATOR)
        if not object_marks:
            raise ParseError(f"Missing '{OBJECT_SEPARATOR}' in property reference [{text}]")
        document_part = text[: object_marks[0]]
        object_part = text[object_marks[0] + 1 :]

        property_marks = _separator_positions(object_part, PROPERTY_SEPARATOR)
        if not property_marks:
            raise ParseError(f"Missing property name in property reference [{text}]")
        class_part = object_part[: property_marks[-1]]
        property_name = _unescape(object_part[property_marks[-1] + 1 :])

        number = None
        match = _OBJECT_NUMBER.match(class_part)
        if match:
            class_part, number = match.group(1), int(match.group(2))
        class_name = _unescape(class_part)

        if not class_name or not property_name:
            raise ParseError(f"Empty class or property name in property reference [{text}]")

        document = self.resolve_document(document_part, wiki)
        return ObjectPropertyReference(ObjectReference(document, class_name, number), property_name)

    def resolve_attachment(self, text: str, wiki: str) -> AttachmentReference:
        """Resolve ``<document>@<file name>``."""
        marks = _separator_positions(text, ATTACHMENT_SEPARATOR)
        if not marks:
            raise ParseError(f"Missing '{ATTACHMENT_SEPARATOR}' in attachment reference [{text}]")
        name = _unescape(text[marks[-1] + 1 :])
        if not name:
            raise ParseError(f"Empty file name in attachment reference [{text}]")
        document = self.resolve_document(text[: marks[-1]], wiki)
        return AttachmentReference(document, name)
