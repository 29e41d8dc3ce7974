"""Lifecycle events and the listener that turns them into reconciliation passes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from sysprops.manager import ReconciliationManager

logger = logging.getLogger(__name__)

FLAVOR_CATEGORY = "flavor"
WIKI_NAMESPACE_PREFIX = "wiki:"


@dataclass(frozen=True)
class ExtensionId:
    id: str
    version: str | None = None

    @classmethod
    def parse(cls, text: str) -> ExtensionId:
        """Parse ``id`` or ``id@version``."""
        ext_id, sep, version = text.rpartition("@")
        if not sep:
            return cls(text)
        return cls(ext_id, version or None)

    def __str__(self) -> str:
        return f"{self.id}@{self.version}" if self.version else self.id


@dataclass(frozen=True)
class InstalledExtension:
    id: ExtensionId
    category: str = ""
    namespaces: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ApplicationReadyEvent:
    pass


@dataclass(frozen=True)
class WikiReadyEvent:
    wiki_id: str


@dataclass(frozen=True)
class ExtensionInstalledEvent:
    extension: InstalledExtension


@dataclass(frozen=True)
class ExtensionUpgradedEvent:
    extension: InstalledExtension
    previous: tuple[InstalledExtension, ...] = field(default_factory=tuple)


Event = Union[ApplicationReadyEvent, WikiReadyEvent, ExtensionInstalledEvent, ExtensionUpgradedEvent]


@runtime_checkable
class FlavorManager(Protocol):
    def get_flavor_of_wiki(self, wiki_id: str) -> ExtensionId | None: ...


class StaticFlavorManager:
    """Flavors known up front, as ``wiki id -> "extension-id[@version]"``."""

    def __init__(self, flavors: Mapping[str, str] | None = None) -> None:
        self._flavors = {wiki: ExtensionId.parse(ext) for wiki, ext in (flavors or {}).items()}

    def get_flavor_of_wiki(self, wiki_id: str) -> ExtensionId | None:
        return self._flavors.get(wiki_id)


class PropertiesSetterListener:
    """Apply system properties when the application, a wiki or a wiki flavor becomes ready."""

    name = "SystemPropertiesPropertiesSetterListener"

    def __init__(
        self,
        manager: ReconciliationManager,
        flavor_manager: FlavorManager | None = None,
        main_wiki: str = "xwiki",
    ) -> None:
        self.manager = manager
        self.flavor_manager = flavor_manager or StaticFlavorManager()
        self.main_wiki = main_wiki

    def on_event(self, event: Event) -> list[str]:
        """Handle one event. Returns the wikis that were updated."""
        if isinstance(event, ApplicationReadyEvent):
            logger.info("Applying system properties on main wiki.")
            self.manager.update_properties(self.main_wiki)
            return [self.main_wiki]
        if isinstance(event, WikiReadyEvent):
            logger.info("Applying system properties on wiki [%s]", event.wiki_id)
            self.manager.update_properties(event.wiki_id)
            return [event.wiki_id]
        if isinstance(event, (ExtensionInstalledEvent, ExtensionUpgradedEvent)):
            return self._on_extension(event.extension)
        logger.debug("Ignoring event %r", event)
        return []

    def _on_extension(self, extension: InstalledExtension) -> list[str]:
        if extension.namespaces is None or extension.category != FLAVOR_CATEGORY:
            return []
        updated = []
        for namespace in extension.namespaces:
            wiki_id = namespace.removeprefix(WIKI_NAMESPACE_PREFIX)
            wiki_flavor = self.flavor_manager.get_flavor_of_wiki(wiki_id)
            if extension.id == wiki_flavor:
                logger.info(
                    "Applying system properties on wiki [%s] following installation or upgrade of flavor [%s]",
                    wiki_id,
                    wiki_flavor,
                )
                self.manager.update_properties(wiki_id)
                updated.append(wiki_id)
        return updated
