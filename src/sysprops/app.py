"""Component wiring: build the store, manager and listener from config.

Usage: python -m sysprops [apply|wiki|flavor]
"""

from __future__ import annotations

import logging

from sysprops.config import SyspropsConfig, load_config
from sysprops.fetcher import AttachmentFetcher
from sysprops.listener import Event, PropertiesSetterListener, StaticFlavorManager
from sysprops.manager import ReconciliationManager
from sysprops.references import ReferenceResolver
from sysprops.sources import SystemPropertySource
from sysprops.store.files import FileDocumentStore

logger = logging.getLogger(__name__)


class SyspropsApp:
    """Holds the configured components and dispatches lifecycle events to them."""

    def __init__(self, config: SyspropsConfig | None = None) -> None:
        self.config = config or load_config()
        self.store = FileDocumentStore(self.config.store_dir)
        self.manager = self._build_manager()
        self.listener = self._build_listener()

    # ── Build components ─────────────────────────────────────

    def _build_manager(self) -> ReconciliationManager:
        return ReconciliationManager(
            self.store,
            resolver=ReferenceResolver(),
            fetcher=AttachmentFetcher(timeout=self.config.updater.http_timeout),
            source=SystemPropertySource(self.config.config_path),
            trim_double_quotes=self.config.updater.trim_double_quotes,
        )

    def _build_listener(self) -> PropertiesSetterListener:
        return PropertiesSetterListener(
            self.manager,
            flavor_manager=StaticFlavorManager(self.config.flavors),
            main_wiki=self.config.main_wiki,
        )

    # ── Dispatch ─────────────────────────────────────────────

    def fire(self, event: Event) -> list[str]:
        """Deliver an event to the listener. Returns the wikis that were updated."""
        logger.debug("Firing %r", event)
        return self.listener.on_event(event)
