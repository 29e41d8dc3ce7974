"""Tests for lifecycle event handling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sysprops.listener import (
    ApplicationReadyEvent,
    ExtensionId,
    ExtensionInstalledEvent,
    ExtensionUpgradedEvent,
    FlavorManager,
    InstalledExtension,
    PropertiesSetterListener,
    StaticFlavorManager,
    WikiReadyEvent,
)

FLAVOR = ExtensionId("org.example:flavor", "1.0")


@pytest.fixture
def manager() -> MagicMock:
    return MagicMock()


@pytest.fixture
def listener(manager: MagicMock) -> PropertiesSetterListener:
    flavors = StaticFlavorManager({"sub1": "org.example:flavor@1.0", "sub2": "org.example:other@1.0"})
    return PropertiesSetterListener(manager, flavors, main_wiki="xwiki")


def flavor_extension(*namespaces: str, category: str = "flavor", ext_id: ExtensionId = FLAVOR):
    return InstalledExtension(id=ext_id, category=category, namespaces=namespaces)


class TestExtensionId:
    def test_parse_with_version(self):
        assert ExtensionId.parse("org.example:flavor@1.0") == FLAVOR

    def test_parse_without_version(self):
        assert ExtensionId.parse("org.example:flavor") == ExtensionId("org.example:flavor")

    def test_str(self):
        assert str(FLAVOR) == "org.example:flavor@1.0"
        assert str(ExtensionId("x")) == "x"


class TestStaticFlavorManager:
    def test_lookup(self):
        flavors = StaticFlavorManager({"sub1": "org.example:flavor@1.0"})
        assert isinstance(flavors, FlavorManager)
        assert flavors.get_flavor_of_wiki("sub1") == FLAVOR
        assert flavors.get_flavor_of_wiki("unknown") is None


class TestPropertiesSetterListener:
    def test_application_ready(self, listener: PropertiesSetterListener, manager: MagicMock):
        assert listener.on_event(ApplicationReadyEvent()) == ["xwiki"]
        manager.update_properties.assert_called_once_with("xwiki")

    def test_custom_main_wiki(self, manager: MagicMock):
        listener = PropertiesSetterListener(manager, main_wiki="main")
        listener.on_event(ApplicationReadyEvent())
        manager.update_properties.assert_called_once_with("main")

    def test_wiki_ready(self, listener: PropertiesSetterListener, manager: MagicMock):
        assert listener.on_event(WikiReadyEvent("sub1")) == ["sub1"]
        manager.update_properties.assert_called_once_with("sub1")

    @pytest.mark.parametrize("event_cls", [ExtensionInstalledEvent, ExtensionUpgradedEvent])
    def test_active_flavor(self, listener: PropertiesSetterListener, manager: MagicMock, event_cls):
        updated = listener.on_event(event_cls(flavor_extension("wiki:sub1", "wiki:sub2", "wiki:sub3")))
        assert updated == ["sub1"]
        manager.update_properties.assert_called_once_with("sub1")

    def test_namespace_without_prefix(self, listener: PropertiesSetterListener, manager: MagicMock):
        assert listener.on_event(ExtensionInstalledEvent(flavor_extension("sub1"))) == ["sub1"]

    def test_not_a_flavor(self, listener: PropertiesSetterListener, manager: MagicMock):
        event = ExtensionInstalledEvent(flavor_extension("wiki:sub1", category="application"))
        assert listener.on_event(event) == []
        manager.update_properties.assert_not_called()

    def test_installed_on_farm(self, listener: PropertiesSetterListener, manager: MagicMock):
        event = ExtensionInstalledEvent(InstalledExtension(id=FLAVOR, category="flavor", namespaces=None))
        assert listener.on_event(event) == []
        manager.update_properties.assert_not_called()

    def test_other_version_is_not_active(self, listener: PropertiesSetterListener, manager: MagicMock):
        event = ExtensionUpgradedEvent(
            flavor_extension("wiki:sub1", ext_id=ExtensionId("org.example:flavor", "2.0"))
        )
        assert listener.on_event(event) == []
        manager.update_properties.assert_not_called()

    def test_unknown_event(self, listener: PropertiesSetterListener, manager: MagicMock):
        assert listener.on_event(object()) == []
        manager.update_properties.assert_not_called()
