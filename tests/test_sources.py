"""Tests for property sources."""

from __future__ import annotations

from pathlib import Path

from sysprops.sources import MappingSource, PropertySource, SystemPropertySource
from sysprops.values import BinarySourceValue, ConfigEntry, TextValue


class TestMappingSource:
    def test_entries_in_order(self):
        source = MappingSource({"b": "2", "a": "1"})
        assert isinstance(source, PropertySource)
        assert source.entries() == [ConfigEntry("b", TextValue("2")), ConfigEntry("a", TextValue("1"))]


class TestSystemPropertySource:
    def test_environment_only(self):
        source = SystemPropertySource(environ={"A": "1"})
        assert source.entries() == [ConfigEntry("A", TextValue("1"))]

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv("property:xwiki:Main.WebHome^Cls.p", "from-env")
        keys = {e.key: e.value for e in SystemPropertySource().entries()}
        assert keys["property:xwiki:Main.WebHome^Cls.p"] == TextValue("from-env")

    def test_file_properties(self, tmp_path: Path):
        path = tmp_path / "sysprops.toml"
        path.write_text("""
[properties]
"property:xwiki:Main.WebHome^Cls.p" = "v"
"property:xwiki:Main.WebHome^Cls.n" = 3
"attachment:xwiki:Main.WebHome@logo.png" = { path = "logo.png" }
""")
        entries = SystemPropertySource(path, environ={}).entries()
        assert entries == [
            ConfigEntry("property:xwiki:Main.WebHome^Cls.p", TextValue("v")),
            ConfigEntry("property:xwiki:Main.WebHome^Cls.n", TextValue("3")),
            ConfigEntry("attachment:xwiki:Main.WebHome@logo.png", BinarySourceValue(tmp_path / "logo.png")),
        ]

    def test_environment_wins(self, tmp_path: Path):
        path = tmp_path / "sysprops.toml"
        path.write_text('[properties]\nk1 = "file"\nk2 = "file"\n')
        entries = SystemPropertySource(path, environ={"k2": "env", "k3": "env"}).entries()
        assert [(e.key, e.value.text) for e in entries] == [("k1", "file"), ("k2", "env"), ("k3", "env")]

    def test_reread_on_every_call(self, tmp_path: Path):
        path = tmp_path / "sysprops.toml"
        path.write_text('[properties]\nk = "one"\n')
        environ = {"e": "1"}
        source = SystemPropertySource(path, environ=environ)
        assert [e.value.text for e in source.entries()] == ["one", "1"]

        path.write_text('[properties]\nk = "two"\n')
        environ["e"] = "2"
        assert [e.value.text for e in source.entries()] == ["two", "2"]

    def test_missing_file(self, tmp_path: Path):
        assert SystemPropertySource(tmp_path / "nope.toml", environ={}).entries() == []

    def test_malformed_file_is_logged(self, tmp_path: Path, caplog):
        path = tmp_path / "sysprops.toml"
        path.write_text("[properties\n")
        assert SystemPropertySource(path, environ={"A": "1"}).entries() == [ConfigEntry("A", TextValue("1"))]
        assert "Failed to read properties" in caplog.text

    def test_properties_not_a_table(self, tmp_path: Path, caplog):
        path = tmp_path / "sysprops.toml"
        path.write_text('properties = "oops"\n')
        assert SystemPropertySource(path, environ={"A": "1"}).entries() == [ConfigEntry("A", TextValue("1"))]
        assert "expected a table" in caplog.text
