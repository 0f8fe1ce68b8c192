"""
Tests for local settings persistence.
"""

import json

from atia.ui.settings_store import DashboardSettings, SettingsStore


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """No file means default settings."""
        store = SettingsStore(path=tmp_path / "settings.json", key="atia_settings")

        record = store.load()

        assert record == DashboardSettings()
        assert record.database_name == "atia"

    def test_save_writes_whole_record_under_key(self, tmp_path):
        """The whole record is stored under one key."""
        path = tmp_path / "nested" / "settings.json"
        store = SettingsStore(path=path, key="atia_settings")

        store.save(DashboardSettings(webhook_url="https://hooks.example/atia"))

        data = json.loads(path.read_text())
        assert set(data) == {"atia_settings"}
        assert set(data["atia_settings"]) == set(DashboardSettings.model_fields)
        assert store.load().webhook_url == "https://hooks.example/atia"

    def test_last_write_wins(self, tmp_path):
        """A save replaces the previous record."""
        store = SettingsStore(path=tmp_path / "settings.json", key="atia_settings")

        store.save(DashboardSettings(database_name="first"))
        store.save(DashboardSettings(mongodb_uri="mongodb://db:27017"))

        record = store.load()
        assert record.mongodb_uri == "mongodb://db:27017"
        assert record.database_name == "atia"

    def test_other_keys_preserved(self, tmp_path):
        """Unrelated keys in the file survive a save."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"theme": "dark"}))
        store = SettingsStore(path=path, key="atia_settings")

        store.save(DashboardSettings())

        assert json.loads(path.read_text())["theme"] == "dark"

    def test_corrupt_file_gives_defaults(self, tmp_path):
        """Unparseable files give defaults."""
        path = tmp_path / "settings.json"
        path.write_text("{not json")

        assert SettingsStore(path=path, key="atia_settings").load() == DashboardSettings()

    def test_invalid_record_gives_defaults(self, tmp_path):
        """Records failing validation give defaults."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"atia_settings": {"database_name": ["not", "a", "string"]}}))

        assert SettingsStore(path=path, key="atia_settings").load() == DashboardSettings()
