"""Tests for profile loading and the service built from it."""

import json

import pytest

from apps.map_server.tools.service import MapService
from hubmap.tools.config_loader import ConfigLoader, get_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HUBMAP_PROFILE", "HUBMAP_DATA_FILE", "PORT"):
        monkeypatch.delenv(name, raising=False)


class TestConfigLoader:
    def test_default_profile(self):
        config = ConfigLoader.load_profile()

        assert config["entries"]["default_radius_m"] == 5000
        assert config["hubs"]["threshold"] is None
        assert config["storage"]["data_file"] == "data.json"
        assert config["server"]["port"] == 5000

    def test_large_fleet_profile(self):
        config = ConfigLoader.load_profile("large-fleet")

        assert config["hubs"]["threshold"] == 50
        assert config["entries"]["default_radius_m"] == 8000
        assert config["geocoding"]["max_concurrency"] == 16

    def test_missing_profile_lists_available(self):
        with pytest.raises(FileNotFoundError, match="Available profiles: default, large-fleet"):
            ConfigLoader.load_profile("does-not-exist")

    def test_profile_from_env(self, monkeypatch):
        monkeypatch.setenv("HUBMAP_PROFILE", "large-fleet")

        assert ConfigLoader.get_profile_from_env() == "large-fleet"
        assert get_config()["hubs"]["threshold"] == 50

    def test_no_env_uses_default(self):
        assert ConfigLoader.get_profile_from_env() is None
        assert get_config()["hubs"]["threshold"] is None

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HUBMAP_DATA_FILE", str(tmp_path / "fleet.json"))
        monkeypatch.setenv("PORT", "8080")

        config = get_config()

        assert config["storage"]["data_file"] == str(tmp_path / "fleet.json")
        assert config["server"]["port"] == 8080


class TestServiceFromConfig:
    def test_loads_stored_entries(self, tmp_path):
        data_file = tmp_path / "data.json"
        data_file.write_text(
            json.dumps(
                [
                    {"address": "A", "coordinates": {"lat": 0, "lng": 0}, "radius": 2000, "numOfCars": "3"},
                    {"address": "B", "coordinates": {"lat": 0, "lng": 0.01}, "numOfCars": "4"},
                ]
            ),
            encoding="utf-8",
        )
        config = ConfigLoader.load_profile()
        config["storage"]["data_file"] = str(data_file)
        config["hubs"]["threshold"] = 5

        service = MapService.from_config(config)

        assert [e.address for e in service.controller.entries] == ["A", "B"]
        assert [h.member_indices for h in service.controller.hubs] == [[0, 1]]
        assert service.default_radius == 5000
        assert service.max_concurrency == 8

    def test_creates_missing_data_file(self, tmp_path):
        config = ConfigLoader.load_profile("large-fleet")
        config["storage"]["data_file"] = str(tmp_path / "new" / "data.json")

        service = MapService.from_config(config)

        assert service.controller.entries == []
        assert (tmp_path / "new" / "data.json").read_text(encoding="utf-8") == "[]"
        assert service.default_radius == 8000
        assert service.default_circle_color == "blue"
