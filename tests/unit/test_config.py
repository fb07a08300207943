"""
Tests de la configuration : Settings, UserConfig et resolution de la cle API.
"""

import json
from pathlib import Path

import pytest

from cinecat.config import (
    Settings,
    UserConfig,
    load_user_config,
    resolve_api_key,
    save_user_config,
)
from cinecat.core.errors import ConfigInvalid, ConfigMissing


class TestSettings:
    def test_defaults(self, test_settings: Settings) -> None:
        assert test_settings.concurrency_limit == 10
        assert test_settings.request_timeout == 30.0
        assert test_settings.language == "en-US"

    def test_derived_paths(self, test_settings: Settings, tmp_path: Path) -> None:
        assert test_settings.config_file == tmp_path / "config" / "config.json"
        assert test_settings.catalog_file == tmp_path / "data" / "catalog.json"
        assert test_settings.poster_dir == tmp_path / "data" / "posters"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CINECAT_CONCURRENCY_LIMIT", "4")
        monkeypatch.setenv("CINECAT_DATA_DIR", str(tmp_path / "d"))

        settings = Settings()

        assert settings.concurrency_limit == 4
        assert settings.data_dir == tmp_path / "d"

    def test_tilde_is_expanded(self) -> None:
        settings = Settings(data_dir="~/cinecat-data")
        assert settings.data_dir == Path.home() / "cinecat-data"

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(concurrency_limit=0)


class TestUserConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_user_config(tmp_path / "config.json")
        assert config.api_key == ""
        assert config.scan_directories == []
        assert config.auto_scan_on_startup is True

    def test_reads_camel_case_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "apiKey": "abc",
            "scanDirectories": ["/films", "/films"],
            "autoScanOnStartup": False,
        }))

        config = load_user_config(path)

        assert config.api_key == "abc"
        assert config.scan_directories == [Path("/films"), Path("/films")]
        assert config.auto_scan_on_startup is False

    def test_invalid_file_raises_config_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{broken")

        with pytest.raises(ConfigInvalid):
            load_user_config(path)

    def test_save_writes_camel_case(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        config = UserConfig(api_key="k", scan_directories=[tmp_path])

        save_user_config(config, path)

        data = json.loads(path.read_text())
        assert data == {
            "apiKey": "k",
            "scanDirectories": [str(tmp_path)],
            "autoScanOnStartup": True,
        }
        assert load_user_config(path) == config


class TestResolveApiKey:
    def test_env_key_wins(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"api_key": "from-env"})
        assert resolve_api_key(settings, UserConfig(api_key="from-file")) == "from-env"

    def test_file_key_used(self, test_settings: Settings) -> None:
        assert resolve_api_key(test_settings, UserConfig(api_key=" file ")) == "file"

    def test_no_key_raises_config_missing(self, test_settings: Settings) -> None:
        with pytest.raises(ConfigMissing, match="set-key"):
            resolve_api_key(test_settings, UserConfig())
