"""Tests for specclient.config -- paths, project config, precedence, atomic writes."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from specclient.config import (
    derive_base_url,
    get_data_dir,
    load_project_config,
    resolve_client_config,
    resolve_export_options,
    write_text_atomic,
)
from specclient.exceptions import ConfigError
from specclient.models import ExportOptions, ProjectConfig


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


class TestDataDir:
    def test_xdg_data_home(self, isolated_config: Path) -> None:
        with patch("specclient.config._is_xdg_platform", return_value=True):
            path = get_data_dir()
        assert path == isolated_config / "data" / "specclient"
        assert path.is_dir()

    def test_fallback_on_other_platforms(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        with patch("specclient.config._is_xdg_platform", return_value=False):
            path = get_data_dir()
        assert path == tmp_path / ".specclient" / "logs"


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestLoadProjectConfig:
    def test_missing_file_gives_defaults(self, isolated_config: Path) -> None:
        assert load_project_config() == ProjectConfig()

    def test_reads_file(self, isolated_config: Path) -> None:
        (isolated_config / "specclient.json").write_text(
            json.dumps(
                {
                    "base_url": "http://localhost:8080",
                    "headers": {"X-Api-Key": "k"},
                    "export": {"validation": True, "class_name": "Petstore"},
                    "unknown": "ignored",
                }
            )
        )
        config = load_project_config()
        assert config.base_url == "http://localhost:8080"
        assert config.headers == {"X-Api-Key": "k"}
        assert config.export.validation is True
        assert config.export.class_name == "Petstore"
        assert config.export.module is False

    def test_explicit_directory(self, tmp_path: Path) -> None:
        (tmp_path / "specclient.json").write_text('{"base_url": "http://x"}')
        assert load_project_config(tmp_path).base_url == "http://x"

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "specclient.json").write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_wrong_shape(self, isolated_config: Path) -> None:
        (isolated_config / "specclient.json").write_text('{"export": {"typed": "maybe"}}')
        with pytest.raises(ConfigError):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestDeriveBaseUrl:
    def test_swagger_host(self) -> None:
        document = {"host": "api.test", "basePath": "/v1", "schemes": ["https"]}
        assert derive_base_url(document) == "https://api.test/v1"

    def test_swagger_default_scheme(self) -> None:
        assert derive_base_url({"host": "api.test"}) == "http://api.test"

    def test_openapi_server(self) -> None:
        document = {"servers": [{"url": "https://a.test"}, {"url": "https://b.test"}]}
        assert derive_base_url(document) == "https://a.test"

    def test_nothing_declared(self) -> None:
        assert derive_base_url({"servers": []}) is None


class TestResolveClientConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_client_config({})
        assert config.base_url == ""
        assert config.headers == {}
        assert config.timeout == 30.0
        assert config.verify_ssl is True

    def test_headers_merged_over_project(self, isolated_config: Path) -> None:
        project = ProjectConfig(headers={"X-Api-Key": "project", "Accept": "*/*"})
        config = resolve_client_config({}, headers={"X-Api-Key": "cli"}, project=project)
        assert config.headers == {"X-Api-Key": "cli", "Accept": "*/*"}

    def test_empty_explicit_base_url_wins(self, isolated_config: Path) -> None:
        config = resolve_client_config({"host": "api.test"}, base_url="")
        assert config.base_url == ""


class TestResolveExportOptions:
    def test_none_keeps_project_default(self) -> None:
        project = ProjectConfig(export=ExportOptions(validation=True, typed=True))
        options = resolve_export_options(project, validation=None, typed=False)
        assert options.validation is True
        assert options.typed is False

    def test_without_project(self) -> None:
        assert resolve_export_options(module=True) == ExportOptions(module=True)


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestWriteTextAtomic:
    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "client.py"
        write_text_atomic(target, "x = 1\n")
        assert target.read_text() == "x = 1\n"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        target.write_text("old")
        write_text_atomic(target, "new")
        assert target.read_text() == "new"
        assert list(tmp_path.iterdir()) == [target]

    def test_failure_keeps_original(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        target.write_text("original")
        with patch("specclient.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_text_atomic(target, "new")
        assert target.read_text() == "original"
        assert list(tmp_path.iterdir()) == [target]
