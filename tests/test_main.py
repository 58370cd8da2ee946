"""Tests for the console command-line entry point."""

from __future__ import annotations

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from tsdb_console.__main__ import load_config, main, parse_args
from tsdb_console.core import reset_config


@pytest.fixture(autouse=True)
def _reset_global_config():
    yield
    reset_config()


# =============================================================================
# Argument Parsing Tests
# =============================================================================


class TestParseArgs:
    """Test command line parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config is None
        assert args.host is None
        assert args.port is None
        assert args.api_url is None
        assert not args.no_access_log
        assert not args.verbose

    def test_all_flags(self) -> None:
        args = parse_args([
            "--config", "console.json",
            "--host", "127.0.0.1",
            "--port", "9000",
            "--api-url", "http://tsdb:8080",
            "--no-access-log",
            "-v",
        ])
        assert args.config == "console.json"
        assert args.port == 9000
        assert args.api_url == "http://tsdb:8080"
        assert args.no_access_log
        assert args.verbose

    def test_port_must_be_integer(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--port", "eighty"])


# =============================================================================
# Config Resolution Tests
# =============================================================================


class TestLoadConfig:
    """Command line flags override file and environment values."""

    def test_overrides_from_file(self, tmp_path) -> None:
        config_file = tmp_path / "console.json"
        config_file.write_text(json.dumps({
            "api": {"base_url": "http://file-host:8080"},
            "server": {"host": "0.0.0.0", "port": 8050},
        }))

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(parse_args([
                "--config", str(config_file),
                "--api-url", "http://cli-host:8080",
                "--port", "9100",
            ]))

        assert config.api.base_url == "http://cli-host:8080"
        assert config.server.port == 9100
        assert config.server.host == "0.0.0.0"
        assert config.config_file_path == str(config_file)

    def test_no_overrides_keeps_file_values(self, tmp_path) -> None:
        config_file = tmp_path / "console.json"
        config_file.write_text(json.dumps({"server": {"port": 8123}}))

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(parse_args(["--config", str(config_file)]))

        assert config.server.port == 8123
        assert config.api.base_url == "http://localhost:8080"


# =============================================================================
# Entry Point Tests
# =============================================================================


class TestMain:
    def test_runs_uvicorn_with_configured_address(self, tmp_path) -> None:
        config_file = tmp_path / "console.json"
        config_file.write_text(json.dumps({"server": {"host": "127.0.0.1", "port": 8777}}))

        with patch.dict(os.environ, {}, clear=True), \
                patch("tsdb_console.__main__.uvicorn.run") as mock_run, \
                patch("tsdb_console.__main__.configure_logging") as mock_logging:
            main(["--config", str(config_file), "--no-access-log"])

        mock_logging.assert_called_once()
        mock_run.assert_called_once()
        app = mock_run.call_args.args[0]
        assert mock_run.call_args.kwargs["host"] == "127.0.0.1"
        assert mock_run.call_args.kwargs["port"] == 8777
        assert app.state.controller.api.api_root == "http://localhost:8080/api"
        app.state.controller.api.close()

    def test_verbose_sets_debug(self, tmp_path) -> None:
        config_file = tmp_path / "console.json"
        config_file.write_text("{}")

        with patch.dict(os.environ, {}, clear=True), \
                patch("tsdb_console.__main__.uvicorn.run", MagicMock()), \
                patch("tsdb_console.__main__.configure_logging") as mock_logging:
            main(["--config", str(config_file), "-v"])

        assert mock_logging.call_args.kwargs["verbose"] is True
