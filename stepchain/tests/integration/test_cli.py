"""
CLI Smoke Tests

Runs the stepchain CLI entry point in-process.
"""

import json

import httpx
import pytest

from stepchain import ChainUsageError, __version__
from stepchain.cli import main
from stepchain.examples import http_chain
from stepchain.examples.http_chain import RequestRecord


class TestCLI:
    """Tests for the stepchain command line."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "stepchain" in capsys.readouterr().out

    def test_demo(self, capsys):
        assert main(["demo", "--delays", "0.05", "0", "0.02"]) == 0

        out = capsys.readouterr().out
        assert "Timer chain (3 steps)" in out
        assert "Finished in call order: True" in out

    def test_config_json(self, capsys):
        assert main(["config", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["chain"]["name_prefix"] == "chain"
        assert "level" in data["logging"]

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip() == f"stepchain {__version__}"

    def test_fetch_json(self, capsys, monkeypatch):
        async def fake_fetch_all(urls, timeout=10.0):
            return [RequestRecord("GET", url, 200, 1.5) for url in urls]

        monkeypatch.setattr(http_chain, "fetch_all", fake_fetch_all)

        assert main(["fetch", "https://a.test/", "https://b.test/", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [row["url"] for row in data] == ["https://a.test/", "https://b.test/"]
        assert data[0]["status_code"] == 200

    def test_fetch_failure_returns_error_code(self, capsys, monkeypatch):
        async def failing_fetch_all(urls, timeout=10.0):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(http_chain, "fetch_all", failing_fetch_all)

        assert main(["fetch", "https://down.test/"]) == 1
        assert "Request failed" in capsys.readouterr().err

    @pytest.mark.parametrize("argv", [["--log-level", "DEBUG", "version"]])
    def test_log_level_flag(self, argv, capsys):
        assert main(argv) == 0
        assert "stepchain" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "error",
        [
            httpx.InvalidURL("Invalid port: 'notaport'"),
            ChainUsageError("get() needs a path"),
        ],
    )
    def test_fetch_bad_input_returns_error_code(self, error, capsys, monkeypatch):
        async def failing_fetch_all(urls, timeout=10.0):
            raise error

        monkeypatch.setattr(http_chain, "fetch_all", failing_fetch_all)

        assert main(["fetch", "https://api.test:notaport/"]) == 1
        assert "Request failed" in capsys.readouterr().err
