"""Tests for storemgr.__main__ entrypoint behavior."""

import sys
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from storemgr import __main__ as main_module


runner = CliRunner()

HELP_TEXT = "Retail store manager"


@pytest.fixture
def uvicorn_calls(monkeypatch):
    """Replace uvicorn and the config so API mode can run without a server."""
    calls: dict = {}

    def fake_run(*args, **kwargs):
        calls["args"] = args
        calls["kwargs"] = kwargs

    monkeypatch.setitem(sys.modules, "uvicorn", SimpleNamespace(run=fake_run))
    monkeypatch.setattr(
        main_module,
        "get_config",
        lambda: SimpleNamespace(api_host="127.0.0.1", api_port=9001),
    )
    return calls


def test_main_shows_help_when_no_subcommand():
    """Default CLI mode should show help when no subcommand is provided."""
    result = runner.invoke(main_module.app, [])
    assert result.exit_code == 0
    assert HELP_TEXT in result.output


def test_main_api_mode_runs_app_factory(uvicorn_calls):
    """API mode should launch the uvicorn app factory with config host/port."""
    result = runner.invoke(main_module.app, ["--mode", "api"])

    assert result.exit_code == 0
    assert uvicorn_calls["args"] == ("storemgr.api:create_app",)
    assert uvicorn_calls["kwargs"] == {
        "factory": True,
        "host": "127.0.0.1",
        "port": 9001,
        "reload": False,
    }


def test_main_api_mode_host_and_port_override_config(uvicorn_calls):
    result = runner.invoke(
        main_module.app, ["--mode", "API", "--host", "0.0.0.0", "--port", "8123"]
    )

    assert result.exit_code == 0
    assert uvicorn_calls["kwargs"]["host"] == "0.0.0.0"
    assert uvicorn_calls["kwargs"]["port"] == 8123


def test_main_unknown_mode_is_rejected(uvicorn_calls):
    result = runner.invoke(main_module.app, ["--mode", "not-a-mode"])
    assert result.exit_code == 2
    assert "args" not in uvicorn_calls
