"""Tests for the MCP server entry point."""

import logging
import sys

import pytest
from fastmcp import FastMCP

from hashline_tools import mcp_server
from hashline_tools.config import settings


class FakeApp:
    def __init__(self):
        self.runs = []

    def run(self, **kwargs):
        self.runs.append(kwargs)


@pytest.fixture
def fake_app(monkeypatch):
    """Replace the real server so main() returns immediately."""
    app = FakeApp()
    monkeypatch.setattr(mcp_server, "create_app", lambda: app)
    monkeypatch.setattr(mcp_server, "setup_logger", lambda use_stdio: None)
    monkeypatch.setattr(mcp_server, "register_shutdown_handlers", lambda: None)
    return app


@pytest.fixture
def clean_logger(monkeypatch):
    """Give the package logger no handlers for the duration of a test."""
    monkeypatch.setattr(mcp_server.logger, "handlers", [])
    monkeypatch.setattr(mcp_server.logger, "level", mcp_server.logger.level)
    return mcp_server.logger


class TestCreateApp:
    def test_registers_tools(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "workspace_root", str(tmp_path))

        app = mcp_server.create_app()

        assert isinstance(app, FastMCP)
        assert {"hashline_read", "hashline_edit"} <= set(app._tool_manager._tools)


class TestSetupLogger:
    def test_single_handler(self, clean_logger):
        mcp_server.setup_logger(use_stdio=True)
        mcp_server.setup_logger(use_stdio=False)

        assert len(clean_logger.handlers) == 1
        assert clean_logger.handlers[0].stream is sys.stderr

    def test_http_logs_to_stdout(self, clean_logger):
        mcp_server.setup_logger(use_stdio=False)
        assert clean_logger.handlers[0].stream is sys.stdout

    def test_level(self, clean_logger, monkeypatch):
        monkeypatch.setattr(settings, "log_level", "warning")
        mcp_server.setup_logger(use_stdio=True)
        assert clean_logger.level == logging.WARNING

        clean_logger.handlers.clear()
        mcp_server.setup_logger(use_stdio=True, level="debug")
        assert clean_logger.level == logging.DEBUG


class TestMain:
    def test_stdio(self, fake_app):
        mcp_server.main(["--stdio"])
        assert fake_app.runs == [{"transport": "stdio"}]

    def test_http_defaults_from_settings(self, fake_app, monkeypatch):
        monkeypatch.setattr(settings, "mcp_host", "127.0.0.1")
        monkeypatch.setattr(settings, "mcp_port", 5005)

        mcp_server.main([])

        assert fake_app.runs == [{"transport": "http", "host": "127.0.0.1", "port": 5005}]

    def test_port_flag(self, fake_app):
        mcp_server.main(["--port", "9000"])
        assert fake_app.runs[0]["port"] == 9000
