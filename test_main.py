"""Tests for the unified startup script."""

import os
import subprocess
import sys

import main


def test_start_service_inherits_output_streams(monkeypatch):
    calls = []

    def fake_popen(args, **kwargs):
        calls.append((args, kwargs))
        return object()

    monkeypatch.setattr(subprocess, "Popen", fake_popen)

    main.start_service("mcp_server.py", {"MCP_TRANSPORT": "sse"}, "/srv/babycare")

    (args, kwargs), = calls
    assert args == [sys.executable, "mcp_server.py"]
    assert kwargs["cwd"] == "/srv/babycare"
    assert kwargs["env"]["MCP_TRANSPORT"] == "sse"
    assert "stdout" not in kwargs
    assert "stderr" not in kwargs


def test_every_service_script_exists():
    root = os.path.dirname(os.path.abspath(main.__file__))
    for _, script, _ in main.SERVICES:
        assert os.path.exists(os.path.join(root, script))
