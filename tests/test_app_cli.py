"""Command-line entry point: config errors and the one-shot --check mode."""
from __future__ import annotations

import functools
import logging
import os
import sys

import pytest

from supportchat import app as cli
from supportchat.engine.inference import DemoModule


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("SUPPORTCHAT_") or key == "OPENAI_API_KEY":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def instant_demo(monkeypatch):
    monkeypatch.setattr("supportchat.tui.app.DemoModule", functools.partial(DemoModule, delay=0))


def _run_main(monkeypatch, tmp_path, *args: str) -> int:
    log_file = tmp_path / "logs" / "supportchat.log"
    monkeypatch.setattr(sys, "argv", ["supportchat", "--log-file", str(log_file), *args])
    with pytest.raises(SystemExit) as excinfo:
        cli.main()
    return excinfo.value.code


def test_malformed_yaml_exits_with_status_2(monkeypatch, tmp_path, capsys):
    config = tmp_path / "broken.yaml"
    config.write_text("chat: [unclosed\n", encoding="utf-8")

    code = _run_main(monkeypatch, tmp_path, "--config", str(config), "--check", "hi")

    assert code == 2
    assert "YAML parse error" in capsys.readouterr().out


def test_missing_config_file_exits_with_status_2(monkeypatch, tmp_path, capsys):
    code = _run_main(monkeypatch, tmp_path, "--config", str(tmp_path / "absent.yaml"))

    assert code == 2
    assert "file not found" in capsys.readouterr().out


def test_invalid_demo_value_exits_with_status_2(monkeypatch, tmp_path):
    config = tmp_path / "chat.yaml"
    config.write_text('inference:\n  demo: "false"\n', encoding="utf-8")

    assert _run_main(monkeypatch, tmp_path, "--config", str(config)) == 2


def test_check_prints_demo_reply(monkeypatch, tmp_path, capsys, instant_demo):
    code = _run_main(monkeypatch, tmp_path, "--demo", "--check", "hi")

    assert code == 0
    out = capsys.readouterr().out
    assert '(demo) You said: "hi"' in out
    assert (tmp_path / "logs" / "supportchat.log").exists()


def test_check_with_blank_prompt_exits_with_status_2(monkeypatch, tmp_path, capsys, instant_demo):
    code = _run_main(monkeypatch, tmp_path, "--demo", "--check", "   ")

    assert code == 2
    assert "prompt is empty" in capsys.readouterr().out


def test_check_with_failed_call_exits_with_status_1(monkeypatch, tmp_path, capsys):
    # Nothing listens on port 1, so the connection is refused.
    monkeypatch.setenv("SUPPORTCHAT_ENDPOINT", "http://127.0.0.1:1/v1/chat/completions")
    monkeypatch.setenv("SUPPORTCHAT_API_KEY", "sk-test")

    code = _run_main(monkeypatch, tmp_path, "--check", "hi")

    assert code == 1
    assert "Sorry, there was an error processing your request." in capsys.readouterr().out
