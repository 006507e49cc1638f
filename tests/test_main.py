from __future__ import annotations

import logging

import pytest

import smaslauncher.main
from conftest import FakePlatform
from smaslauncher.main import build_parser, exit_code_for, main
from smaslauncher.orchestrator import LaunchOutcome, Stage


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_run_reports_missing_roms(tmp_path, capsys):
    code = main(["--console", "--dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == 1
    assert "Missing: smas" in out
    assert "Missing: smw" in out
    assert (tmp_path / "sfcs").is_dir()
    assert (tmp_path / "launcher" / "launcher.log").exists()


def test_wait_flags():
    parser = build_parser()
    assert parser.parse_args([]).wait is None
    assert parser.parse_args(["--wait"]).wait is True
    assert parser.parse_args(["--no-wait"]).wait is False


def test_exit_codes():
    running = LaunchOutcome(stage=Stage.RUNNING, history=(), exit_code=None)
    assert exit_code_for(running) == 0
    assert exit_code_for(LaunchOutcome(stage=Stage.RUNNING, history=(), exit_code=7)) == 7
    assert exit_code_for(LaunchOutcome(stage=Stage.FAILED, history=())) == 1
    assert exit_code_for(None) == 1


def test_console_run_asks_for_a_windowless_platform(tmp_path, capsys, monkeypatch):
    requested = []

    def fake_select_platform(*args, **kwargs):
        requested.append(kwargs)
        return FakePlatform()

    monkeypatch.setattr(smaslauncher.main, "select_platform", fake_select_platform)

    assert main(["--console", "--dir", str(tmp_path)]) == 1
    assert requested == [{"window": False}]
    assert "Missing: smas" in capsys.readouterr().out
