from __future__ import annotations

import sys

import pytest

from conftest import FakePlatform
from smaslauncher.core.errors import SubsystemFatalError
from smaslauncher.services.subsystems import (
    AudioHandle,
    ConsoleDisplay,
    KivyPygamePlatform,
    LinuxPlatform,
    bootstrap,
    select_platform,
)


def test_all_subsystems_up_in_order():
    platform = FakePlatform()

    report = bootstrap(platform)

    assert platform.calls == ["display", "audio", "input"]
    assert report.display == "window"
    assert report.input == "gamepad"
    assert report.degraded == ()


def test_display_failure_is_fatal():
    platform = FakePlatform(display_error=RuntimeError("no video device"))

    with pytest.raises(SubsystemFatalError) as exc:
        bootstrap(platform)

    assert exc.value.subsystem == "display"
    assert "no video device" in str(exc.value)
    assert platform.calls == ["display"]


def test_audio_failure_degrades():
    platform = FakePlatform(audio_error=RuntimeError("no audio device"))

    report = bootstrap(platform)

    assert report.audio is None
    assert report.is_degraded("audio")
    assert not report.is_degraded("input")
    assert report.degraded[0].fallback == "launching without sound"


def test_missing_gamepad_falls_back_to_keyboard(caplog):
    platform = FakePlatform(input_error=RuntimeError("no controller attached"))

    with caplog.at_level("WARNING"):
        report = bootstrap(platform)

    assert report.input is None
    assert report.is_degraded("input")
    assert report.degraded[0].fallback == "keyboard-only input"
    assert "no controller attached" in caplog.text


def test_both_optional_subsystems_can_degrade():
    platform = FakePlatform(audio_error=OSError("busy"), input_error=RuntimeError("none"))

    report = bootstrap(platform)

    assert [d.subsystem for d in report.degraded] == ["audio", "input"]
    assert platform.calls == ["display", "audio", "input"]


def test_select_platform_by_os():
    assert isinstance(select_platform("linux", {"DISPLAY": ":0"}), LinuxPlatform)
    win = select_platform("win32")
    assert isinstance(win, KivyPygamePlatform)
    assert not isinstance(win, LinuxPlatform)
    assert not isinstance(select_platform("darwin"), LinuxPlatform)


def test_linux_without_display_server_is_fatal():
    with pytest.raises(SubsystemFatalError) as exc:
        bootstrap(LinuxPlatform(environ={}))
    assert "DISPLAY" in str(exc.value)


def test_console_display_creates_no_window(monkeypatch):
    # any import of the kivy window module fails for the duration of the test
    monkeypatch.setitem(sys.modules, "kivy.core.window", None)

    platforms = [
        select_platform("win32", window=False),
        select_platform("linux", {"DISPLAY": ":0"}, window=False),
    ]
    for platform in platforms:
        assert platform.init_display() == ConsoleDisplay("SMAS Launcher")

    with pytest.raises(SubsystemFatalError):
        bootstrap(LinuxPlatform(environ={}, window=False))


def test_play_sound_missing_file(tmp_path):
    class Mixer:
        pass

    handle = AudioHandle(Mixer())
    assert handle.play_sound(tmp_path / "pg.wav") is False
