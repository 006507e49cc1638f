from __future__ import annotations

import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from ..core.errors import SubsystemDegraded, SubsystemFatalError
from ..core.models import SubsystemReport

log = logging.getLogger(__name__)

WINDOW_TITLE = "SMAS Launcher"

# Same mixer setup the engine uses: 44.1 kHz, signed 16-bit, stereo.
AUDIO_FREQUENCY = 44100
AUDIO_SIZE = -16
AUDIO_CHANNELS = 2
AUDIO_BUFFER = 1024


class Platform(Protocol):
    name: str

    def init_display(self) -> Any: ...
    def init_audio(self) -> Any: ...
    def init_input(self) -> Any: ...


class AudioHandle:
    def __init__(self, mixer):
        self.mixer = mixer

    def play_sound(self, path: Path, settle_ms: int = 100) -> bool:
        if not path.exists():
            log.warning("Sound not found at: %s", path)
            return False
        try:
            self.mixer.music.fadeout(500)
            self.mixer.Sound(str(path)).play()
        except Exception:
            log.exception("Failed to play sound: %s", path)
            return False
        # let the first frames reach the device before the engine grabs it
        time.sleep(settle_ms / 1000.0)
        return True


@dataclass(frozen=True)
class ConsoleDisplay:
    title: str


class KivyPygamePlatform:
    """
    Kivy owns the launcher window; pygame opens the mixer and the gamepad.

    With window=False (console runs) no kivy window is created and the
    display handle is a plain ConsoleDisplay.
    """

    name = "kivy"

    def __init__(self, window: bool = True):
        self.window = window

    def init_display(self) -> Any:
        if not self.window:
            return ConsoleDisplay(WINDOW_TITLE)

        from kivy.core.window import Window

        if Window is None:
            raise RuntimeError("no window provider available")
        Window.title = WINDOW_TITLE
        return Window

    def init_audio(self) -> AudioHandle:
        import pygame

        pygame.mixer.pre_init(AUDIO_FREQUENCY, AUDIO_SIZE, AUDIO_CHANNELS, AUDIO_BUFFER)
        pygame.mixer.init()
        init_info = pygame.mixer.get_init()
        if not init_info:
            raise RuntimeError("mixer did not open an audio device")
        log.info("Audio initialized: %s", init_info)
        return AudioHandle(pygame.mixer)

    def init_input(self) -> Any:
        import pygame

        pygame.joystick.init()
        if pygame.joystick.get_count() == 0:
            raise RuntimeError("no controller attached")
        joystick = pygame.joystick.Joystick(0)
        joystick.init()
        log.info("Controller: %s", joystick.get_name())
        return joystick


class LinuxPlatform(KivyPygamePlatform):
    name = "linux"

    def __init__(self, environ: Mapping[str, str] | None = None, window: bool = True):
        super().__init__(window)
        self.environ = os.environ if environ is None else environ

    def init_display(self) -> Any:
        # checked in console runs too: the engine still needs a display
        if not (self.environ.get("DISPLAY") or self.environ.get("WAYLAND_DISPLAY")):
            raise SubsystemFatalError("display", "neither DISPLAY nor WAYLAND_DISPLAY is set")
        return super().init_display()


def select_platform(
    sys_platform: str | None = None,
    environ: Mapping[str, str] | None = None,
    window: bool = True,
) -> Platform:
    p = (sys_platform or sys.platform).lower()
    if p.startswith(("linux", "freebsd", "openbsd")):
        return LinuxPlatform(environ, window)
    return KivyPygamePlatform(window)


def _init_optional(
    init: Callable[[], Any],
    subsystem: str,
    fallback: str,
    degraded: list[SubsystemDegraded],
) -> Any:
    try:
        return init()
    except Exception as e:
        entry = SubsystemDegraded(subsystem=subsystem, reason=str(e) or type(e).__name__, fallback=fallback)
        log.warning("Degraded start: %s", entry)
        degraded.append(entry)
        return None


def bootstrap(platform: Platform) -> SubsystemReport:
    """
    Display, then audio, then input. Only the display is required; the other
    two fall back (no sound, keyboard only) and are listed in the report.
    """
    log.info("Bootstrapping subsystems (%s)", platform.name)
    try:
        display = platform.init_display()
    except SubsystemFatalError:
        raise
    except Exception as e:
        raise SubsystemFatalError("display", str(e) or type(e).__name__) from e

    degraded: list[SubsystemDegraded] = []
    audio = _init_optional(platform.init_audio, "audio", "launching without sound", degraded)
    gamepad = _init_optional(platform.init_input, "input", "keyboard-only input", degraded)

    return SubsystemReport(display=display, audio=audio, input=gamepad, degraded=tuple(degraded))
