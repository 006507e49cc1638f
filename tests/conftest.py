from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from smaslauncher.core.models import RomSpec
from smaslauncher.orchestrator import LaunchContext
from smaslauncher.services.image_composer import ComposeLayout, Segment

PRIMARY_SIZE = 64
SECONDARY_SIZE = 32


def rom_bytes(size: int, seed: int) -> bytes:
    return bytes((i * seed + seed) % 256 for i in range(size))


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


PRIMARY_DATA = rom_bytes(PRIMARY_SIZE, 7)
SECONDARY_DATA = rom_bytes(SECONDARY_SIZE, 13)

PRIMARY = RomSpec("smas", ("smas.sfc",), PRIMARY_SIZE, frozenset({sha1(PRIMARY_DATA)}))
SECONDARY = RomSpec("smw", ("smw.sfc",), SECONDARY_SIZE, frozenset({sha1(SECONDARY_DATA)}))

SMALL_LAYOUT = ComposeLayout(
    name="test_image",
    version=1,
    source_sizes={"smas": PRIMARY_SIZE, "smw": SECONDARY_SIZE},
    segments=(
        Segment("smas", 0, PRIMARY_SIZE, 0),
        Segment("smw", 0, SECONDARY_SIZE, PRIMARY_SIZE),
    ),
    total_size=PRIMARY_SIZE + SECONDARY_SIZE,
)


class FakeProc:
    def __init__(self, code: int = 0):
        self.code = code

    def wait(self) -> int:
        return self.code


class FakeAudio:
    def __init__(self):
        self.played: list[Path] = []

    def play_sound(self, path: Path) -> bool:
        self.played.append(path)
        return True


class FakePlatform:
    name = "fake"

    def __init__(self, display_error=None, audio_error=None, input_error=None):
        self.display_error = display_error
        self.audio_error = audio_error
        self.input_error = input_error
        self.calls: list[str] = []
        self.audio = FakeAudio()

    def init_display(self):
        self.calls.append("display")
        if self.display_error:
            raise self.display_error
        return "window"

    def init_audio(self):
        self.calls.append("audio")
        if self.audio_error:
            raise self.audio_error
        return self.audio

    def init_input(self):
        self.calls.append("input")
        if self.input_error:
            raise self.input_error
        return "gamepad"


class RecordingSpawner:
    def __init__(self, code: int = 0, error: Exception | None = None):
        self.code = code
        self.error = error
        self.configs = []
        self.image_bytes: list[bytes] = []

    def __call__(self, config):
        self.configs.append(config)
        self.image_bytes.append(config.image_path.read_bytes())
        if self.error:
            raise self.error
        return FakeProc(self.code)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    d = tmp_path / "install"
    d.mkdir()
    return d


@pytest.fixture
def write_roms(work_dir: Path):
    def _write(primary_name="smas.sfc", secondary_name="smw.sfc", primary=PRIMARY_DATA, secondary=SECONDARY_DATA):
        paths = []
        if primary_name:
            p = work_dir / primary_name
            p.write_bytes(primary)
            paths.append(p)
        if secondary_name:
            p = work_dir / secondary_name
            p.write_bytes(secondary)
            paths.append(p)
        return paths
    return _write


@pytest.fixture
def make_context(work_dir: Path):
    def _make(specs=(PRIMARY, SECONDARY), wait_for_exit=False, launch_sound=None):
        return LaunchContext(
            work_dir=work_dir,
            search_dirs=(work_dir / "sfcs", work_dir),
            specs=tuple(specs),
            executable=work_dir / "smw",
            layout=SMALL_LAYOUT,
            engine_args=("--fullscreen",),
            wait_for_exit=wait_for_exit,
            launch_sound=launch_sound,
        )
    return _make
