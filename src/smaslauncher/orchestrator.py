"""
Launch pipeline: locate -> validate -> compose -> bootstrap -> launch.

Each attempt starts from IDLE and ends in RUNNING or FAILED. Nothing on disk
changes before LAUNCHING, so a failure never needs rolling back; a retry is
simply another call to run() or prepare().
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence, TypeVar

from .config import LauncherOptions
from .core.errors import LaunchAborted, LauncherError, SubsystemDegraded
from .core.models import ComposedImage, DataFile, LaunchConfig, RomSpec, SubsystemReport, ValidationResult
from .core.roms import REQUIRED_ROMS, with_checksums
from .paths import launcher_dir
from .services.game_launcher import build_launch_config, engine_executable, spawn_engine
from .services.image_composer import DEFAULT_LAYOUT, ComposeLayout, compose_image, materialize_image
from .services.integrity import validate_file
from .services.rom_locator import default_search_dirs, locate_files
from .services.subsystems import Platform, bootstrap

log = logging.getLogger(__name__)


class Stage(str, Enum):
    IDLE = "idle"
    LOCATING = "locating"
    VALIDATING = "validating"
    COMPOSING = "composing"
    BOOTSTRAPPING = "bootstrapping"
    LAUNCHING = "launching"
    RUNNING = "running"
    FAILED = "failed"


@dataclass(frozen=True)
class LaunchContext:
    work_dir: Path
    search_dirs: tuple[Path, ...]
    specs: tuple[RomSpec, ...]
    executable: Path
    layout: ComposeLayout = DEFAULT_LAYOUT
    engine_args: tuple[str, ...] = ()
    wait_for_exit: bool = False
    launch_sound: Path | None = None

    @classmethod
    def from_options(cls, work_dir: Path, options: LauncherOptions, sys_platform: str | None = None) -> "LaunchContext":
        sound = launcher_dir(work_dir) / options.launch_sound if options.launch_sound else None
        return cls(
            work_dir=work_dir,
            search_dirs=tuple(default_search_dirs(work_dir)),
            specs=with_checksums(REQUIRED_ROMS, options.checksums),
            executable=engine_executable(work_dir, sys_platform),
            engine_args=options.engine_args,
            wait_for_exit=options.wait_for_exit,
            launch_sound=sound,
        )


@dataclass(frozen=True)
class LaunchOutcome:
    stage: Stage
    history: tuple[Stage, ...]
    errors: tuple[LauncherError, ...] = ()
    degraded: tuple[SubsystemDegraded, ...] = ()
    image_path: Path | None = None
    exit_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.stage is Stage.RUNNING

    @property
    def failed_stage(self) -> Stage | None:
        if self.stage is not Stage.FAILED or len(self.history) < 2:
            return None
        return self.history[-2]


StageListener = Callable[[Stage], None]
Spawner = Callable[[LaunchConfig], subprocess.Popen]
T = TypeVar("T")


class LaunchOrchestrator:
    """
    Drives one launch attempt at a time.

    run() does everything in one go. A caller that owns a UI thread can split
    it: prepare() (filesystem only, fine on a worker), start_subsystems()
    (window, mixer and gamepad, on the main thread), then launch().
    """

    def __init__(
        self,
        context: LaunchContext,
        platform: Platform,
        spawner: Spawner = spawn_engine,
        on_stage: StageListener | None = None,
    ):
        self.context = context
        self.platform = platform
        self.spawner = spawner
        self.on_stage = on_stage
        self.stage = Stage.IDLE
        self._history: list[Stage] = []
        self._degraded: tuple[SubsystemDegraded, ...] = ()
        self._cancelled = False

    def cancel(self) -> None:
        """Cooperative abort, honoured at the next stage boundary."""
        self._cancelled = True

    def _enter(self, stage: Stage) -> None:
        if self._cancelled and stage not in (Stage.RUNNING, Stage.FAILED):
            raise LaunchAborted(stage.value)
        self.stage = stage
        self._history.append(stage)
        log.debug("Stage: %s", stage.value)
        if self.on_stage is not None:
            self.on_stage(stage)

    def _expect(self, stage: Stage, step: str) -> None:
        if self.stage is not stage:
            raise RuntimeError(f"{step}() needs stage {stage.value}, attempt is at {self.stage.value}")

    def _fail(self, errors: Sequence[LauncherError]) -> LaunchOutcome:
        self._enter(Stage.FAILED)
        for e in errors:
            log.error("%s [%s] %s", e, e.kind, e.details)
        return LaunchOutcome(
            stage=Stage.FAILED,
            history=tuple(self._history),
            errors=tuple(errors),
            degraded=self._degraded,
        )

    def _guarded(self, step: Callable[[], T]) -> T | LaunchOutcome:
        try:
            return step()
        except LauncherError as e:
            return self._fail([e])

    def run(self) -> LaunchOutcome:
        image = self.prepare()
        if isinstance(image, LaunchOutcome):
            return image
        report = self.start_subsystems()
        if isinstance(report, LaunchOutcome):
            return report
        return self.launch(image, report)

    def prepare(self) -> ComposedImage | LaunchOutcome:
        """Starts a fresh attempt: locate, validate, compose."""
        self._history = []
        self._degraded = ()
        self._cancelled = False
        self._enter(Stage.IDLE)
        return self._guarded(self._prepare)

    def _prepare(self) -> ComposedImage | LaunchOutcome:
        files = self._locate()
        if isinstance(files, LaunchOutcome):
            return files
        results = self._validate(files)
        if isinstance(results, LaunchOutcome):
            return results
        self._enter(Stage.COMPOSING)
        return compose_image(results, self.context.layout)

    def start_subsystems(self) -> SubsystemReport | LaunchOutcome:
        self._expect(Stage.COMPOSING, "start_subsystems")
        return self._guarded(self._bootstrap)

    def _bootstrap(self) -> SubsystemReport:
        self._enter(Stage.BOOTSTRAPPING)
        report = bootstrap(self.platform)
        self._degraded = report.degraded
        return report

    def launch(self, image: ComposedImage, report: SubsystemReport) -> LaunchOutcome:
        self._expect(Stage.BOOTSTRAPPING, "launch")
        return self._guarded(lambda: self._launch(image, report))

    def _locate(self) -> tuple[DataFile, ...] | LaunchOutcome:
        self._enter(Stage.LOCATING)
        located = locate_files(self.context.search_dirs, self.context.specs)
        if not located.ok:
            return self._fail(located.errors)
        for f in located.found:
            log.info("Found %s: %s", f.canonical_name, f.path)
        return located.found

    def _validate(self, files: Sequence[DataFile]) -> list[ValidationResult] | LaunchOutcome:
        self._enter(Stage.VALIDATING)
        results = [validate_file(f) for f in files]
        errors = [r.error for r in results if not r.ok and r.error is not None]
        if errors:
            return self._fail(errors)
        return results

    def _launch(self, image: ComposedImage, report: SubsystemReport) -> LaunchOutcome:
        ctx = self.context
        self._enter(Stage.LAUNCHING)
        keep = not ctx.wait_for_exit
        image_dir = ctx.work_dir if keep else None
        with materialize_image(image, image_dir, keep=keep) as image_path:
            config = build_launch_config(ctx.work_dir, ctx.executable, image_path, report, ctx.engine_args)
            if ctx.launch_sound is not None and hasattr(report.audio, "play_sound"):
                report.audio.play_sound(ctx.launch_sound)
            proc = self.spawner(config)
            self._enter(Stage.RUNNING)
            exit_code = None
            if ctx.wait_for_exit:
                exit_code = proc.wait()
                log.info("Engine exited with code %s", exit_code)

        return LaunchOutcome(
            stage=Stage.RUNNING,
            history=tuple(self._history),
            degraded=report.degraded,
            image_path=image_path if keep else None,
            exit_code=exit_code,
        )
