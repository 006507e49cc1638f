from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Sequence

from ..core.errors import SpawnFailureError
from ..core.models import LaunchConfig, SubsystemReport

log = logging.getLogger(__name__)


def engine_executable(install_dir: Path, sys_platform: str | None = None) -> Path:
    p = sys_platform or sys.platform
    exe_name = "smw.exe" if p.startswith("win") else "smw"
    return install_dir / exe_name


def build_args(executable: Path, image_path: Path, extra_args: Sequence[str] = ()) -> tuple[str, ...]:
    # Default: exe + rom path
    return (str(executable), str(image_path), *extra_args)


def engine_env(report: SubsystemReport) -> tuple[tuple[str, str], ...]:
    env: list[tuple[str, str]] = []
    if report.is_degraded("audio"):
        # keep the engine off the device that just failed
        env.append(("SDL_AUDIODRIVER", "dummy"))
    return tuple(env)


def build_launch_config(
    work_dir: Path,
    executable: Path,
    image_path: Path,
    report: SubsystemReport,
    extra_args: Sequence[str] = (),
) -> LaunchConfig:
    return LaunchConfig(
        work_dir=work_dir,
        executable=executable,
        image_path=image_path,
        args=build_args(executable, image_path, extra_args),
        env=engine_env(report),
    )


def _check_executable(exe: Path) -> None:
    if not exe.exists():
        raise SpawnFailureError(str(exe), "executable not found")
    if not exe.is_file():
        raise SpawnFailureError(str(exe), "not a file")
    if os.name != "nt" and not os.access(exe, os.X_OK):
        raise SpawnFailureError(str(exe), "not executable")


def spawn_engine(config: LaunchConfig) -> subprocess.Popen:
    _check_executable(config.executable)

    env = dict(os.environ)
    env.update(dict(config.env))

    log.info("Launching: %s with ROM: %s", config.executable.name, config.image_path)
    try:
        return subprocess.Popen(list(config.args), cwd=str(config.work_dir), env=env)
    except OSError as e:
        raise SpawnFailureError(str(config.executable), e.strerror or str(e)) from e
