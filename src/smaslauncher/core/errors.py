from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class LauncherError(Exception):
    """Base class for everything that can stop a launch attempt."""

    kind = "launcher_error"

    def __init__(self, message: str, stage: str = "", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}


class MissingFileError(LauncherError):
    kind = "missing_file"

    def __init__(self, canonical_name: str, searched: list[str] | None = None):
        super().__init__(
            f"Missing file: {canonical_name}",
            stage="locating",
            details={"canonical_name": canonical_name, "searched": searched or []},
        )
        self.canonical_name = canonical_name


class ReadError(LauncherError):
    kind = "read_error"

    def __init__(self, canonical_name: str, path: str, reason: str, stage: str = "validating"):
        super().__init__(
            f"Could not read {canonical_name} ({path}): {reason}",
            stage=stage,
            details={"canonical_name": canonical_name, "path": path, "reason": reason},
        )
        self.canonical_name = canonical_name


class ChecksumMismatchError(LauncherError):
    kind = "checksum_mismatch"

    def __init__(self, canonical_name: str, expected: tuple[str, ...], actual: str, hint: str = ""):
        super().__init__(
            f"Wrong file for {canonical_name}: expected {' or '.join(expected)}, got {actual}",
            stage="validating",
            details={
                "canonical_name": canonical_name,
                "expected": list(expected),
                "actual": actual,
                "hint": hint,
            },
        )
        self.canonical_name = canonical_name
        self.expected = expected
        self.actual = actual
        self.hint = hint


class LayoutMismatchError(LauncherError):
    kind = "layout_mismatch"

    def __init__(self, canonical_name: str, expected_size: int, actual_size: int):
        super().__init__(
            f"{canonical_name} is {actual_size} bytes, layout needs exactly {expected_size}",
            stage="composing",
            details={
                "canonical_name": canonical_name,
                "expected_size": expected_size,
                "actual_size": actual_size,
            },
        )
        self.canonical_name = canonical_name
        self.expected_size = expected_size
        self.actual_size = actual_size


class SubsystemFatalError(LauncherError):
    kind = "subsystem_fatal"

    def __init__(self, subsystem: str, reason: str):
        super().__init__(
            f"Could not initialize {subsystem}: {reason}",
            stage="bootstrapping",
            details={"subsystem": subsystem, "reason": reason},
        )
        self.subsystem = subsystem


class SpawnFailureError(LauncherError):
    kind = "spawn_failure"

    def __init__(self, executable: str, reason: str):
        super().__init__(
            f"Could not start engine {executable}: {reason}",
            stage="launching",
            details={"executable": executable, "reason": reason},
        )
        self.executable = executable


@dataclass(frozen=True)
class SubsystemDegraded:
    # Non-fatal: logged and reported, the launch continues.
    subsystem: str
    reason: str
    fallback: str

    def __str__(self) -> str:
        return f"{self.subsystem} unavailable ({self.reason}); {self.fallback}"


class LaunchAborted(LauncherError):
    kind = "aborted"

    def __init__(self, stage: str):
        super().__init__(f"Launch cancelled before {stage}", stage=stage)


class ImageWriteError(LauncherError):
    kind = "image_write"

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Could not write game image {path}: {reason}",
            stage="launching",
            details={"path": path, "reason": reason},
        )
        self.path = path
