from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import LauncherError, SubsystemDegraded


@dataclass(frozen=True)
class RomSpec:
    canonical_name: str
    filenames: tuple[str, ...]      # matched case-insensitively
    size: int                       # exact byte length the layout assumes
    checksums: frozenset[str]       # accepted sha1 hex digests (known revisions)


@dataclass(frozen=True)
class DataFile:
    spec: RomSpec
    path: Path | None = None
    size: int | None = None

    @property
    def canonical_name(self) -> str:
        return self.spec.canonical_name

    def located(self, path: Path) -> "DataFile":
        return replace(self, path=path, size=path.stat().st_size)


class ValidationStatus(str, Enum):
    VALID = "valid"
    MISMATCH = "mismatch"
    MISSING = "missing"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class ValidationResult:
    data_file: DataFile
    status: ValidationStatus
    expected: tuple[str, ...] = ()
    actual: str | None = None
    hint: str = ""
    # exceptions compare by identity; equality of results rests on the other fields
    error: LauncherError | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.status is ValidationStatus.VALID


@dataclass(frozen=True)
class ComposedImage:
    data: bytes
    layout_name: str
    layout_version: int

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def filename(self) -> str:
        return f"{self.layout_name}.v{self.layout_version}.sfc"


@dataclass(frozen=True)
class SubsystemReport:
    display: Any = None
    audio: Any = None
    input: Any = None
    degraded: tuple[SubsystemDegraded, ...] = ()

    def is_degraded(self, subsystem: str) -> bool:
        return any(d.subsystem == subsystem for d in self.degraded)


@dataclass(frozen=True)
class LaunchConfig:
    work_dir: Path
    executable: Path
    image_path: Path
    args: tuple[str, ...]
    env: tuple[tuple[str, str], ...] = ()
