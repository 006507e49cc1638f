from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..core.errors import MissingFileError, ReadError
from ..core.models import DataFile, RomSpec

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocateResult:
    found: tuple[DataFile, ...]
    missing: tuple[MissingFileError, ...]
    unreadable: tuple[ReadError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing and not self.unreadable

    @property
    def errors(self) -> tuple[MissingFileError | ReadError, ...]:
        return (*self.missing, *self.unreadable)


def _list_files(directory: Path) -> dict[str, Path]:
    # lowercased name -> path; sorted so the first case variant wins deterministically
    if not directory.is_dir():
        return {}
    listing: dict[str, Path] = {}
    for p in sorted(directory.iterdir()):
        if p.is_file():
            listing.setdefault(p.name.lower(), p)
    return listing


def _reason(e: OSError) -> str:
    return e.strerror or str(e) or type(e).__name__


def default_search_dirs(work_dir: Path) -> list[Path]:
    return [work_dir / "sfcs", work_dir]


def find_rom(spec: RomSpec, listings: list[dict[str, Path]]) -> Path | None:
    wanted = [name.lower() for name in spec.filenames]
    for listing in listings:
        for name in wanted:
            if name in listing:
                return listing[name].resolve()
    return None


def locate_files(search_dirs: Iterable[Path], specs: Iterable[RomSpec]) -> LocateResult:
    """
    Resolves every ROM against the search dirs (first dir wins).
    Never stops at the first miss: all missing names end up in the result.
    Directories or files that cannot be read are reported as ReadError.
    """
    dirs = list(search_dirs)
    unreadable: list[ReadError] = []
    listings: list[dict[str, Path]] = []
    for d in dirs:
        try:
            listings.append(_list_files(d))
        except OSError as e:
            log.warning("Could not list %s: %s", d, e)
            unreadable.append(ReadError(d.name or str(d), str(d), _reason(e), stage="locating"))
            listings.append({})

    found: list[DataFile] = []
    missing: list[MissingFileError] = []
    for spec in specs:
        path = find_rom(spec, listings)
        if path is None:
            searched = [str(d / name) for d in dirs for name in spec.filenames]
            missing.append(MissingFileError(spec.canonical_name, searched))
            continue
        try:
            found.append(DataFile(spec=spec).located(path))
        except OSError as e:
            log.warning("Could not stat %s: %s", path, e)
            unreadable.append(ReadError(spec.canonical_name, str(path), _reason(e), stage="locating"))

    return LocateResult(found=tuple(found), missing=tuple(missing), unreadable=tuple(unreadable))
