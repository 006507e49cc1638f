"""
Builds the combined SMAS+SMW image the engine loads.

The layout is a fixed table of byte ranges keyed to the exact sizes of the
known-good dumps. Nothing is discovered at runtime: an input of any other
size is rejected before a single byte is copied.
"""
from __future__ import annotations
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from ..core.errors import ImageWriteError, LayoutMismatchError, ReadError
from ..core.models import ComposedImage, ValidationResult
from ..core.roms import SMAS, SMW

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    source: str         # canonical name of the input
    src_offset: int
    length: int
    dst_offset: int


@dataclass(frozen=True)
class ComposeLayout:
    name: str
    version: int
    source_sizes: dict[str, int]
    segments: tuple[Segment, ...]
    total_size: int
    fill: int = 0xFF

    def check(self) -> None:
        for seg in self.segments:
            if seg.source not in self.source_sizes:
                raise ValueError(f"{self.name}: segment source {seg.source!r} has no size")
            if seg.src_offset + seg.length > self.source_sizes[seg.source]:
                raise ValueError(f"{self.name}: segment reads past end of {seg.source}")
            if seg.dst_offset + seg.length > self.total_size:
                raise ValueError(f"{self.name}: segment writes past end of image")


SMAS_SMW_V1 = ComposeLayout(
    name="smas_smw",
    version=1,
    source_sizes={SMAS.canonical_name: SMAS.size, SMW.canonical_name: SMW.size},
    segments=(
        Segment(SMAS.canonical_name, 0x000000, SMAS.size, 0x000000),
        Segment(SMW.canonical_name, 0x000000, SMW.size, 0x200000),
    ),
    total_size=0x280000,
)

DEFAULT_LAYOUT = SMAS_SMW_V1


def _reason(e: OSError) -> str:
    return e.strerror or str(e) or type(e).__name__


def _read_exact(path: Path, expected_size: int, canonical_name: str) -> bytes:
    try:
        with open(path, "rb") as f:
            data = f.read(expected_size + 1)
    except OSError as e:
        raise ReadError(canonical_name, str(path), _reason(e), stage="composing") from e
    if len(data) != expected_size:
        raise LayoutMismatchError(canonical_name, expected_size, len(data))
    return data


def compose_image(results: Sequence[ValidationResult], layout: ComposeLayout = DEFAULT_LAYOUT) -> ComposedImage:
    """Merges validated inputs into one image. Pure function of the input bytes."""
    layout.check()

    by_name = {}
    for r in results:
        if not r.ok:
            raise ValueError(f"refusing to compose unvalidated input: {r.data_file.canonical_name}")
        by_name[r.data_file.canonical_name] = r.data_file

    # Size check for every source first, so nothing is read on a bad layout.
    for name, expected_size in layout.source_sizes.items():
        data_file = by_name.get(name)
        if data_file is None or data_file.path is None:
            raise ValueError(f"layout {layout.name} needs {name}, which was not supplied")
        if data_file.size != expected_size:
            raise LayoutMismatchError(name, expected_size, data_file.size or 0)

    sources = {
        name: _read_exact(by_name[name].path, size, name)
        for name, size in layout.source_sizes.items()
    }

    buf = bytearray([layout.fill]) * layout.total_size
    for seg in layout.segments:
        chunk = sources[seg.source][seg.src_offset:seg.src_offset + seg.length]
        buf[seg.dst_offset:seg.dst_offset + seg.length] = chunk

    log.info("Composed %s v%d (%d bytes)", layout.name, layout.version, len(buf))
    return ComposedImage(data=bytes(buf), layout_name=layout.name, layout_version=layout.version)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _same_bytes(path: Path, data: bytes) -> bool:
    try:
        return path.is_file() and path.stat().st_size == len(data) and path.read_bytes() == data
    except OSError:
        return False


def _kept_path(image: ComposedImage, directory: Path) -> tuple[Path, bool]:
    """
    Name for a kept image: (path, already_there).

    An existing file is never replaced, since an engine from an earlier launch
    may still have it open. Identical bytes are reused as they are; anything
    else at the name pushes the new image to the next free numbered name.
    """
    stem = f"{image.layout_name}.v{image.layout_version}"
    n = 1
    while True:
        candidate = directory / (image.filename if n == 1 else f"{stem}-{n}.sfc")
        if not os.path.lexists(candidate):
            return candidate, False
        if _same_bytes(candidate, image.data):
            return candidate, True
        n += 1


@contextmanager
def materialize_image(image: ComposedImage, directory: Path | None = None, keep: bool = False) -> Iterator[Path]:
    """
    Writes the image to disk for the engine.

    keep=False: temp file, removed when the block exits however it exits.
    keep=True: renamed into `directory` and left there for the engine, unless
    the block raises, in which case it is removed too. A kept image that was
    already on disk before this call is never removed.

    OSErrors while writing surface as ImageWriteError.
    """
    directory = directory or Path(tempfile.gettempdir())
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{image.layout_name}-", suffix=".sfc", dir=directory)
    except OSError as e:
        raise ImageWriteError(str(directory), _reason(e)) from e

    path = Path(tmp_name)
    owned = True
    try:
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(image.data)
            if keep:
                final, existing = _kept_path(image, directory)
                if existing:
                    _discard(path)
                    owned = False
                else:
                    os.replace(path, final)
                path = final
        except OSError as e:
            raise ImageWriteError(str(path), _reason(e)) from e
        log.debug("Composed image written to %s", path)
        yield path
    except BaseException:
        if owned:
            _discard(path)
        raise
    finally:
        if not keep and owned:
            _discard(path)
