"""Checksum validation for located ROM images."""
from __future__ import annotations
import hashlib
import logging
from pathlib import Path

from ..core.errors import ChecksumMismatchError, ReadError
from ..core.models import DataFile, ValidationResult, ValidationStatus

log = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
COPIER_HEADER_SIZE = 512


def file_checksum(path: Path, chunk_size: int = CHUNK_SIZE) -> str:
    """Sha1 of the file, streamed in fixed-size chunks."""
    sha1 = hashlib.sha1()
    with open(path, "rb") as f:
        while True:
            data = f.read(chunk_size)
            if not data:
                break
            sha1.update(data)
    return sha1.hexdigest()


def _mismatch_hint(data_file: DataFile) -> str:
    size = data_file.size
    expected = data_file.spec.size
    if size is None:
        return ""
    if size == expected + COPIER_HEADER_SIZE:
        return "file has a 512-byte copier header; remove it (headered ROM)"
    if size != expected:
        return f"file is {size} bytes, expected {expected}"
    return "different revision or modified dump"


def validate_file(data_file: DataFile, chunk_size: int = CHUNK_SIZE) -> ValidationResult:
    expected = tuple(sorted(data_file.spec.checksums))
    if data_file.path is None:
        return ValidationResult(data_file=data_file, status=ValidationStatus.MISSING, expected=expected)

    try:
        actual = file_checksum(data_file.path, chunk_size)
    except OSError as e:
        log.warning("Could not read %s: %s", data_file.path, e)
        return ValidationResult(
            data_file=data_file,
            status=ValidationStatus.UNREADABLE,
            expected=expected,
            error=ReadError(data_file.canonical_name, str(data_file.path), e.strerror or str(e)),
        )

    if actual in data_file.spec.checksums:
        log.debug("%s OK (%s)", data_file.canonical_name, actual)
        return ValidationResult(
            data_file=data_file,
            status=ValidationStatus.VALID,
            expected=expected,
            actual=actual,
        )

    hint = _mismatch_hint(data_file)
    log.warning("Checksum mismatch for %s: got %s", data_file.path, actual)
    return ValidationResult(
        data_file=data_file,
        status=ValidationStatus.MISMATCH,
        expected=expected,
        actual=actual,
        hint=hint,
        error=ChecksumMismatchError(data_file.canonical_name, expected, actual, hint),
    )
