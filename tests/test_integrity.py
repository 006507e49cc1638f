from __future__ import annotations

from conftest import PRIMARY, PRIMARY_DATA, sha1
from smaslauncher.core.errors import ChecksumMismatchError, ReadError
from smaslauncher.core.models import DataFile, ValidationStatus
from smaslauncher.services.integrity import file_checksum, validate_file


def _located(path):
    return DataFile(spec=PRIMARY).located(path)


def test_valid_file(tmp_path):
    p = tmp_path / "smas.sfc"
    p.write_bytes(PRIMARY_DATA)

    result = validate_file(_located(p))

    assert result.ok
    assert result.status is ValidationStatus.VALID
    assert result.actual == sha1(PRIMARY_DATA)
    assert result.error is None


def test_streaming_matches_whole_file_digest(tmp_path):
    p = tmp_path / "rom.bin"
    data = bytes(range(256)) * 41
    p.write_bytes(data)

    assert file_checksum(p, chunk_size=7) == sha1(data)
    assert file_checksum(p) == sha1(data)


def test_mismatch_carries_expected_and_actual(tmp_path):
    p = tmp_path / "smas.sfc"
    p.write_bytes(b"\x00" * PRIMARY.size)

    result = validate_file(_located(p))

    assert result.status is ValidationStatus.MISMATCH
    assert result.expected == tuple(sorted(PRIMARY.checksums))
    assert result.actual == sha1(b"\x00" * PRIMARY.size)
    assert isinstance(result.error, ChecksumMismatchError)
    assert result.error.actual == result.actual
    assert result.error.expected == result.expected


def test_headered_rom_hint(tmp_path):
    p = tmp_path / "smas.sfc"
    p.write_bytes(b"\x00" * 512 + PRIMARY_DATA)

    result = validate_file(_located(p))

    assert result.status is ValidationStatus.MISMATCH
    assert "copier header" in result.hint


def test_unreadable_is_not_a_mismatch(tmp_path):
    d = tmp_path / "smas.sfc"
    d.mkdir()
    data_file = DataFile(spec=PRIMARY, path=d, size=0)

    result = validate_file(data_file)

    assert result.status is ValidationStatus.UNREADABLE
    assert isinstance(result.error, ReadError)
    assert result.actual is None


def test_unlocated_file_is_missing():
    result = validate_file(DataFile(spec=PRIMARY))
    assert result.status is ValidationStatus.MISSING
    assert not result.ok


def test_validation_is_idempotent(tmp_path):
    p = tmp_path / "smas.sfc"
    p.write_bytes(PRIMARY_DATA)
    data_file = _located(p)

    assert validate_file(data_file) == validate_file(data_file)

    p.write_bytes(PRIMARY_DATA[::-1])
    data_file = _located(p)
    first, second = validate_file(data_file), validate_file(data_file)
    assert first.status is ValidationStatus.MISMATCH
    assert first == second
