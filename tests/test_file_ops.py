"""Tests for atomic writes and secure deletion."""
import os
import stat

import pytest

from sectool.core.file_ops import SecureDeleteError, atomic_write_bytes, secure_delete
from sectool.core.memory import ZeroizeContext, secure_zero


class TestAtomicWrite:

    def test_creates_file_with_mode(self, tmp_path):
        target = tmp_path / "blob"
        atomic_write_bytes(target, b"data", mode=0o600)
        assert target.read_bytes() == b"data"
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "blob"
        target.write_bytes(b"old")
        atomic_write_bytes(target, b"new")
        assert target.read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path):
        atomic_write_bytes(tmp_path / "blob", b"x")
        assert [p.name for p in tmp_path.iterdir()] == ["blob"]


class TestSecureDelete:

    def test_removes_file(self, tmp_path):
        target = tmp_path / "plain.txt"
        target.write_bytes(b"secret" * 1000)
        secure_delete(target)
        assert not target.exists()

    def test_missing_file_is_ignored(self, tmp_path):
        secure_delete(tmp_path / "absent")

    def test_directory_is_rejected(self, tmp_path):
        with pytest.raises(SecureDeleteError):
            secure_delete(tmp_path)


class TestZeroization:

    def test_secure_zero(self):
        buf = bytearray(b"key material")
        secure_zero(buf)
        assert buf == bytearray(len(b"key material"))

    def test_context_zeroes_on_error(self):
        buf = bytearray(b"abc")
        with pytest.raises(RuntimeError):
            with ZeroizeContext(buf):
                raise RuntimeError("boom")
        assert buf == bytearray(3)
