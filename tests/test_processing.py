# tests/test_processing.py
"""Tests for size-bounded file reading."""

import pytest
from pathlib import Path

from repoprompt.core.processing import read_bounded
from repoprompt.exceptions import ExceedsSizeLimit, FileDecodeError, FileSkipError


class TestReadBounded:

    def test_reads_small_utf8_file(self, tmp_path):
        f = tmp_path / "hello.py"
        f.write_text("print('héllo')\n", encoding="utf-8")
        assert read_bounded(f, 1024) == "print('héllo')\n"

    def test_file_exactly_at_limit_is_read(self, tmp_path):
        f = tmp_path / "exact.txt"
        f.write_bytes(b"x" * 16)
        assert read_bounded(f, 16) == "x" * 16

    def test_file_over_limit_raises(self, tmp_path):
        f = tmp_path / "big.txt"
        f.write_bytes(b"x" * 17)
        with pytest.raises(ExceedsSizeLimit) as excinfo:
            read_bounded(f, 16)
        assert excinfo.value.size == 17
        assert excinfo.value.max_size == 16

    def test_zero_limit_allows_only_empty_files(self, tmp_path):
        empty = tmp_path / "empty.txt"
        empty.write_bytes(b"")
        assert read_bounded(empty, 0) == ""

        one = tmp_path / "one.txt"
        one.write_bytes(b"a")
        with pytest.raises(ExceedsSizeLimit):
            read_bounded(one, 0)

    def test_invalid_utf8_raises_decode_error(self, tmp_path):
        f = tmp_path / "binary.bin"
        f.write_bytes(b"\xff\xfe\x00\x80binary")
        with pytest.raises(FileDecodeError):
            read_bounded(f, 1024)

    def test_bom_is_stripped(self, tmp_path):
        f = tmp_path / "bom.txt"
        f.write_bytes(b"\xef\xbb\xbfcontent")
        assert read_bounded(f, 1024) == "content"

    def test_missing_file_raises_skip_error(self, tmp_path):
        with pytest.raises(FileSkipError):
            read_bounded(tmp_path / "missing.txt", 1024)

    def test_skip_errors_share_a_base_class(self):
        assert issubclass(ExceedsSizeLimit, FileSkipError)
        assert issubclass(FileDecodeError, FileSkipError)
