"""Tests for logsviewer/collector/reader.py"""

import pytest

from logsviewer.collector.cursor import Cursor
from logsviewer.collector.reader import read_all, read_incremental


class TestReadAll:
    def test_reads_every_line_and_moves_to_end(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"one\ntwo\r\nthree\n")
        cursor = Cursor()

        batch = read_all(path, cursor)

        assert batch.lines == ["one", "two", "three"]
        assert cursor.offset == path.stat().st_size
        assert cursor.pending == b""

    def test_unterminated_last_line_is_included(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"one\ntwo")
        cursor = Cursor()

        batch = read_all(path, cursor)

        assert batch.lines == ["one", "two"]
        assert cursor.offset == 7
        assert cursor.pending == b""

    def test_empty_file(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"")
        cursor = Cursor(offset=10)

        assert read_all(path, cursor).lines == []
        assert cursor.offset == 0

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_all(tmp_path / "missing.log", Cursor())

    def test_oversized_line_is_counted(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"ok\n" + b"x" * 100 + b"\nfine\n")

        batch = read_all(path, Cursor(max_line_bytes=10))

        assert batch.lines == ["ok", "fine"]
        assert batch.oversized == 1


class TestReadIncremental:
    def test_reads_only_appended_data(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"old\n")
        cursor = Cursor()
        read_all(path, cursor)

        with open(path, "ab") as f:
            f.write(b"new\n")

        assert read_incremental(path, cursor).lines == ["new"]
        assert cursor.offset == 8

    def test_partial_line_waits_for_terminator(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"")
        cursor = Cursor()

        with open(path, "ab") as f:
            f.write(b'{"msg":')
        assert read_incremental(path, cursor).lines == []
        assert cursor.offset == 7
        assert cursor.pending == b'{"msg":'

        with open(path, "ab") as f:
            f.write(b'"hi"}\n')
        assert read_incremental(path, cursor).lines == ['{"msg":"hi"}']
        assert cursor.offset == path.stat().st_size

    def test_no_new_data(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"line\n")
        cursor = Cursor()
        read_all(path, cursor)

        assert read_incremental(path, cursor).lines == []
        assert cursor.offset == 5

    def test_truncation_resets_and_rereads(self, tmp_path):
        path = tmp_path / "a.log"
        path.write_bytes(b"first line\nsecond line\n")
        cursor = Cursor()
        read_all(path, cursor)

        path.write_bytes(b"first line\n")
        batch = read_incremental(path, cursor)

        assert batch.lines == ["first line"]
        assert cursor.offset == 11

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_incremental(tmp_path / "missing.log", Cursor())

    def test_directory_raises_os_error(self, tmp_path):
        with pytest.raises(OSError) as excinfo:
            read_incremental(tmp_path, Cursor())
        assert not isinstance(excinfo.value, FileNotFoundError)
