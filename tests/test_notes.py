"""Tests for notes file helpers."""

import os

from dirnotes.notes import extract_summary, notes_path, notes_version, read_summary, resolve_dirs


class TestExtractSummary:
    def test_first_line(self):
        assert extract_summary("hello\nworld\n") == "hello"

    def test_skips_blank_lines(self):
        assert extract_summary("\n   \n\t\n  deploy on friday  \nnot this\n") == "deploy on friday"

    def test_empty(self):
        assert extract_summary("") is None

    def test_only_whitespace(self):
        assert extract_summary("  \n\n \t \n") is None

    def test_windows_line_endings(self):
        assert extract_summary("\r\nfirst\r\nsecond\r\n") == "first"

    def test_only_newlines_end_a_line(self):
        assert extract_summary("first\fpage\vtab\u2028more\nsecond\n") == "first\fpage\vtab\u2028more"

    def test_record_separator_stays_in_line(self):
        assert extract_summary("part one\x1epart two\nbody\n") == "part one\x1epart two"


class TestResolveDirs:
    def test_empty_means_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_dirs([]) == [tmp_path]

    def test_deleted_cwd_gives_no_directories(self, tmp_path, monkeypatch):
        gone = tmp_path / "gone"
        gone.mkdir()
        monkeypatch.chdir(gone)
        gone.rmdir()

        assert resolve_dirs([]) == []

    def test_absolute_paths_resolve_in_deleted_cwd(self, tmp_path, monkeypatch):
        gone = tmp_path / "gone"
        gone.mkdir()
        monkeypatch.chdir(gone)
        gone.rmdir()

        assert resolve_dirs([tmp_path / "a", "relative"]) == [tmp_path / "a"]

    def test_normalizes_dots(self, tmp_path):
        (tmp_path / "a").mkdir()
        resolved = resolve_dirs([str(tmp_path / "a" / ".." / "a" / ".")])
        assert resolved == [tmp_path / "a"]

    def test_relative_paths(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_dirs(["sub"]) == [tmp_path / "sub"]

    def test_expands_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert resolve_dirs(["~/projects"]) == [tmp_path / "projects"]

    def test_removes_duplicates_keeping_order(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        assert resolve_dirs([a, b, f"{a}/", a]) == [a, b]


class TestNotesFile:
    def test_notes_path(self, tmp_path):
        assert notes_path(tmp_path, ".dnotes") == tmp_path / ".dnotes"

    def test_read_summary(self, tmp_path):
        notes = tmp_path / ".notes"
        notes.write_text("\nbuy milk\n")
        assert read_summary(notes) == "buy milk"

    def test_read_summary_tolerates_bad_bytes(self, tmp_path):
        notes = tmp_path / ".notes"
        notes.write_bytes(b"caf\xe9 notes\n")
        assert read_summary(notes).startswith("caf")

    def test_version_tracks_mtime(self, tmp_path):
        notes = tmp_path / ".notes"
        notes.write_text("x")
        first = notes_version(notes)

        os.utime(notes, ns=(first, first + 1_000_000_000))

        assert notes_version(notes) == first + 1_000_000_000
