"""Unit tests for workspace manager."""

from pathlib import Path
from unittest.mock import patch

import pytest

from models import ArchiveResult, OutputUnit
from tools.common import write_unit
from workspace import partial_path, prepare_output_dir, write_output


class TestPrepareOutputDir:
    """Tests for output directory creation."""

    def test_creates_nested_folder(self, tmp_path: Path) -> None:
        """Parents are created as needed."""
        folder = prepare_output_dir(tmp_path / "a" / "b")
        assert folder.is_dir()
        assert folder.is_absolute()

    def test_existing_folder_is_fine(self, tmp_path: Path) -> None:
        assert prepare_output_dir(tmp_path) == tmp_path.resolve()


class TestWriteOutput:
    """Tests for atomic file writes."""

    def test_writes_content(self, tmp_path: Path) -> None:
        path = write_output(tmp_path, OutputUnit(name="general.txt", content="hello\n"))

        assert path == tmp_path / "general.txt"
        assert path.read_text(encoding="utf-8") == "hello\n"
        assert not partial_path(tmp_path, "general.txt").exists()

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        write_output(tmp_path, OutputUnit(name="x.txt", content="old"))
        write_output(tmp_path, OutputUnit(name="x.txt", content="new"))
        assert (tmp_path / "x.txt").read_text(encoding="utf-8") == "new"

    def test_utf8_content(self, tmp_path: Path) -> None:
        path = write_output(tmp_path, OutputUnit(name="u.txt", content="café … ©\n"))
        assert path.read_bytes() == "café … ©\n".encode("utf-8")

    def test_failed_rename_leaves_nothing_behind(self, tmp_path: Path) -> None:
        """A unit either lands whole under its final name or not at all."""
        with patch("workspace.manager.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_output(tmp_path, OutputUnit(name="x.txt", content="data"))

        assert list(tmp_path.iterdir()) == []

    def test_failed_rename_keeps_previous_file(self, tmp_path: Path) -> None:
        write_output(tmp_path, OutputUnit(name="x.txt", content="complete"))

        with patch("workspace.manager.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_output(tmp_path, OutputUnit(name="x.txt", content="half"))

        assert (tmp_path / "x.txt").read_text(encoding="utf-8") == "complete"
        assert [p.name for p in tmp_path.iterdir()] == ["x.txt"]


class TestWriteUnit:
    """Result accounting around write_output."""

    def test_success_is_counted(self, tmp_path: Path) -> None:
        result = ArchiveResult(source="gmail", output_dir=str(tmp_path))

        ok = write_unit(tmp_path, OutputUnit(name="a.txt", content="x"), 3, result, "INBOX")

        assert ok
        assert result.files == ["a.txt"]
        assert result.items == 3
        assert result.errors == []

    def test_failure_is_recorded(self, tmp_path: Path) -> None:
        result = ArchiveResult(source="gmail", output_dir=str(tmp_path))

        with patch("workspace.manager.os.replace", side_effect=OSError("disk full")):
            ok = write_unit(tmp_path, OutputUnit(name="a.txt", content="x"), 3, result, "INBOX")

        assert not ok
        assert result.files == []
        assert result.items == 0
        assert result.errors[0]["kind"] == "write_failed"
        assert result.errors[0]["file"] == "a.txt"
        assert result.errors[0]["key"] == "INBOX"
