"""Tests for reading and writing ledger files."""

import os
from pathlib import Path

import pytest

from coinjar import storage
from coinjar.exceptions import LedgerWriteError
from coinjar.storage import FileLedgerWriter, MemoryLedgerWriter, read_ledger


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(storage._replace.retry, "sleep", lambda _: None)


class TestFileLedgerWriter:
    """Tests for FileLedgerWriter."""

    def test_writes_and_replaces(self, tmp_path: Path) -> None:
        """Should replace the file content."""
        path = tmp_path / "main.coin"
        path.write_text("old\n", encoding="utf-8")

        FileLedgerWriter(path).write("2024-01-01\n")

        assert read_ledger(path) == "2024-01-01\n"
        assert [p.name for p in tmp_path.iterdir()] == ["main.coin"]

    def test_keeps_unicode(self, tmp_path: Path) -> None:
        """Should write UTF-8."""
        path = tmp_path / "main.coin"

        FileLedgerWriter(path).write("    € EUR ; Euro\n")

        assert path.read_bytes() == "    € EUR ; Euro\n".encode()

    def test_target(self, tmp_path: Path) -> None:
        """Should name the file it writes to."""
        assert FileLedgerWriter(tmp_path / "a.coin").target == str(tmp_path / "a.coin")

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Should raise LedgerWriteError when the directory does not exist."""
        path = tmp_path / "missing" / "main.coin"

        with pytest.raises(LedgerWriteError) as exc:
            FileLedgerWriter(path).write("x\n")

        assert exc.value.path == str(path)

    def test_failure_keeps_old_file(self, tmp_path: Path) -> None:
        """Should leave the target untouched and remove the temporary file."""
        target = tmp_path / "ledger"
        target.mkdir()

        with pytest.raises(LedgerWriteError):
            FileLedgerWriter(target).write("x\n")

        assert target.is_dir()
        assert [p.name for p in tmp_path.iterdir()] == ["ledger"]

    def test_retries_locked_target(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should retry the replace while the target is locked."""
        path = tmp_path / "main.coin"
        real_replace = os.replace
        calls: list[str] = []

        def flaky_replace(source: Path, target: Path) -> None:
            calls.append(str(target))
            if len(calls) < 3:
                raise PermissionError("locked")
            real_replace(source, target)

        monkeypatch.setattr(storage.os, "replace", flaky_replace)

        FileLedgerWriter(path).write("done\n")

        assert len(calls) == 3
        assert read_ledger(path) == "done\n"

    def test_gives_up_after_retries(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should raise LedgerWriteError once the retries are exhausted."""
        path = tmp_path / "main.coin"
        path.write_text("old\n", encoding="utf-8")

        def locked(source: Path, target: Path) -> None:
            raise PermissionError("locked")

        monkeypatch.setattr(storage.os, "replace", locked)

        with pytest.raises(LedgerWriteError, match="locked"):
            FileLedgerWriter(path).write("new\n")

        assert read_ledger(path) == "old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["main.coin"]


class TestMemoryLedgerWriter:
    """Tests for MemoryLedgerWriter."""

    def test_collects_writes(self) -> None:
        """Should keep every write and expose the last one."""
        writer = MemoryLedgerWriter()
        assert writer.text is None

        writer.write("a")
        writer.write("b")

        assert writer.writes == ["a", "b"]
        assert writer.text == "b"
        assert writer.target == "<memory>"
