"""Reading ledger files and writing them atomically."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from coinjar.exceptions import LedgerWriteError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class LedgerWriter(Protocol):
    """Collaborator that persists canonical ledger text."""

    def write(self, text: str) -> None: ...

    @property
    def target(self) -> str: ...


def _log_replace_retry(retry_state: RetryCallState) -> None:
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "Replacing ledger failed (%s), attempt %d", exception, retry_state.attempt_number
    )


@retry(
    retry=retry_if_exception_type(PermissionError),
    wait=wait_exponential(multiplier=0.05, max=1),
    stop=stop_after_attempt(3),
    before_sleep=_log_replace_retry,
    reraise=True,
)
def _replace(source: Path, target: Path) -> None:
    # Windows refuses to replace a file another process holds open
    os.replace(source, target)


def read_ledger(path: Path) -> str:
    """Read a ledger file as UTF-8 text."""
    return path.read_text(encoding=ENCODING)


class FileLedgerWriter:
    """Writes ledger text to a file through a temporary file and an atomic replace.

    On failure the previous file is left untouched.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def target(self) -> str:
        return str(self.path)

    def write(self, text: str) -> None:
        """Replace the file's content with ``text``.

        Raises:
            LedgerWriteError: If the temporary file cannot be written or moved
        """
        directory = self.path.parent
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=ENCODING,
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            _replace(Path(tmp_name), self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise LedgerWriteError(f"Cannot write ledger to {self.path}: {e}", path=str(self.path)) from e

        logger.info("Saved ledger to %s (%d bytes)", self.path, len(text.encode(ENCODING)))


class MemoryLedgerWriter:
    """Keeps written text in memory; used for dry runs and tests."""

    def __init__(self, target: str = "<memory>") -> None:
        self._target = target
        self.writes: list[str] = []

    @property
    def target(self) -> str:
        return self._target

    @property
    def text(self) -> str | None:
        """The last written text, if any."""
        return self.writes[-1] if self.writes else None

    def write(self, text: str) -> None:
        self.writes.append(text)
