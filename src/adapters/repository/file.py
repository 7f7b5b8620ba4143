"""
File repository adapter - Implements VerificationStore protocol.

Stores verified email addresses as a newline-delimited append log.
A single in-process lock serializes every read and write, so the
membership check and the append in insert() are one atomic step and
readers never observe a half-written record.
"""

import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from src.domain.exceptions import StorageError
from src.domain.ports import InsertResult

logger = logging.getLogger(__name__)


class FileVerificationStore:
    """
    Implements VerificationStore protocol via a local text file.

    Uses structural subtyping - no explicit inheritance from Protocol.
    One instance must be shared by all callers in the process; two
    instances pointing at the same file do not exclude each other.
    """

    def __init__(self, path: str | Path, lock_timeout: float = 5.0) -> None:
        """
        Initialize store for the given file.

        Args:
            path: Location of the verified emails file (created on first insert)
            lock_timeout: Seconds to wait for the store lock before failing
        """
        self._path = Path(path)
        self._lock_timeout = lock_timeout
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def contains(self, email: str) -> bool:
        with self._locked():
            return email in self._parse(self._read())

    def insert(self, email: str) -> InsertResult:
        """
        Append the email unless it is already recorded.

        The write is flushed and fsynced before returning, so a
        successful insert survives a process restart.
        """
        with self._locked():
            content = self._read()
            if email in self._parse(content):
                return InsertResult.ALREADY_PRESENT

            # Start on a fresh line if a previous writer died mid-record
            prefix = "\n" if content and not content.endswith("\n") else ""
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as f:
                    f.write(f"{prefix}{email}\n")
                    f.flush()
                    os.fsync(f.fileno())
            except (OSError, UnicodeError) as e:
                logger.error("Failed to write %s: %s", self._path, e)
                raise StorageError(f"Failed to write verified emails file: {e}") from e
            return InsertResult.INSERTED

    def ping(self) -> None:
        with self._locked():
            self._read()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StorageError(
                f"Timed out after {self._lock_timeout}s waiting for verified emails file"
            )
        try:
            yield
        finally:
            self._lock.release()

    def _read(self) -> str:
        """Read raw file content; a missing file holds no records."""
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeError) as e:
            logger.error("Failed to read %s: %s", self._path, e)
            raise StorageError(f"Failed to read verified emails file: {e}") from e

    @staticmethod
    def _parse(content: str) -> set[str]:
        lines = content.split("\n")
        # The last element is either "" or an unterminated (torn) record
        return {line for line in lines[:-1] if line}
