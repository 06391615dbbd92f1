"""Per-run staging area for intermediate documents.

One StagingArea exists per pipeline run. Each chunk render works inside its
own slot, a subdirectory named by the chunk's staging key, so concurrent
renders never touch each other's files.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


class StagingArea:
    """Temporary directory shared by the chunk renders of one run."""

    def __init__(self, root: str | Path | None = None, prefix: str = "sheetalbum-") -> None:
        self._root = root
        self._prefix = prefix
        self._tmp: tempfile.TemporaryDirectory[str] | None = None
        self._active: set[str] = set()

    @property
    def path(self) -> Path:
        if self._tmp is None:
            raise RuntimeError("StagingArea is not open")
        return Path(self._tmp.name)

    def open(self) -> StagingArea:
        if self._tmp is None:
            self._tmp = tempfile.TemporaryDirectory(prefix=self._prefix, dir=self._root)
            logger.debug("Opened staging area %s", self._tmp.name)
        return self

    def close(self) -> None:
        if self._tmp is not None:
            self._tmp.cleanup()
            self._tmp = None
            self._active.clear()

    @contextmanager
    def slot(self, key: str) -> Iterator[Path]:
        """Yield a private directory for ``key``, removed on exit.

        Raises:
            ValueError: If ``key`` is already in use or is not a plain name
        """
        if not key or Path(key).name != key:
            raise ValueError(f"Invalid staging key: {key!r}")
        if key in self._active:
            raise ValueError(f"Staging key already in use: {key}")
        directory = self.path / key
        directory.mkdir()
        self._active.add(key)
        try:
            yield directory
        finally:
            self._active.discard(key)
            shutil.rmtree(directory, ignore_errors=True)

    def __enter__(self) -> StagingArea:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
