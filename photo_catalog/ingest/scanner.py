from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from photo_catalog.core.models import ScannedFile

logger = logging.getLogger(__name__)


class PhotosDir:
    """A photo tree on disk; catalog paths are relative to `basedir`."""

    def __init__(self, basedir: str | Path):
        self.basedir = Path(basedir)

    def get_raw_path(self, path: str) -> Path:
        return self.basedir / path

    def has_file(self, path: str) -> bool:
        return self.get_raw_path(path).is_file()

    def subpath(self, fullpath: str | Path) -> str:
        """Return `fullpath` relative to the base directory, posix style."""
        try:
            relative = Path(fullpath).relative_to(self.basedir)
        except ValueError as exc:
            raise ValueError(f"{fullpath} is not inside {self.basedir}") from exc
        return "" if relative == Path(".") else relative.as_posix()

    def walk(self, only_in: str | Path = "") -> Iterator[ScannedFile]:
        """Lazily yield every regular file below `only_in`, depth first.

        A missing or non-directory `only_in` raises right away. Problems with
        individual entries further down are yielded as a ScannedFile with
        `error` set so the caller can count them and move on.
        """
        start = self.basedir / only_in
        if not start.exists():
            raise FileNotFoundError(f"Directory not found: {start}")
        if not start.is_dir():
            raise NotADirectoryError(f"Not a directory: {start}")
        return self._walk(start, strict=True)

    def _walk(self, directory: Path, strict: bool = False) -> Iterator[ScannedFile]:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            if strict:
                raise
            logger.warning("Cannot list %s: %s", directory, exc)
            yield ScannedFile(path=self.subpath(directory), error=str(exc))
            return

        for entry in entries:
            path = self.subpath(entry.path)
            try:
                if entry.is_symlink():
                    yield ScannedFile(path=path, error="symbolic link not followed")
                elif entry.is_dir(follow_symlinks=False):
                    yield from self._walk(Path(entry.path))
                elif entry.is_file(follow_symlinks=False):
                    yield ScannedFile(path=path)
            except OSError as exc:
                yield ScannedFile(path=path, error=str(exc))
