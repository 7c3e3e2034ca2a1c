"""Local directory listing and cleanup."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fluentkit.errors import NotADirectoryPathError, PathNotFoundError

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


class FluentDirectory:
    """Wrapper around an existing directory on the local filesystem.

    Symbolic links are treated as files: they are listed and removed, never
    followed.
    """

    def __init__(self, path: PathLike) -> None:
        self._path = Path(path)

        if not self._path.exists():
            raise PathNotFoundError(str(path))

        if not self._path.is_dir():
            raise NotADirectoryPathError(str(path))

    def __repr__(self) -> str:
        return f"FluentDirectory({str(self._path)!r})"

    @property
    def path(self) -> Path:
        """The wrapped directory."""
        return self._path

    # --- Listing ---

    def content_list(self, recursive: bool = False) -> list[str]:
        """List the directory contents.

        Directories come first, in name order; with `recursive` each directory
        is followed by its own listing (as paths relative to this directory).
        Files follow, sorted by name.

        Args:
            recursive: Also list the contents of nested directories.

        Returns:
            Relative paths, e.g. `["docs", "docs/index.md", "a.txt"]`.
        """
        dirs: list[str] = []
        files: list[str] = []

        for entry in sorted(self._path.iterdir(), key=lambda p: p.name):
            if _is_real_dir(entry):
                dirs.append(entry.name)
                if recursive:
                    nested = FluentDirectory(entry).content_list(recursive=True)
                    dirs.extend(str(Path(entry.name, item)) for item in nested)
            else:
                files.append(entry.name)

        return dirs + sorted(files)

    # --- Cleanup ---

    def clear(self) -> None:
        """Delete everything inside the directory, but keep the directory itself.

        Items are removed deepest first. A failure part-way through leaves the
        remaining items in place.
        """
        items = self.content_list(recursive=True)
        for item in reversed(items):
            item_path = self._path / item
            if _is_real_dir(item_path):
                item_path.rmdir()
            else:
                item_path.unlink()

        logger.debug("Cleared %d items from %s", len(items), self._path)

    def delete(self) -> None:
        """Delete the directory with all of its contents."""
        self.clear()
        self._path.rmdir()
        logger.debug("Deleted directory %s", self._path)


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()
