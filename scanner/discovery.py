"""File discovery utilities for scanning source trees."""

from pathlib import Path
from typing import Iterator, Optional, Pattern


# Container folders may hold assets next to route modules
IGNORED_FILENAMES = {".ds_store"}
IGNORED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
TEST_FILE_MARKER = ".test."


def iter_files(
    root: Path,
    base: Optional[Path] = None,
    ignore_pattern: Optional[Pattern[str]] = None,
) -> Iterator[Path]:
    """
    Iterate over files in a directory tree, in sorted order.

    Args:
        root: Root directory to scan.
        base: Directory that ``ignore_pattern`` paths are made relative to.
              Defaults to ``root``.
        ignore_pattern: Entries (files or directories) whose base-relative
                        path matches this pattern are skipped.

    Yields:
        Path objects for every file that is not ignored.
    """
    root = root.resolve()
    base = base.resolve() if base is not None else root

    def _walk(current: Path) -> Iterator[Path]:
        for entry in sorted(current.iterdir()):
            if ignore_pattern is not None and ignore_pattern.search(get_display_path(entry, base)):
                continue
            if entry.is_dir():
                yield from _walk(entry)
            elif entry.is_file():
                yield entry

    yield from _walk(root)


def is_container_candidate(file_path: Path) -> bool:
    """Check whether a file under a container root can be a route module."""
    name = file_path.name.lower()
    if name in IGNORED_FILENAMES:
        return False
    if TEST_FILE_MARKER in name:
        return False
    return file_path.suffix.lower() not in IGNORED_EXTENSIONS


def get_relative_path(file_path: Path, root: Path) -> Path:
    """Get the path relative to root, handling edge cases."""
    try:
        return file_path.resolve().relative_to(root.resolve())
    except ValueError:
        return file_path


def get_display_path(file_path: Path, base: Path) -> str:
    """
    Render a path the way the generated artifacts key it.

    Files under ``base`` become ``./sub/dir/file.jsx``; anything else keeps
    its own path. Separators are always forward slashes.
    """
    relative = get_relative_path(file_path, base)
    text = relative.as_posix()
    if relative.is_absolute():
        return text
    return f"./{text}"
