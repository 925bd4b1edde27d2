"""Enumerate and deduplicate the inputs of a checksum run."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .options import STDIN_MARKER

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class InputSource:
    """A labelled byte stream to checksum: a named file or standard input."""

    label: str
    path: Optional[str] = None

    @property
    def is_stdin(self) -> bool:
        return self.path is None

    @classmethod
    def stdin(cls) -> "InputSource":
        return cls(label=STDIN_MARKER)

    @classmethod
    def file(cls, path: str) -> "InputSource":
        return cls(label=path, path=path)


def canonical_path(path: str) -> str:
    """Return the absolute, normalised form of *path* used as a dedup key.

    Falls back to *path* itself when normalisation fails (for example when the
    working directory has been removed).
    """

    try:
        return os.path.abspath(path)
    except OSError:
        LOGGER.debug("Unable to normalise path", extra={"path": path})
        return path


class OrderedPathSet:
    """Insertion-ordered set of paths keyed by their canonical form.

    The first spelling seen for a canonical path is the one kept.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def add(self, path: str) -> bool:
        key = canonical_path(path)
        if key in self._entries:
            LOGGER.debug("Skipping duplicate input", extra={"path": path})
            return False
        self._entries[key] = path
        return True

    def update(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.add(path)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and canonical_path(path) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def _sorted_entries(directory: str) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as iterator:
        return sorted(iterator, key=lambda entry: entry.name)


def list_directory_files(directory: str) -> Iterator[str]:
    """Yield the files directly inside *directory*, sorted by name.

    Entries that are directories are skipped; symbolic links are not followed
    when making that decision.
    """

    for entry in _sorted_entries(directory):
        if entry.is_dir(follow_symlinks=False):
            LOGGER.debug("Skipping directory entry", extra={"path": entry.path})
            continue
        yield os.path.normpath(os.path.join(directory, entry.name))


def walk_directory_files(root: str) -> Iterator[str]:
    """Yield every non-directory below *root*, depth first in lexical order."""

    if not stat.S_ISDIR(os.lstat(root).st_mode):
        yield root
        return
    yield from _walk(root)


def _walk(root: str) -> Iterator[str]:
    # One pending iterator per open directory; the last one is the deepest.
    pending: list[tuple[str, Iterator[os.DirEntry[str]]]] = [
        (root, iter(_sorted_entries(root)))
    ]
    while pending:
        directory, entries = pending[-1]
        entry = next(entries, None)
        if entry is None:
            pending.pop()
            continue
        path = os.path.normpath(os.path.join(directory, entry.name))
        if entry.is_dir(follow_symlinks=False):
            pending.append((path, iter(_sorted_entries(path))))
        else:
            yield path


def collect_paths(
    files: Iterable[str] = (),
    directory: Optional[str] = None,
    *,
    recursive: bool = False,
) -> list[str]:
    """Return the deduplicated file paths to checksum, explicit files first.

    A missing or unreadable *directory* raises the underlying :class:`OSError`.
    """

    if recursive and directory is None:
        raise ValueError("--recursive requires --directory")

    paths = OrderedPathSet()
    paths.update(files)
    if directory is not None:
        if recursive:
            paths.update(walk_directory_files(directory))
        else:
            paths.update(list_directory_files(directory))

    collected = list(paths)
    LOGGER.debug(
        "Collected input paths",
        extra={"count": len(collected), "directory": directory, "recursive": recursive},
    )
    return collected


def collect_inputs(
    files: Iterable[str] = (),
    directory: Optional[str] = None,
    *,
    recursive: bool = False,
) -> list[InputSource]:
    """Resolve the inputs of a sum run, falling back to standard input."""

    paths = collect_paths(files, directory, recursive=recursive)
    if not paths:
        return [InputSource.stdin()]
    return [InputSource.file(path) for path in paths]


__all__ = [
    "InputSource",
    "OrderedPathSet",
    "canonical_path",
    "collect_inputs",
    "collect_paths",
    "list_directory_files",
    "walk_directory_files",
]
