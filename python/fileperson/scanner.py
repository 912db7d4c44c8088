"""
Scanner - Depth-first directory traversal into a tree and a flat file list.

Each directory level is listed with a single os.scandir call and its
children are sorted in natural order. The walk keeps an explicit stack, so
tree depth is not limited by Python's recursion limit. Admitted files are
recorded twice: in their parent directory and in the shared flat list.
"""

import logging
import os
import re
import threading
import time
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

from .config import get_config, IndexerConfig
from .errors import (
    FilePersonError, PathEncodingError, RootAccessError, UnsupportedEntryError,
    handle_error,
)
from .filters import ExtensionFilter
from .models import Directory, FileNode, FsNode, ScanStats


logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> Tuple[Union[str, int], ...]:
    """
    Sort key for natural, case-insensitive ordering.

    Digit runs compare by numeric value, so "file2" sorts before "file10".
    Text and numbers alternate at fixed positions, so keys always compare.
    """
    parts = _DIGITS.split(name.casefold())
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts))


class ProgressCounter:
    """
    Counts entries visited across a whole traversal.

    Increments are locked so one counter can be shared by several workers.
    A progress line is logged every ``every`` entries.
    """

    def __init__(self, every: int = 100):
        self.every = every
        self._value = 0
        self._lock = threading.Lock()

    def tick(self) -> int:
        """Count one entry and return the value before the increment."""
        with self._lock:
            value = self._value
            self._value += 1
        if value % self.every == 0:
            logger.info(f"(load) {value}")
        return value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class Scanner:
    """
    Builds the index tree and the flat file list for a root directory.

    Only a root that cannot be listed raises. Failures below the root are
    logged through the error policy table and the entry is left out.
    """

    def __init__(self, config: IndexerConfig | None = None):
        self.config = config or get_config()
        self.stats = ScanStats()

    def load(
        self,
        root: Union[str, Path],
        extensions: Union[ExtensionFilter, Iterable[str], None] = None,
    ) -> Tuple[Directory, Directory]:
        """
        Index a directory subtree.

        Args:
            root: Directory to index
            extensions: Allow-list (default: config.extensions)

        Returns:
            (tree, flat) where flat holds the admitted files in traversal order

        Raises:
            RootAccessError: the root cannot be opened or listed
        """
        root = Path(root)
        include = self._as_filter(extensions)

        start_time = time.monotonic()
        self.stats = ScanStats()

        try:
            entries = self._list(root)
        except OSError as e:
            error = RootAccessError(root, e)
            handle_error(error, root, "load")
            raise error from e

        tree = Directory(this=root)
        flat = Directory(this=root)
        counter = ProgressCounter(self.config.progress_every)

        self._walk(tree, entries, flat, include, counter)

        self.stats.duration_seconds = time.monotonic() - start_time
        logger.info(f"{root}: {self.stats}")

        return tree, flat

    def _as_filter(
        self, extensions: Union[ExtensionFilter, Iterable[str], None]
    ) -> ExtensionFilter:
        if extensions is None:
            return ExtensionFilter(self.config.extensions)
        if isinstance(extensions, ExtensionFilter):
            return extensions
        if isinstance(extensions, str):
            return ExtensionFilter.parse(extensions)
        return ExtensionFilter(extensions)

    def _list(self, directory: Path) -> List[os.DirEntry]:
        """Immediate children of a directory in natural name order."""
        with os.scandir(directory) as it:
            entries = list(it)
        entries.sort(key=lambda e: (natural_key(e.name), e.name))
        return entries

    def _walk(
        self,
        tree: Directory,
        entries: List[os.DirEntry],
        flat: Directory,
        include: ExtensionFilter,
        counter: ProgressCounter,
    ) -> None:
        """
        Depth-first, pre-order walk over an explicit stack.

        Each frame holds a directory, the iterator over its sorted children
        and its real path. A directory's children are finished before its
        next sibling, so flat keeps the same order as the tree.
        """
        root_real = os.path.realpath(tree.this)
        stack: List[Tuple[Directory, Iterator[os.DirEntry], str]] = [
            (tree, iter(entries), root_real)
        ]
        on_path = {root_real}

        while stack:
            parent, children, real = stack[-1]
            entry = next(children, None)
            if entry is None:
                stack.pop()
                on_path.discard(real)
                continue

            counter.tick()
            self.stats.entries_visited += 1
            path = Path(entry.path)

            try:
                node, child_real = self._load_entry(entry, path, flat, include, on_path)
            except (FilePersonError, OSError) as e:
                handle_error(e, path, "load_entry")
                self.stats.entries_skipped += 1
                continue

            if node is None:
                continue
            parent.entries.append(node)

            if isinstance(node, Directory):
                stack.append((node, iter(self._list_subdirectory(node)), child_real))
                on_path.add(child_real)

    def _list_subdirectory(self, directory: Directory) -> List[os.DirEntry]:
        """Children of a sub-directory. A listing failure leaves it empty."""
        try:
            return self._list(directory.this)
        except OSError as e:
            handle_error(e, directory.this, "list_directory")
            self.stats.entries_skipped += 1
            return []

    def _load_entry(
        self,
        entry: os.DirEntry,
        path: Path,
        flat: Directory,
        include: ExtensionFilter,
        on_path: Set[str],
    ) -> Tuple[Optional[FsNode], Optional[str]]:
        """Node for one entry, plus the real path when it is a directory."""
        if self.config.strict_paths:
            self._check_portable(entry.name, path)

        follow = self.config.follow_symlinks
        if not follow and entry.is_symlink():
            raise UnsupportedEntryError(path)

        if entry.is_dir(follow_symlinks=follow):
            real = os.path.realpath(entry.path)
            if real in on_path:
                logger.warning(f"Skipping symlink cycle: {path} -> {real}")
                self.stats.entries_skipped += 1
                return None, None

            self.stats.directories += 1
            return Directory(this=path), real

        if entry.is_file(follow_symlinks=follow):
            if not include.admits(entry.name):
                self.stats.files_rejected += 1
                return None, None
            flat.entries.append(FileNode(path=path))
            self.stats.files_admitted += 1
            return FileNode(path=path), None

        raise UnsupportedEntryError(path)

    @staticmethod
    def _check_portable(name: str, path: Path) -> None:
        """Names with undecodable bytes come back with surrogate escapes."""
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            raise PathEncodingError(path, name) from None


def load(
    root: Union[str, Path],
    extensions: Union[ExtensionFilter, Iterable[str], None] = None,
    config: IndexerConfig | None = None,
) -> Tuple[Directory, Directory]:
    """
    Convenience function to index a directory.

    Usage:
        tree, flat = load("~/Music", {"mp3", "flac"})
        for node in flat.entries:
            print(node.path)
    """
    scanner = Scanner(config)
    return scanner.load(Path(root).expanduser(), extensions)
