"""
State - The indexed tree plus the user's per-file annotations.

Records are keyed by path: adding a record for a path that already has one
replaces it. Tag queries are recomputed on every call, so they always
reflect the current records.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from .config import get_config, IndexerConfig
from .filters import ExtensionFilter
from .models import Directory, FileInfo, Tag
from .scanner import Scanner


logger = logging.getLogger(__name__)


class State:
    """
    Annotation store over an index.

    Not synchronized: one owner, one thread. ``files()`` hands out an
    immutable snapshot that other threads may iterate freely.
    """

    def __init__(
        self,
        root: Directory,
        flat: Directory,
        infos: Iterable[FileInfo] = (),
    ):
        self.root = root
        self.flat = flat
        self._infos: Dict[Path, FileInfo] = {}
        self.extend(infos)

    @classmethod
    def from_path(
        cls,
        root: Union[str, Path],
        extensions: Union[ExtensionFilter, Iterable[str], None] = None,
        config: IndexerConfig | None = None,
    ) -> "State":
        """
        Index ``root`` and start with no annotations.

        Raises:
            RootAccessError: the root cannot be opened or listed
        """
        scanner = Scanner(config or get_config())
        tree, flat = scanner.load(Path(root).expanduser(), extensions)
        return cls(tree, flat)

    # --- Records ---

    def add(self, info: FileInfo) -> None:
        """
        Store a record, replacing any earlier record for the same path.

        The record is kept by reference under its current path. Its tags and
        deletion flag may be edited afterwards, but not its path: to move a
        record, ``remove`` it and ``add`` a new one.
        """
        if info.questionable_state():
            logger.warning(
                f"Questionable state: {info.path} is marked for deletion "
                f"but has tags: {', '.join(t.display() for t in info.tags)}"
            )
        self._infos[info.path] = info

    def extend(self, infos: Iterable[FileInfo]) -> None:
        for info in infos:
            self.add(info)

    def remove(self, path: Union[str, Path]) -> Optional[FileInfo]:
        """Drop the record for a path, returning the file to untouched."""
        return self._infos.pop(Path(path), None)

    def get(self, path: Union[str, Path]) -> Optional[FileInfo]:
        return self._infos.get(Path(path))

    def __contains__(self, path: object) -> bool:
        if isinstance(path, FileInfo):
            path = path.path
        if not isinstance(path, (str, Path)):
            return False
        return Path(path) in self._infos

    def __len__(self) -> int:
        return len(self._infos)

    def __iter__(self) -> Iterator[FileInfo]:
        return iter(self._infos.values())

    @property
    def infos(self) -> Tuple[FileInfo, ...]:
        return tuple(self._infos.values())

    def questionable(self) -> Iterator[FileInfo]:
        """Records marked for deletion that still carry tags."""
        return (info for info in self._infos.values() if info.questionable_state())

    def files(self) -> Tuple[Path, ...]:
        """Paths of all admitted files in traversal order."""
        return tuple(node.path for node in self.flat.entries)

    # --- Tag queries ---

    def tags(self) -> Iterator[Tag]:
        """Sorted, case-insensitively distinct tags across all records."""
        return self.tags_filter(lambda info: True)

    def tags_filter(self, predicate: Callable[[FileInfo], bool]) -> Iterator[Tag]:
        """
        Sorted, case-insensitively distinct tags of matching records.

        When several tags differ only in case, the first one met wins,
        walking records in insertion order and each record's tags in order.
        """
        seen: Dict[Tag, Tag] = {}
        for info in self._infos.values():
            if not predicate(info):
                continue
            for tag in info.tags:
                seen.setdefault(tag, tag)
        return iter(sorted(seen.values()))

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root.to_dict(),
            "flat": self.flat.to_dict(),
            "infos": [info.to_dict() for info in self._infos.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "State":
        return cls(
            root=Directory.from_dict(data["root"]),
            flat=Directory.from_dict(data["flat"]),
            infos=[FileInfo.from_dict(i) for i in data.get("infos", [])],
        )
