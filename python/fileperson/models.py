"""
Data Models - Type definitions for the index and its annotations.

These dataclasses are the shapes shared by the scanner, the annotation
store and any persistence layer. Every model converts to and from plain
JSON-compatible dicts with stable field names.
"""

import functools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Tag:
    """
    A user label attached to files.

    Identity is case-insensitive: two tags are equal, hash alike and sort
    together when their values match under Unicode case-folding. The
    original casing is kept for display and ``color`` is never part of
    identity.
    """
    value: str
    color: Optional[str] = None

    @classmethod
    def from_str(cls, value: str) -> "Tag":
        """Create an uncolored tag. Never fails."""
        return cls(value=value)

    @property
    def folded(self) -> str:
        return self.value.casefold()

    def display(self) -> str:
        """Original-case value."""
        return self.value

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.folded == other.folded

    def __lt__(self, other: "Tag") -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.folded < other.folded

    def __hash__(self) -> int:
        return hash(self.folded)

    def to_dict(self) -> Dict[str, Any]:
        return {"color": self.color, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(value=data["value"], color=data.get("color"))


@dataclass
class FileInfo:
    """
    Annotations for a single indexed file.

    A record starts out untouched (no deletion decision, no tags). It
    becomes touched once the user tags it or decides on deletion. A record
    that is both marked for deletion and tagged is in a questionable state
    and should be reviewed.
    """
    path: Path
    delete: Optional[bool] = None
    tags: List[Tag] = field(default_factory=list)

    def __post_init__(self):
        self.path = Path(self.path)
        self.tags = [t if isinstance(t, Tag) else Tag.from_str(t) for t in self.tags]

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileInfo":
        """Create an untouched record for a file."""
        return cls(path=Path(path))

    def touched(self) -> bool:
        return self.delete is not None or bool(self.tags)

    def set_tags(self, tags: Iterable[Union[Tag, str]]) -> None:
        """Replace the tag list. The deletion flag is left as is."""
        self.tags = [t if isinstance(t, Tag) else Tag.from_str(t) for t in tags]

    def add_tag(self, tag: Union[Tag, str]) -> bool:
        """Append a tag unless an equal one is present. Returns True if added."""
        tag = tag if isinstance(tag, Tag) else Tag.from_str(tag)
        if tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def mark_delete(self, delete: bool = True) -> None:
        self.delete = delete

    def questionable_state(self) -> bool:
        """A file marked for deletion that still has tags."""
        return self.delete is True and bool(self.tags)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "delete": self.delete,
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileInfo":
        return cls(
            path=Path(data["path"]),
            delete=data.get("delete"),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )


@dataclass
class FileNode:
    """A file leaf in the index tree."""
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class Directory:
    """
    A directory in the index tree.

    Entries are files and nested directories in natural, case-insensitive
    name order. Each directory is owned by exactly one parent.
    """
    this: Path
    entries: List["FsNode"] = field(default_factory=list)

    @property
    def path(self) -> Path:
        return self.this

    @property
    def name(self) -> str:
        return self.this.name

    def files(self) -> Iterator[FileNode]:
        """Every file below this directory, in pre-order."""
        for entry in self._walk():
            if isinstance(entry, FileNode):
                yield entry

    def directories(self) -> Iterator["Directory"]:
        """Every nested directory below this one, in pre-order."""
        for entry in self._walk():
            if isinstance(entry, Directory):
                yield entry

    def _walk(self) -> Iterator["FsNode"]:
        # Explicit stack so deep trees do not hit the recursion limit.
        stack = [iter(self.entries)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            yield entry
            if isinstance(entry, Directory):
                stack.append(iter(entry.entries))

    def find(self, path: Union[str, Path]) -> Optional["FsNode"]:
        """
        Resolve a path to its node by walking components from here.

        Relative paths are taken relative to this directory. Returns None
        when the path is outside the tree or was not indexed.
        """
        path = Path(path)
        try:
            relative = path.relative_to(self.this)
        except ValueError:
            if path.is_absolute():
                return None
            relative = path

        node: FsNode = self
        current = self.this
        for part in relative.parts:
            if not isinstance(node, Directory):
                return None
            current = current / part
            node = next((e for e in node.entries if e.path == current), None)
            if node is None:
                return None
        return node

    def to_dict(self) -> Dict[str, Any]:
        return {
            "this": str(self.this),
            "entries": [node_to_dict(e) for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Directory":
        return cls(
            this=Path(data["this"]),
            entries=[node_from_dict(e) for e in data.get("entries", [])],
        )


FsNode = Union[FileNode, Directory]


def node_to_dict(node: FsNode) -> Dict[str, Any]:
    """Externally tagged form: {"File": path} or {"Directory": {...}}."""
    if isinstance(node, Directory):
        return {"Directory": node.to_dict()}
    return {"File": str(node.path)}


def node_from_dict(data: Dict[str, Any]) -> FsNode:
    if "File" in data:
        return FileNode(path=Path(data["File"]))
    if "Directory" in data:
        return Directory.from_dict(data["Directory"])
    raise ValueError(f"Unknown tree node: {sorted(data)}")


@dataclass
class ScanStats:
    """Statistics from one index build."""
    entries_visited: int = 0
    directories: int = 0
    files_admitted: int = 0
    files_rejected: int = 0
    entries_skipped: int = 0    # Errors, broken links, special files, cycles
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        return (
            f"Indexed {self.files_admitted} files in {self.directories} directories "
            f"({self.entries_visited} entries visited, "
            f"{self.files_rejected} rejected by extension, "
            f"{self.entries_skipped} skipped) "
            f"in {self.duration_seconds:.1f}s"
        )
