"""
Extension allow-list used to admit files into the index.
"""

from typing import FrozenSet, Iterable, Iterator


class ExtensionFilter:
    """
    Case-insensitive set of file extensions.

    Extensions are stored lowercase without a leading dot. Directories are
    never checked against the filter.
    """

    def __init__(self, extensions: Iterable[str]):
        self._extensions: FrozenSet[str] = frozenset(
            e.strip().lstrip(".").lower() for e in extensions if e.strip().lstrip(".")
        )

    @classmethod
    def parse(cls, text: str) -> "ExtensionFilter":
        """Build a filter from a comma-separated list such as "mp3, WAV"."""
        return cls(text.split(","))

    def admits(self, name: str) -> bool:
        """True if the text after the last dot of ``name`` is allowed."""
        if "." not in name:
            return False
        extension = name.rsplit(".", 1)[1]
        return extension.lower() in self._extensions

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and extension.lower() in self._extensions

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._extensions))

    def __len__(self) -> int:
        return len(self._extensions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtensionFilter):
            return NotImplemented
        return self._extensions == other._extensions

    def __hash__(self) -> int:
        return hash(self._extensions)

    def __repr__(self) -> str:
        return f"ExtensionFilter({sorted(self._extensions)!r})"
