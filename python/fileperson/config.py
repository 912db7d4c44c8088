"""
Configuration - Centralized settings for indexing and annotation.

Uses environment variables with sensible defaults. The default root is
resolved to an absolute path.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class IndexerConfig:
    """
    Configuration for the indexer.

    The root defaults to the user's Desktop and the allow-list to
    Photoshop documents, matching how the tool was first used.
    """

    # --- Paths ---
    root: Path = field(default_factory=lambda: Path.home() / "Desktop")

    # --- Filtering ---
    extensions: Set[str] = field(default_factory=lambda: {"psd"})

    # --- Traversal ---
    progress_every: int = 100       # Log a progress line every N entries
    follow_symlinks: bool = True    # Descend into symlinked directories
    strict_paths: bool = True       # Skip names that are not valid UTF-8

    def __post_init__(self):
        """Resolve the root and normalize the allow-list."""
        self.root = Path(self.root).expanduser().resolve()
        normalized = (e.strip().lstrip(".").lower() for e in self.extensions)
        self.extensions = {e for e in normalized if e}
        if self.progress_every < 1:
            raise ValueError(f"progress_every must be positive, got {self.progress_every}")

    @classmethod
    def from_env(cls) -> "IndexerConfig":
        """
        Create config from environment variables.

        Supported env vars:
            FILEPERSON_ROOT: Directory to index
            FILEPERSON_EXTENSIONS: Comma-separated allow-list (e.g. "mp3,wav")
            FILEPERSON_PROGRESS_EVERY: Progress log cadence
            FILEPERSON_FOLLOW_SYMLINKS: "1"/"0"
            FILEPERSON_STRICT_PATHS: "1"/"0"
        """
        config = cls()

        if root := os.environ.get("FILEPERSON_ROOT"):
            config.root = Path(root)

        if extensions := os.environ.get("FILEPERSON_EXTENSIONS"):
            config.extensions = set(extensions.split(","))

        if every := os.environ.get("FILEPERSON_PROGRESS_EVERY"):
            config.progress_every = int(every)

        if follow := os.environ.get("FILEPERSON_FOLLOW_SYMLINKS"):
            config.follow_symlinks = follow.strip().lower() in _TRUE_VALUES

        if strict := os.environ.get("FILEPERSON_STRICT_PATHS"):
            config.strict_paths = strict.strip().lower() in _TRUE_VALUES

        config.__post_init__()
        return config


# Singleton default config
_default_config: IndexerConfig | None = None


def get_config() -> IndexerConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = IndexerConfig.from_env()
    return _default_config


def set_config(config: IndexerConfig | None) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
