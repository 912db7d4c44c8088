"""
Test Configuration - Shared fixtures for index and annotation tests.

Uses pytest fixtures to create isolated directory trees.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from fileperson.config import IndexerConfig, set_config


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="fileperson_test_")
    # Resolve to handle macOS /var -> /private/var symlink
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> Generator[IndexerConfig, None, None]:
    """Create an isolated test configuration."""
    config = IndexerConfig(
        root=temp_dir,
        extensions={"mp3"},
        progress_every=100,
    )
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def media_tree(temp_dir: Path) -> dict[str, Path]:
    """
    Create a small media library:

        root/
            a.txt
            sub/
                b.mp3
                c.wav
    """
    files = {}

    a = temp_dir / "a.txt"
    a.write_text("notes")
    files["txt"] = a

    sub = temp_dir / "sub"
    sub.mkdir()
    files["sub"] = sub

    b = sub / "b.mp3"
    b.write_bytes(b"ID3")
    files["mp3"] = b

    c = sub / "c.wav"
    c.write_bytes(b"RIFF")
    files["wav"] = c

    return files


@pytest.fixture
def nested_tree(temp_dir: Path) -> dict[str, Path]:
    """Create a deeper tree with mixed casing, numbering and empty folders."""
    files = {}

    for name in ["img10.png", "img2.png", "Img1.png", "cover.JPG", "readme"]:
        path = temp_dir / name
        path.write_bytes(b"x")
        files[name] = path

    album = temp_dir / "Album 2"
    (album / "disc 10").mkdir(parents=True)
    (album / "disc 9").mkdir()
    (album / "disc 9" / "track01.png").write_bytes(b"x")
    (album / "disc 10" / "track01.png").write_bytes(b"x")
    files["disc9_track"] = album / "disc 9" / "track01.png"
    files["disc10_track"] = album / "disc 10" / "track01.png"

    empty = temp_dir / "album 10" / "empty"
    empty.mkdir(parents=True)
    files["empty"] = empty

    return files
