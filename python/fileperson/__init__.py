"""
fileperson - In-memory folder index with user annotations.

Modules:
    - config: Centralized configuration
    - errors: Error policies and exceptions
    - filters: Extension allow-list
    - models: Tags, file records and the index tree
    - scanner: Recursive traversal into a tree and a flat file list
    - state: Annotation store over an index
    - cli: Command-line entry point

Usage:
    from fileperson import State, FileInfo

    state = State.from_path("~/Music", {"mp3", "flac"})
    info = FileInfo.from_path(state.files()[0])
    info.set_tags(["Live", "favourite"])
    state.add(info)
    print([t.display() for t in state.tags()])
"""

from .errors import FilePersonError, RootAccessError
from .filters import ExtensionFilter
from .models import Directory, FileInfo, FileNode, Tag
from .scanner import Scanner, load
from .state import State

__all__ = [
    "Directory",
    "ExtensionFilter",
    "FileInfo",
    "FileNode",
    "FilePersonError",
    "RootAccessError",
    "Scanner",
    "State",
    "Tag",
    "load",
]
