"""
Error Handling - Centralized error policies and custom exceptions.

Only a root that cannot be listed aborts an index build. Everything that
goes wrong with a single entry is logged according to the policy table
below and the entry is left out of the index.
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


class ErrorAction(Enum):
    """What to do when an error occurs."""
    SKIP = auto()           # Skip this entry, continue traversal
    ABORT = auto()          # Stop the whole index build


@dataclass
class ErrorPolicy:
    """Policy for handling a specific error type."""
    action: ErrorAction
    log_level: int
    message_template: str = "{file}: {error}"


class FilePersonError(Exception):
    """Base exception for indexing and annotation errors."""
    pass


class RootAccessError(FilePersonError):
    """The index root cannot be opened or listed."""
    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot index {path}: {cause}")


class PathEncodingError(FilePersonError):
    """A discovered name is not representable as portable text."""
    def __init__(self, path: Path, name: str):
        self.path = path
        self.name = name
        super().__init__(f"Name is not valid UTF-8: {name!r}")


class UnsupportedEntryError(FilePersonError):
    """Entry is neither a regular file nor a directory (broken link, socket, ...)."""
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Not a file or directory: {path}")


# Error type to policy mapping. Lookup is first match, so subclasses
# must come before OSError.
ERROR_POLICIES: dict[type, ErrorPolicy] = {
    RootAccessError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="Cannot index root: {file} - {error}"
    ),
    PathEncodingError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Skipping non-portable name: {file} - {error}"
    ),
    UnsupportedEntryError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.INFO,
        message_template="Skipping broken link or special file: {file}"
    ),
    PermissionError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Permission denied: {file}"
    ),
    FileNotFoundError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Entry vanished during scan: {file}"
    ),
    NotADirectoryError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Expected directory, got file: {file}"
    ),
    OSError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="OS error reading entry: {file} - {error}"
    ),
}


def handle_error(
    error: Exception,
    file_path: Optional[Path] = None,
    context: str = ""
) -> ErrorAction:
    """
    Handle an error according to the defined policies.

    Args:
        error: The exception that occurred
        file_path: Path of the entry being processed (if applicable)
        context: Additional context for logging

    Returns:
        The action to take (SKIP or ABORT)
    """
    policy = None
    for error_type, p in ERROR_POLICIES.items():
        if isinstance(error, error_type):
            policy = p
            break

    # Default policy for unknown errors
    if policy is None:
        policy = ErrorPolicy(
            action=ErrorAction.SKIP,
            log_level=logging.ERROR,
            message_template="Unexpected error: {file} - {error}"
        )

    file_str = str(file_path) if file_path else "<unknown>"
    message = policy.message_template.format(file=file_str, error=str(error))
    if context:
        message = f"[{context}] {message}"

    logger.log(policy.log_level, message)

    return policy.action
