"""
Command-line entry point: index a folder and report what was found.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_config
from .errors import RootAccessError
from .filters import ExtensionFilter
from .state import State


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileperson",
        description="Index a folder tree filtered by file extension",
    )
    parser.add_argument("--root", help="Directory to index (default: FILEPERSON_ROOT or ~/Desktop)")
    parser.add_argument(
        "--ext", nargs="+", action="extend",
        help="Extensions to include, e.g. --ext mp3 wav (default: FILEPERSON_EXTENSIONS or psd)",
    )
    parser.add_argument("--json", action="store_true", help="Print the index as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = get_config()
    root = Path(args.root).expanduser().resolve() if args.root else config.root
    extensions = ExtensionFilter(args.ext) if args.ext else ExtensionFilter(config.extensions)

    try:
        state = State.from_path(root, extensions, config)
    except RootAccessError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        json.dump(state.to_dict(), sys.stdout, indent=2)
        print()
    else:
        directories = sum(1 for _ in state.root.directories())
        print(f"{len(state.files())} files ({', '.join(extensions)}) in {directories} directories under {root}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
