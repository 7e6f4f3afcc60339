"""Report files in the working directory that changed within the last day."""

from __future__ import annotations

import argparse
import os
import stat
import time
from pathlib import Path
from typing import Callable

RECENT_SECONDS = 24 * 3600
_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def contains_loop(path) -> tuple[Path, Path] | None:
    """Return an (ancestor, path) pair when some ancestor is the same file as the path."""
    path = Path(path)
    for ancestor in path.parents:
        if os.path.samefile(ancestor, path):
            return ancestor, path
        found = contains_loop(ancestor)
        if found is not None:
            return found
    return None


def _loop_or_none(path) -> tuple[Path, Path] | None:
    try:
        return contains_loop(path)
    except OSError:
        return None


def walk_dir(directory, func: Callable[[os.DirEntry], None]) -> None:
    """Call ``func`` on every entry of ``directory``.

    Only directories that loop back on an ancestor are descended into.
    """
    with os.scandir(directory) as entries:
        for entry in entries:
            metadata = os.stat(entry.path)
            if stat.S_ISDIR(metadata.st_mode) and _loop_or_none(entry.path) is not None:
                walk_dir(entry.path, func)
            func(entry)


def _quote(name: str) -> str:
    escaped = (
        name.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def format_entry(path, now: float | None = None) -> str | None:
    """Describe a regular file modified less than a day before ``now``, else None."""
    path = Path(path)
    metadata = os.stat(path)
    if now is None:
        now = time.time()
    if metadata.st_mtime > now:
        raise ValueError(f"modification time of {path} is in the future")
    age = int(now - metadata.st_mtime)

    if age >= RECENT_SECONDS or not stat.S_ISREG(metadata.st_mode):
        return None
    read_only = "true" if not metadata.st_mode & _WRITE_BITS else "false"
    return (
        f"Last modified: {age} seconds, is read only: {read_only}, "
        f"size: {metadata.st_size} bytes, filename: {_quote(path.name)}"
    )


def print_entry(entry) -> None:
    """Print the description of a recently modified file."""
    line = format_entry(os.fspath(entry))
    if line is not None:
        print(line)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="List files in the working directory modified within the last day."
    )
    parser.parse_args(argv)
    walk_dir(Path.cwd(), print_entry)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())