"""Filesystem helpers for textsite.

Functions:
    prepare_output_dir: Optionally wipe, then create, the output directory.
    copy_tree: Copy a directory tree into another, file by file.
"""

from __future__ import annotations

import shutil
from pathlib import Path


def prepare_output_dir(path: Path, clean: bool) -> None:
    """Ensure the output directory exists, removing it first when asked.

    Args:
        path: Output directory.
        clean: Whether to delete existing contents.

    Raises:
        OSError: If the directory cannot be removed or created.
    """
    if clean and path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def copy_tree(source: Path, dest: Path) -> list[Path]:
    """Copy every file below source into dest, keeping relative paths.

    Existing files in dest are replaced; nothing is deleted.

    Args:
        source: Directory to copy from. Missing directories copy nothing.
        dest: Directory to copy into.

    Returns:
        Destination paths of the copied files.
    """
    copied: list[Path] = []
    if not source.exists():
        return copied
    for item in sorted(source.rglob("*")):
        target = dest / item.relative_to(source)
        if item.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(item, target)
        copied.append(target)
    return copied
