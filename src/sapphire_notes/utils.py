"""Utility functions for Sapphire Notes."""

from pathlib import Path
from typing import Union


def next_available_name(desired_path: Union[str, Path]) -> Path:
    """Return a path that does not exist yet, based on ``desired_path``.

    If ``desired_path`` is free it is returned unchanged. Otherwise a numeric
    disambiguator is inserted before the extension, counting up from one
    until a free name is found. Nothing is created on disk.

    Examples:
        "archive/todo.txt" -> "archive/todo.txt"       (free)
        "archive/todo.txt" -> "archive/todo (1).txt"   (taken)
        "archive/todo.txt" -> "archive/todo (2).txt"   (both taken)

    Args:
        desired_path: The preferred destination path.

    Returns:
        The first free candidate path.
    """
    path = Path(desired_path)
    if not path.exists():
        return path

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({counter}){path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def casefold_name(name: str) -> str:
    """Normalise a note name for case-insensitive comparison."""
    return name.casefold()
