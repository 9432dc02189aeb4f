"""Helpers shared by the Sapphire Notes tests."""

import os
from pathlib import Path
from typing import Optional

import yaml


def write_note(
    directory: Path, name: str, text: str = "", mtime: Optional[float] = None
) -> Path:
    """Drop a note file into ``directory`` as an external program would."""
    path = directory / f"{name}.txt"
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def read_store_file(path: Path) -> dict:
    """Parse a metadata store file without going through MetadataStore."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def file_names(directory: Path) -> set:
    """Exact on-disk file names, independent of file-system case folding."""
    return {p.name for p in directory.iterdir() if p.is_file()}
