"""Flat per-task storage of raw adapter responses."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List, Tuple

__all__ = ["ResultStore"]

_SUFFIX = ".json"


class ResultStore:
    """One file per task under ``root``, named ``<task name>.json``.

    Records are written byte-for-byte as the adapter produced them.  Writing a
    name that already exists replaces the previous record; there is no
    versioning.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        if not name or os.sep in name or (os.altsep and os.altsep in name):
            raise ValueError(f"invalid result name {name!r}")
        return self.root / f"{name}{_SUFFIX}"

    def write(self, name: str, record: bytes) -> Path:
        """Persist *record* under *name* and return the file path."""

        if not isinstance(record, (bytes, bytearray)):
            raise TypeError("result records must be raw bytes")
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        path.write_bytes(bytes(record))
        return path

    def read(self, name: str) -> bytes:
        return self.path_for(name).read_bytes()

    def names(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(path.name[: -len(_SUFFIX)] for path in self.root.glob(f"*{_SUFFIX}") if path.is_file())

    def __iter__(self) -> Iterator[Tuple[str, bytes]]:
        for name in self.names():
            yield name, self.read(name)

    def __len__(self) -> int:
        return len(self.names())
