from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


class SnapshotStore:
    """
    Durable key-value slots holding opaque byte blobs, one file per slot.

    A write replaces the whole slot. The new content goes to a sibling temp
    file first so a crash mid-write leaves the previous snapshot in place.
    """

    suffix = ".snapshot"

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, slot: str) -> Path:
        return self.root / f"{slot}{self.suffix}"

    def read(self, slot: str) -> Optional[bytes]:
        path = self.path_for(slot)
        if not path.exists():
            return None
        return path.read_bytes()

    def write(self, slot: str, data: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.path_for(slot)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, target)

    def delete(self, slot: str) -> None:
        self.path_for(slot).unlink(missing_ok=True)
