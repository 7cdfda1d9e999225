from __future__ import annotations

from pathlib import Path

from medscan.infra.ports.storage import StoragePort


class LocalFileStorage(StoragePort):
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save_bytes(self, name: str, data: bytes) -> Path:
        dest = self.base_dir / name
        # Exclusive create: two requests never share a file.
        with dest.open("xb") as handle:
            try:
                handle.write(data)
            except OSError:
                dest.unlink(missing_ok=True)
                raise
        return dest

    def delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
