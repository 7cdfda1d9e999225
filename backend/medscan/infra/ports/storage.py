from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class StoragePort(ABC):
    @abstractmethod
    def save_bytes(self, name: str, data: bytes) -> Path:
        """Persist bytes under ``name`` and return the stored path."""

    @abstractmethod
    def delete(self, path: Path) -> bool:
        """Remove a stored file. Returns False when it was already gone."""
