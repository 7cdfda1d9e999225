from __future__ import annotations

import logging

from medscan.domain.models import UploadedImage
from medscan.infra.ports.storage import StoragePort

logger = logging.getLogger(__name__)


class ResourceReaper:
    """Async context manager that deletes one uploaded image on exit, whatever the outcome."""

    def __init__(self, *, storage: StoragePort, image: UploadedImage):
        self.storage = storage
        self.image = image
        self.reaped = False

    async def __aenter__(self) -> UploadedImage:
        return self.image

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.reap()
        return False

    def reap(self) -> None:
        if self.reaped:
            return
        self.reaped = True
        try:
            removed = self.storage.delete(self.image.path)
        except OSError as exc:
            logger.warning("Error deleting temp file %s: %s", self.image.path, exc)
            return
        if not removed:
            logger.debug("Temp file %s was already gone", self.image.path)
