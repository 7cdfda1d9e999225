from __future__ import annotations

import logging
import mimetypes
import time
import uuid
from pathlib import PurePath

from medscan.domain.errors import InputError
from medscan.domain.models import UploadedImage
from medscan.infra.ports.storage import StoragePort

logger = logging.getLogger(__name__)

_DEFAULT_MIME = "image/jpeg"
_MAX_EXT_LEN = 10


def _safe_extension(filename: str | None) -> str:
    suffix = PurePath(filename or "").suffix.lower()
    if 1 < len(suffix) <= _MAX_EXT_LEN and suffix[1:].isalnum():
        return suffix
    return ""


def _resolve_mime(filename: str | None, content_type: str | None) -> str:
    if content_type and content_type.strip() and content_type != "application/octet-stream":
        return content_type.strip()
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or _DEFAULT_MIME


def ephemeral_name(filename: str | None) -> str:
    """``<epoch ms>-<8 hex><ext>``; the random part keeps same-millisecond uploads apart."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{_safe_extension(filename)}"


class IngestGate:
    def __init__(self, *, storage: StoragePort):
        self.storage = storage

    def ingest(
        self,
        *,
        filename: str | None,
        content_type: str | None,
        payload: bytes | None,
    ) -> UploadedImage:
        if payload is None or (not filename and not payload):
            raise InputError("No image file uploaded.")

        path = self.storage.save_bytes(ephemeral_name(filename), payload)
        image = UploadedImage(
            path=path,
            mime_type=_resolve_mime(filename, content_type),
            size_bytes=len(payload),
        )
        logger.info("Stored upload %s as %s (%s, %d bytes)", filename, path.name, image.mime_type, image.size_bytes)
        return image
