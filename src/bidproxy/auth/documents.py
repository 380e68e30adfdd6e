"""
Storage for customer verification documents.

Only the stored reference ends up on the user row; where the bytes live is
the store's business.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
from uuid import uuid4

import anyio
from fastapi import UploadFile

from bidproxy.config import Settings, get_settings
from bidproxy.shared.exceptions import ValidationError
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


class DocumentStoreProtocol(Protocol):
    """Protocol for document stores."""

    async def save(self, field_name: str, upload: UploadFile) -> str: ...


class LocalDocumentStore:
    """Writes uploads into a local directory under unique names."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._root = Path(self._settings.upload_dir)

    def ensure_dir(self) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    async def save(self, field_name: str, upload: UploadFile) -> str:
        """Persist an upload and return its reference (the stored file name).

        Raises:
            ValidationError: If the upload exceeds the configured size limit.
        """
        limit = self._settings.max_upload_bytes
        data = bytearray()
        while chunk := await upload.read(_CHUNK_SIZE):
            data.extend(chunk)
            if len(data) > limit:
                raise ValidationError(
                    "Uploaded document is too large",
                    details={"field": field_name, "max_bytes": limit},
                )

        suffix = Path(upload.filename or "").suffix
        reference = f"{field_name}-{uuid4().hex}{suffix}"
        target = self.ensure_dir() / reference
        await anyio.to_thread.run_sync(target.write_bytes, bytes(data))

        logger.info(
            "Stored verification document",
            extra={"field": field_name, "reference": reference, "size_bytes": len(data)},
        )
        return reference


def get_document_store() -> DocumentStoreProtocol:
    """FastAPI dependency for the document store."""
    return LocalDocumentStore()
