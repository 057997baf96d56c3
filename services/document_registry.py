"""In-memory registry of uploaded documents and their digests."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from urllib.parse import quote

from config import settings
from engine.document_verifier import compute_content_hash
from schemas.response import DocumentRecord

logger = logging.getLogger("proofchain.documents")


class DocumentNotFoundError(KeyError):
    """Raised when a document id is not registered."""


class DocumentRegistry:
    def __init__(self) -> None:
        self._records: dict[str, DocumentRecord] = {}

    def register(
        self,
        data: bytes,
        *,
        filename: str,
        name: str | None = None,
        content_type: str | None = None,
    ) -> DocumentRecord:
        """Hash *data* and store a new read-only ``DocumentRecord`` for it."""
        digest = compute_content_hash(data)
        record = DocumentRecord(
            id=uuid.uuid4().hex,
            name=name or filename,
            hash=digest,
            qr_code_url=settings.qr_code_url_template.replace("{hash}", quote(digest)),
            filename=filename,
            content_type=content_type,
            size=len(data),
            created_at=datetime.now(timezone.utc),
        )
        self._records[record.id] = record
        logger.info("Registered document %s (%s, %d bytes)", record.id, record.name, record.size)
        return record

    def get(self, document_id: str) -> DocumentRecord:
        try:
            return self._records[document_id]
        except KeyError:
            raise DocumentNotFoundError(document_id) from None

    def list_records(self) -> list[DocumentRecord]:
        return sorted(self._records.values(), key=lambda r: r.created_at)

    def clear(self) -> None:
        self._records.clear()
