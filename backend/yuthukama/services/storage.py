# backend/yuthukama/services/storage.py
from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass

from yuthukama.domain.attachments import format_file_size, kind_for_mime_type
from yuthukama.security.sanitizer import InputSanitizer

logger = logging.getLogger(__name__)


class AttachmentTooLargeError(ValueError):
    pass


@dataclass(frozen=True)
class StoredAttachment:
    url: str
    kind: str
    filename: str
    size_bytes: int


@dataclass(frozen=True)
class StorageConfig:
    directory: str
    url_prefix: str = "/uploads"
    max_bytes: int = 10 * 1024 * 1024


class LocalAttachmentStore:
    """Writes uploaded chat attachments to a directory served under url_prefix."""

    def __init__(self, config: StorageConfig):
        self.config = config
        os.makedirs(config.directory, exist_ok=True)

    def save(self, filename: str | None, content: bytes, content_type: str | None) -> StoredAttachment:
        if len(content) > self.config.max_bytes:
            limit = format_file_size(self.config.max_bytes)
            raise AttachmentTooLargeError(f"File too large (max {limit})")

        try:
            safe_name = InputSanitizer.sanitize_filename(filename or "unnamed")
        except ValueError:
            safe_name = "unnamed"

        stored_name = f"{uuid.uuid4().hex}_{safe_name}"
        path = os.path.join(self.config.directory, stored_name)
        with open(path, "wb") as fh:
            fh.write(content)

        logger.info("Stored attachment %s (%d bytes)", stored_name, len(content))
        return StoredAttachment(
            url=f"{self.config.url_prefix.rstrip('/')}/{stored_name}",
            kind=kind_for_mime_type(content_type),
            filename=safe_name,
            size_bytes=len(content),
        )
