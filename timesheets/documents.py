# timesheets/documents.py
"""
Document store port. Entries only keep the metadata returned by upload();
the bytes stay wherever the storage backend puts them.
"""
from __future__ import annotations

import abc
import logging
import mimetypes
import posixpath
import uuid
from typing import IO, Iterable

from django.core.files.storage import Storage, default_storage
from django.utils import timezone

from . import conf
from .domain import SupportingDocument

logger = logging.getLogger("timesheets")


class DocumentStore(abc.ABC):

    @abc.abstractmethod
    def upload(self, files: Iterable) -> list[SupportingDocument]:
        """Store Django UploadedFile/File objects; return their metadata."""

    @abc.abstractmethod
    def download(self, document_id: str) -> IO[bytes]:
        """Open a stored document for reading."""


class StorageDocumentStore(DocumentStore):
    """DocumentStore on top of a Django storage backend (default_storage unless given)."""

    def __init__(self, storage: Storage | None = None):
        self.storage = storage or default_storage

    def _target(self, filename: str) -> str:
        folder = timezone.now().strftime(conf.document_upload_to())
        base = posixpath.basename(filename or "document")
        return posixpath.join(folder, f"{uuid.uuid4().hex}_{base}")

    def upload(self, files):
        out = []
        for f in files:
            name = getattr(f, "name", "") or "document"
            stored = self.storage.save(self._target(name), f)
            mime = getattr(f, "content_type", "") or mimetypes.guess_type(name)[0] or "application/octet-stream"
            doc = SupportingDocument(
                name=posixpath.basename(name),
                size=int(getattr(f, "size", 0) or 0),
                mime_type=mime,
                id=stored,
            )
            logger.info(f"Stored supporting document {doc.name} as {stored} ({doc.size} bytes)")
            out.append(doc)
        return out

    def download(self, document_id):
        if not document_id or not self.storage.exists(document_id):
            raise FileNotFoundError(document_id)
        return self.storage.open(document_id, "rb")
