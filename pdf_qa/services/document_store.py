"""
In-memory document store shared by all requests for the process lifetime.
"""

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import DocumentNotFoundError
from ..utils import log_processing_info
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """An ingested PDF and its extracted text. Never mutated after creation."""
    id: str
    original_name: str
    storage_path: Optional[str]
    extracted_text: str
    page_count: int
    uploaded_at: str
    size_bytes: int = 0
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def text_length(self) -> int:
        return len(self.extracted_text)


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            # Waiting writers go first so a stream of readers cannot starve them
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class DocumentStore:
    """
    Holds ingested documents in insertion order.

    ``add`` and ``remove`` are serialized against each other and against
    ``list``/``all_text`` snapshots; reads run concurrently. A document is
    visible to every read that starts after ``add`` returns.
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._lock = ReadWriteLock()

    def add(self, document: Document) -> str:
        with self._lock.write():
            if document.id in self._documents:
                raise ValueError(f"Duplicate document id: {document.id}")
            self._documents[document.id] = document

        log_processing_info("Document stored", {
            "id": document.id,
            "filename": document.original_name,
            "text_length": document.text_length
        })
        return document.id

    def get(self, document_id: str) -> Document:
        with self._lock.read():
            document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def list(self) -> List[Document]:
        with self._lock.read():
            return list(self._documents.values())

    def all_text(self, separator: str = "\n\n") -> str:
        """Concatenate every stored text in insertion order."""
        with self._lock.read():
            return separator.join(doc.extracted_text for doc in self._documents.values())

    def remove(self, document_id: str) -> Document:
        """
        Drop a document and delete its backing file.

        File deletion is best effort: a failure is logged and the record is
        still removed.
        """
        with self._lock.write():
            document = self._documents.pop(document_id, None)
        if document is None:
            raise DocumentNotFoundError(document_id)

        if document.storage_path:
            try:
                os.remove(document.storage_path)
            except OSError as e:
                logger.warning(f"Could not delete stored file {document.storage_path}: {e}")

        log_processing_info("Document removed", {"id": document_id})
        return document

    def count(self) -> int:
        with self._lock.read():
            return len(self._documents)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, document_id: object) -> bool:
        with self._lock.read():
            return document_id in self._documents
