"""
Document term vector construction and an in-memory document store.

This module turns documents into weighted, positioned, stemmed term
vectors, and keeps those vectors current as documents are stored.
"""

import logging
import threading
from contextlib import contextmanager
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .models import Document, DocumentId, TermEntry, TermVector

logger = logging.getLogger(__name__)


class DocumentIndex:
    """Builds term vectors with the shared tokenizer's stemmed mode."""

    def __init__(self, config, tokenizer):
        """Initialize with configuration and the shared tokenizer."""
        self.config = config
        self.tokenizer = tokenizer

    @property
    def tokenizer_version(self) -> str:
        return self.tokenizer.version

    def field_weight(self, field_name: str) -> float:
        """
        Get the importance weight of a field.

        Args:
            field_name: Name of the document field.

        Returns:
            Configured weight, or the default weight for unlisted fields.
        """
        return self.config.FIELD_WEIGHTS.get(field_name, self.config.DEFAULT_FIELD_WEIGHT)

    def index(self, document: Document) -> TermVector:
        """
        Build the term vector of a document.

        Each field is stemmed on its own and tagged with its weight. Positions
        continue across fields in field order, as if the fields were joined.
        Stopwords get no entry but still take up a position.

        Args:
            document: Document to index.

        Returns:
            TermVector of (term, field weight, position) entries.
        """
        entries = []
        position = 0
        for field_name, text in document.fields.items():
            weight = self.field_weight(field_name)
            for token in self.tokenizer.literal_tokens(text):
                term = self.tokenizer.stem_token(token)
                if term:
                    entries.append(TermEntry(term, weight, position))
                position += 1
        return TermVector(entries, self.tokenizer_version)


class _IdLock:
    """Per-document lock, kept in the registry only while someone uses it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class InMemoryDocumentStore:
    """
    Reference document store that reindexes documents on every write.

    Writes to the same document id are serialized; writes to different ids
    run in parallel and only contend on the brief publish step. Readers get
    the current id -> term vector map without locking: every write publishes
    a fresh map instead of mutating the one readers may hold.
    """

    def __init__(self, document_index: DocumentIndex):
        self.document_index = document_index
        self._state: Tuple[Dict[DocumentId, Document], Dict[DocumentId, TermVector]] = ({}, {})
        self._publish_lock = threading.Lock()
        self._id_locks: Dict[DocumentId, _IdLock] = {}
        self._id_locks_guard = threading.Lock()

    @property
    def tokenizer_version(self) -> str:
        return self.document_index.tokenizer_version

    def __len__(self) -> int:
        return len(self._state[0])

    def __contains__(self, doc_id: DocumentId) -> bool:
        return doc_id in self._state[0]

    @contextmanager
    def _locked(self, doc_ids: List[DocumentId]):
        """
        Hold the write locks of several distinct document ids.

        Locks are taken in a fixed order so concurrent batches sharing ids
        cannot deadlock, and are dropped from the registry once unused.
        """
        with self._id_locks_guard:
            held = []
            for doc_id in doc_ids:
                entry = self._id_locks.get(doc_id)
                if entry is None:
                    entry = self._id_locks[doc_id] = _IdLock()
                entry.users += 1
                held.append((doc_id, entry))
        acquired = []
        try:
            for _, entry in sorted(held, key=lambda item: id(item[1])):
                entry.lock.acquire()
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            with self._id_locks_guard:
                for doc_id, entry in held:
                    entry.users -= 1
                    if not entry.users:
                        del self._id_locks[doc_id]

    def _publish(self, documents: Mapping[DocumentId, Document], vectors: Mapping[DocumentId, TermVector]) -> None:
        with self._publish_lock:
            current_documents, current_vectors = self._state
            new_documents = dict(current_documents)
            new_vectors = dict(current_vectors)
            new_documents.update(documents)
            new_vectors.update(vectors)
            self._state = (new_documents, new_vectors)

    def put(self, document: Document) -> TermVector:
        """
        Store a document and (re)build its term vector.

        Args:
            document: Document to create or replace.

        Returns:
            The document's new term vector.
        """
        with self._locked([document.doc_id]):
            vector = self.document_index.index(document)
            self._publish({document.doc_id: document}, {document.doc_id: vector})
        logger.debug(f"Indexed document {document.doc_id!r}: {len(vector)} terms")
        return vector

    def put_many(self, documents: Iterable[Document]) -> int:
        """
        Store a batch of documents and publish them together.

        Every document is indexed first and the maps are copied once, so a
        bulk load costs one copy rather than one per document. When an id
        repeats in the batch, the last document wins.

        Returns:
            Number of distinct documents stored.
        """
        batch: Dict[DocumentId, Document] = {}
        for document in documents:
            batch[document.doc_id] = document
        if batch:
            with self._locked(list(batch)):
                vectors = {doc_id: self.document_index.index(doc) for doc_id, doc in batch.items()}
                self._publish(batch, vectors)
        logger.info(f"Indexed {len(batch)} documents")
        return len(batch)

    def remove(self, doc_id: DocumentId) -> bool:
        """Delete a document; returns False if it was not stored."""
        with self._locked([doc_id]):
            with self._publish_lock:
                documents, vectors = self._state
                if doc_id not in documents:
                    return False
                documents = dict(documents)
                vectors = dict(vectors)
                del documents[doc_id]
                del vectors[doc_id]
                self._state = (documents, vectors)
        logger.debug(f"Removed document {doc_id!r}")
        return True

    def get(self, doc_id: DocumentId) -> Optional[Document]:
        return self._state[0].get(doc_id)

    def term_vector(self, doc_id: DocumentId) -> Optional[TermVector]:
        return self._state[1].get(doc_id)

    def term_vectors(self) -> Mapping[DocumentId, TermVector]:
        """Read-only view of the currently published id -> term vector map."""
        return MappingProxyType(self._state[1])

    def iter_fields(self) -> Iterator[Tuple[DocumentId, str, str]]:
        """Yield (document id, field name, field text) for every stored field."""
        documents = self._state[0]
        for doc_id, document in documents.items():
            for field_name, text in document.fields.items():
                yield doc_id, field_name, text

    def documents(self) -> List[Document]:
        return list(self._state[0].values())
