"""
Main FuzzySearchEngine class that wires the search pipeline together.

This module contains the FuzzySearchEngine class which owns the shared
tokenizer, the vocabulary store, the document store and the query
compiler, and exposes the search and rebuild operations.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import ConfigurationError
from .executor import SearchExecutor
from .indexer import DocumentIndex, InMemoryDocumentStore
from .models import CompiledQuery, Document, DocumentId, SearchResult, TermVector
from .query import QueryCompiler
from .ranker import Ranker
from .tokenizer import Tokenizer
from .utils import configure_logging, load_config, validate_config
from .vocabulary import VocabularySnapshot, VocabularyStore

logger = logging.getLogger(__name__)


class FuzzySearchEngine:
    """
    Typo-tolerant search over titled documents.

    Searches run against whatever vocabulary snapshot and term vectors are
    published when they start; rebuilding the vocabulary and writing
    documents never block them.
    """

    def __init__(self, document_store: Optional[InMemoryDocumentStore] = None,
                 config_dict: Optional[Dict] = None, tokenizer: Optional[Tokenizer] = None):
        """
        Initialize the FuzzySearchEngine.

        Args:
            document_store: Store holding documents and their term vectors. A
                new in-memory store is created when omitted.
            config_dict: Optional configuration dictionary to override defaults.
            tokenizer: Tokenizer shared by every stage; built from the
                configuration when omitted.

        Raises:
            ConfigurationError: On invalid settings, an unavailable stemmer, or
                a document store indexing with a different tokenizer.
        """
        self.config = load_config(config_dict)
        validate_config(self.config)
        configure_logging(self.config.LOG_LEVEL)

        self.tokenizer = tokenizer or Tokenizer(self.config)

        if document_store is None:
            document_store = InMemoryDocumentStore(DocumentIndex(self.config, self.tokenizer))
        elif document_store.tokenizer_version != self.tokenizer.version:
            raise ConfigurationError(
                f"Document store indexes with {document_store.tokenizer_version!r} "
                f"but search uses {self.tokenizer.version!r}"
            )
        self.document_store = document_store

        self.vocabulary = VocabularyStore(self.config, self.tokenizer)
        self.compiler = QueryCompiler(self.config, self.tokenizer, self.vocabulary)
        self.ranker = Ranker(self.config)
        self.executor = SearchExecutor(self.config, self.tokenizer, self.compiler, self.ranker)

    def add_document(self, doc_id: DocumentId, **fields: str) -> TermVector:
        """Store (or replace) a document built from keyword fields, e.g. ``title="Heat"``."""
        return self.document_store.put(Document(doc_id, fields))

    def add_documents(self, documents: Iterable[Document]) -> int:
        return self.document_store.put_many(documents)

    def remove_document(self, doc_id: DocumentId) -> bool:
        return self.document_store.remove(doc_id)

    def rebuild_vocabulary(self, timeout: Optional[float] = None,
                           cancel_event: Optional[threading.Event] = None) -> VocabularySnapshot:
        """
        Rebuild the vocabulary from every stored document.

        Safe to call at any time and from any thread; calling it again on an
        unchanged corpus publishes an identical vocabulary.

        Args:
            timeout: Seconds allowed; defaults to the configured REBUILD_TIMEOUT.
            cancel_event: Optional event that aborts the rebuild when set.

        Returns:
            The newly published vocabulary snapshot.
        """
        if timeout is None:
            timeout = self.config.REBUILD_TIMEOUT
        return self.vocabulary.rebuild(self.document_store.iter_fields, timeout=timeout,
                                       cancel_event=cancel_event)

    def compile(self, query_text: str) -> CompiledQuery:
        """Compile a query without running it; ``str()`` of the result shows the expression."""
        return self.compiler.compile(query_text)

    def search(self, query_text: str, top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Search for documents matching the given query.

        Args:
            query_text: Search query string, possibly misspelled.
            top_k: Number of results to return. If None, uses config default.

        Returns:
            List of (document_id, score) results sorted by relevance. Empty
            for blank or unusable query text.
        """
        if top_k is None:
            top_k = self.config.TOP_K_RESULTS

        # pin both snapshots for the whole call
        snapshot = self.vocabulary.snapshot()
        term_vectors = self.document_store.term_vectors()

        return self.executor.search(query_text, term_vectors, snapshot=snapshot, top_k=top_k)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the published vocabulary and documents.

        Returns:
            Dictionary containing various statistics.
        """
        snapshot = self.vocabulary.snapshot()
        return {
            "num_documents": len(self.document_store),
            "vocabulary_size": len(snapshot),
            "vocabulary_built_at": snapshot.built_at,
            "similarity_metric": snapshot.index.metric,
            "tokenizer_version": self.tokenizer.version,
        }
