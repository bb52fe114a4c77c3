"""
Fuzzy Title Search

A typo-tolerant full-text search engine for titled documents, combining
trigram-based query expansion over a literal vocabulary with ranking over
stemmed, field-weighted term vectors.

Main components:
- FuzzySearchEngine: Main search engine class
- Tokenizer: Literal tokens and Snowball stems
- VocabularyStore: Corpus vocabulary with atomic rebuilds
- ApproximateTokenIndex: "Similar tokens" lookup over the vocabulary
- QueryCompiler: Raw query -> AND of OR-groups
- DocumentIndex / InMemoryDocumentStore: Weighted term vectors per document
- SearchExecutor / Ranker: Matching and scoring
"""

from .search_engine import FuzzySearchEngine
from .tokenizer import Tokenizer
from .vocabulary import VocabularySnapshot, VocabularyStore
from .token_index import ApproximateTokenIndex, ngram_similarity
from .query import QueryCompiler
from .indexer import DocumentIndex, InMemoryDocumentStore
from .executor import SearchExecutor
from .ranker import Ranker
from .models import (
    Candidate,
    CompiledQuery,
    Document,
    ExpansionGroup,
    SearchResult,
    TermEntry,
    TermVector,
)
from .exceptions import (
    ConfigurationError,
    FuzzySearchError,
    RebuildCancelledError,
    RebuildError,
    RebuildTimeoutError,
    TokenizationMismatchError,
)

__version__ = "1.0.0"

__all__ = [
    "FuzzySearchEngine",
    "Tokenizer",
    "VocabularyStore",
    "VocabularySnapshot",
    "ApproximateTokenIndex",
    "ngram_similarity",
    "QueryCompiler",
    "DocumentIndex",
    "InMemoryDocumentStore",
    "SearchExecutor",
    "Ranker",
    "Candidate",
    "CompiledQuery",
    "Document",
    "ExpansionGroup",
    "SearchResult",
    "TermEntry",
    "TermVector",
    "ConfigurationError",
    "FuzzySearchError",
    "RebuildCancelledError",
    "RebuildError",
    "RebuildTimeoutError",
    "TokenizationMismatchError",
]
