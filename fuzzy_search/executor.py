"""
Search execution.

Evaluates a compiled query against document term vectors. Candidates are
stemmed with the same tokenizer that built the term vectors before any
matching happens; vectors built by a different tokenizer are rejected.
"""

import logging
from typing import Dict, List, Mapping, Optional

from .exceptions import TokenizationMismatchError
from .models import CompiledQuery, DocumentId, SearchResult, TermVector
from .ranker import StemGroup

logger = logging.getLogger(__name__)

MATCH_MODES = ("and", "followed_by")


class SearchExecutor:
    """Matches compiled queries against term vectors and ranks the matches."""

    def __init__(self, config, tokenizer, compiler, ranker):
        self.config = config
        self.tokenizer = tokenizer
        self.compiler = compiler
        self.ranker = ranker

    def stem_groups(self, compiled: CompiledQuery) -> List[Dict[str, float]]:
        """
        Stem every candidate of every group.

        Literal alternates that collapse to one stem are merged, keeping the
        highest candidate weight. A group whose typed word is a stopword
        comes back empty and places no constraint on matching.
        """
        stem_groups = []
        for group in compiled:
            stems: Dict[str, float] = {}
            if self.tokenizer.stemmed_terms(group.word):
                for candidate in group.candidates:
                    for term in self.tokenizer.stemmed_terms(candidate.token):
                        if candidate.weight > stems.get(term, -1.0):
                            stems[term] = candidate.weight
            stem_groups.append(stems)
        return stem_groups

    def matches(self, stem_groups: List[StemGroup], vector: TermVector) -> bool:
        """Check that every non-empty group has at least one stem in the vector."""
        if not all(any(stem in vector for stem in group) for group in stem_groups if group):
            return False
        if self.config.MATCH_MODE == "followed_by":
            return self._matches_in_sequence(stem_groups, vector)
        return True

    def _matches_in_sequence(self, stem_groups: List[StemGroup], vector: TermVector) -> bool:
        # groups must sit at the same relative offsets as in the query;
        # empty (stopword) groups still count as a gap
        positions = [
            (offset, {pos for stem in group for pos in vector.positions(stem)})
            for offset, group in enumerate(stem_groups)
            if group
        ]
        if not positions:
            return True
        first_offset, first_positions = positions[0]
        for start in first_positions:
            if all(start + offset - first_offset in found for offset, found in positions[1:]):
                return True
        return False

    def check_vector(self, doc_id: DocumentId, vector: TermVector) -> None:
        if vector.tokenizer_version != self.tokenizer.version:
            raise TokenizationMismatchError(doc_id, self.tokenizer.version, vector.tokenizer_version)

    def search(self, raw_text: str, term_vectors: Mapping[DocumentId, TermVector],
               snapshot=None, top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Search term vectors for a raw query.

        Args:
            raw_text: The user's query text.
            term_vectors: Document id -> term vector to search.
            snapshot: Vocabulary snapshot for query expansion; defaults to
                the published one.
            top_k: Number of results to return; None returns every match.

        Returns:
            List of SearchResult sorted by descending score.

        Raises:
            TokenizationMismatchError: If a term vector was built with a
                different tokenizer version.
        """
        compiled = self.compiler.compile(raw_text, snapshot)
        if not len(compiled):
            return []

        stem_groups = self.stem_groups(compiled)
        if not any(stem_groups):
            return []

        scores = {}
        for doc_id, vector in term_vectors.items():
            self.check_vector(doc_id, vector)
            if self.matches(stem_groups, vector):
                scores[doc_id] = self.ranker.score(stem_groups, vector)

        logger.debug(f"Query {compiled} matched {len(scores)} of {len(term_vectors)} documents")
        return self.ranker.rank(scores, top_k)
