"""
Document ranking and scoring module.

Score formula for a matching document::

    raw   = sum over groups, over stems of the group present in the document,
            of  candidate_weight * sum over occurrences of
                field_weight * 1 / (1 + POSITION_DECAY * position)
    score = raw / (1 + ln(document_length))

The score grows with field weight and term frequency, favors earlier
positions, and is damped by document length so long documents are not
favored automatically. Candidate weights are 1.0 for the verbatim query
word and the similarity score for fuzzy alternates.
"""

import math
from typing import Dict, List, Mapping, Optional

from .models import DocumentId, SearchResult, TermVector

StemGroup = Mapping[str, float]  # stem -> candidate weight


class Ranker:
    """Scores matching documents and orders results."""

    def __init__(self, config):
        """Initialize with configuration."""
        self.config = config

    def positional_factor(self, position: int) -> float:
        return 1.0 / (1.0 + self.config.POSITION_DECAY * position)

    def length_normalization(self, length: int) -> float:
        if length <= 1:
            return 1.0
        return 1.0 + math.log(length)

    def score(self, stem_groups: List[StemGroup], vector: TermVector) -> float:
        """
        Compute the rank score of one document.

        Args:
            stem_groups: Stemmed expansion groups with candidate weights.
            vector: Term vector of the document.

        Returns:
            Rank score; 0.0 for an empty document.
        """
        if not len(vector):
            return 0.0

        raw = 0.0
        for group in stem_groups:
            for stem, candidate_weight in group.items():
                for entry in vector.occurrences(stem):
                    raw += candidate_weight * entry.weight * self.positional_factor(entry.position)

        return raw / self.length_normalization(len(vector))

    def rank(self, scores: Dict[DocumentId, float], top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Order scored documents by descending score, then by document id.

        Args:
            scores: Document id -> score.
            top_k: Number of results to keep; None keeps all.

        Returns:
            List of SearchResult.
        """
        ranked = sorted(scores.items(), key=lambda x: (-x[1], x[0]))
        if top_k is not None:
            ranked = ranked[:top_k]
        return [SearchResult(doc_id, score) for doc_id, score in ranked]
