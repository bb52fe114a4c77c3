"""
Query compilation.

Turns raw, possibly misspelled user input into a conjunction of expansion
groups: each query word becomes "(word | alternate | alternate ...)" with
alternates drawn from the vocabulary by approximate similarity.
"""

import logging
from typing import List, Optional

from .models import Candidate, CompiledQuery, ExpansionGroup
from .vocabulary import VocabularySnapshot

logger = logging.getLogger(__name__)


class QueryCompiler:
    """Expands each query word into its fuzzy alternates."""

    def __init__(self, config, tokenizer, vocabulary):
        """Initialize with configuration, the shared tokenizer and the vocabulary store."""
        self.config = config
        self.tokenizer = tokenizer
        self.vocabulary = vocabulary

    def split_words(self, raw_text: str) -> List[str]:
        """
        Split on whitespace, then normalize each chunk to literal tokens.

        Chunks made only of punctuation vanish; a chunk such as ``spider-man``
        contributes one word per literal token.
        """
        words = []
        for chunk in raw_text.split():
            words.extend(self.tokenizer.literal_tokens(chunk))
        return words

    def alternates_limit(self, position: int, chunk_count: int) -> int:
        """
        Number of alternates for the word at ``position``.

        A query is single-word when its raw text is one whitespace-separated
        chunk, so every token of ``spider-man`` gets the single-word limit
        even though the chunk yields two literal tokens. Single-word queries
        drift more, so they get fewer alternates.
        """
        if chunk_count == 1:
            return self.config.SINGLE_WORD_ALTERNATES
        return self.config.MULTI_WORD_ALTERNATES

    def compile(self, raw_text: str, snapshot: Optional[VocabularySnapshot] = None) -> CompiledQuery:
        """
        Compile raw query text into expansion groups.

        Args:
            raw_text: The user's query.
            snapshot: Vocabulary snapshot to expand against. Defaults to the
                currently published one.

        Returns:
            CompiledQuery with one group per query word; empty when the text
            holds no words.
        """
        if not isinstance(raw_text, str):
            return CompiledQuery()
        if snapshot is None:
            snapshot = self.vocabulary.snapshot()

        words = self.split_words(raw_text)
        chunk_count = len(raw_text.split())
        groups = []
        for position, word in enumerate(words):
            limit = self.alternates_limit(position, chunk_count)

            # verbatim word first, at full weight
            candidates = [Candidate(word, 1.0)]
            seen = {word}
            for token, score in snapshot.similar(word, limit):
                if token in seen:
                    continue
                seen.add(token)
                candidates.append(Candidate(token, score))

            groups.append(ExpansionGroup(word, tuple(candidates)))

        compiled = CompiledQuery(tuple(groups))
        logger.debug(f"Compiled {raw_text!r} -> {compiled}")
        return compiled
