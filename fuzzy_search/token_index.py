"""
Approximate token lookup over the vocabulary.

This module answers "which vocabulary tokens look like X" using character
n-gram (trigram by default) similarity, or normalized Levenshtein
similarity via rapidfuzz.
"""

from collections import Counter, defaultdict
from typing import Dict, FrozenSet, Iterable, List, Tuple

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from .exceptions import ConfigurationError

SIMILARITY_METRICS = ("trigram", "levenshtein")


def ngrams(word: str, n: int = 3) -> FrozenSet[str]:
    """
    Break a word into its set of character n-grams.

    The word is padded with n-1 blanks in front and one blank behind, so
    short words still produce shingles and shared word starts count extra.
    """
    padded = " " * (n - 1) + word + " "
    return frozenset(padded[i:i + n] for i in range(len(padded) - n + 1))


def ngram_similarity(a: str, b: str, n: int = 3) -> float:
    """
    Shared n-grams over the union of n-grams of both words.

    Symmetric, 1.0 for identical words and 0.0 when nothing is shared.
    """
    if a == b:
        return 1.0
    grams_a, grams_b = ngrams(a, n), ngrams(b, n)
    shared = len(grams_a & grams_b)
    if not shared:
        return 0.0
    return shared / (len(grams_a) + len(grams_b) - shared)


class ApproximateTokenIndex:
    """
    Immutable similarity index over a fixed set of tokens.

    For the n-gram metric an inverted n-gram -> tokens map restricts scoring
    to tokens that share at least one n-gram with the probe.
    """

    def __init__(self, tokens: Iterable[str], metric: str = "trigram",
                 threshold: float = 0.3, ngram_size: int = 3):
        """
        Build the index.

        Args:
            tokens: Vocabulary tokens.
            metric: "trigram" or "levenshtein".
            threshold: Minimum similarity in [0, 1] for a token to be returned.
            ngram_size: Shingle length for the n-gram metric.

        Raises:
            ConfigurationError: On an unknown metric or out-of-range settings.
        """
        if metric not in SIMILARITY_METRICS:
            raise ConfigurationError(
                f"Unknown similarity metric {metric!r}; expected one of {SIMILARITY_METRICS}"
            )
        if not 0.0 <= threshold <= 1.0:
            raise ConfigurationError(f"Similarity threshold must be within [0, 1], got {threshold}")
        if ngram_size < 1:
            raise ConfigurationError(f"N-gram size must be positive, got {ngram_size}")

        self.metric = metric
        self.threshold = threshold
        self.ngram_size = ngram_size
        self.tokens: Tuple[str, ...] = tuple(sorted(set(tokens)))

        self._shingles: Dict[str, FrozenSet[str]] = {}
        self._postings: Dict[str, Tuple[str, ...]] = {}
        if metric == "trigram":
            postings = defaultdict(list)  # n-gram -> [tokens]
            for tok in self.tokens:
                grams = ngrams(tok, ngram_size)
                self._shingles[tok] = grams
                for gram in grams:
                    postings[gram].append(tok)
            self._postings = {gram: tuple(toks) for gram, toks in postings.items()}

    def __len__(self) -> int:
        return len(self.tokens)

    def __contains__(self, token: str) -> bool:
        return token in self._shingles if self.metric == "trigram" else token in self.tokens

    def similar(self, token: str, limit: int) -> List[Tuple[str, float]]:
        """
        Find the vocabulary tokens most similar to ``token``.

        Args:
            token: Probe token (literal spelling).
            limit: Maximum number of candidates to return.

        Returns:
            List of (candidate, score) sorted by descending score, ties broken
            by candidate in lexicographic order.
        """
        if not token or limit <= 0 or not self.tokens:
            return []

        if self.metric == "trigram":
            scored = self._similar_ngrams(token)
        else:
            scored = self._similar_levenshtein(token)

        scored.sort(key=lambda x: (-x[1], x[0]))
        return scored[:limit]

    def _similar_ngrams(self, token: str) -> List[Tuple[str, float]]:
        probe = ngrams(token, self.ngram_size)

        shared = Counter()  # candidate -> shared n-gram count
        for gram in probe:
            for cand in self._postings.get(gram, ()):
                shared[cand] += 1

        scored = []
        for cand, count in shared.items():
            score = count / (len(probe) + len(self._shingles[cand]) - count)
            if score >= self.threshold:
                scored.append((cand, score))
        return scored

    def _similar_levenshtein(self, token: str) -> List[Tuple[str, float]]:
        matches = process.extract(
            token,
            self.tokens,
            scorer=Levenshtein.normalized_similarity,
            score_cutoff=self.threshold,
            limit=None,
        )
        return [(cand, float(score)) for cand, score, _idx in matches]
