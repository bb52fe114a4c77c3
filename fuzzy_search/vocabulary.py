"""
Vocabulary construction and publication.

This module rebuilds the deduplicated set of literal corpus tokens together
with the approximate token index derived from it. Every rebuild produces a
new immutable snapshot that is published with a single reference swap, so
concurrent readers see either the old or the new vocabulary, never a mix.
"""

import logging
import threading
import time
from typing import Callable, FrozenSet, Iterable, Optional, Set, Tuple, Union

from .exceptions import RebuildCancelledError, RebuildError, RebuildTimeoutError
from .token_index import ApproximateTokenIndex

logger = logging.getLogger(__name__)

FieldRecord = Tuple[object, str, str]  # (document id, field name, field text)
CorpusReader = Union[Iterable[FieldRecord], Callable[[], Iterable[FieldRecord]]]


class VocabularySnapshot:
    """A published vocabulary and the similarity index built over it."""

    def __init__(self, tokens: FrozenSet[str], index: ApproximateTokenIndex,
                 built_at: Optional[float] = None):
        self.tokens = tokens
        self.index = index
        self.built_at = built_at

    def __len__(self) -> int:
        return len(self.tokens)

    def similar(self, token: str, limit: int):
        return self.index.similar(token, limit)


class VocabularyStore:
    """Holds the current vocabulary snapshot and rebuilds it from a corpus."""

    def __init__(self, config, tokenizer):
        """Initialize with configuration and the shared tokenizer."""
        self.config = config
        self.tokenizer = tokenizer
        self._rebuild_lock = threading.Lock()
        self._snapshot = VocabularySnapshot(frozenset(), self._make_index(()))

    def _make_index(self, tokens: Iterable[str]) -> ApproximateTokenIndex:
        return ApproximateTokenIndex(
            tokens,
            metric=self.config.SIMILARITY_METRIC,
            threshold=self.config.SIMILARITY_THRESHOLD,
            ngram_size=self.config.NGRAM_SIZE,
        )

    def snapshot(self) -> VocabularySnapshot:
        """Return the currently published snapshot."""
        return self._snapshot

    def all_tokens(self) -> FrozenSet[str]:
        return self._snapshot.tokens

    @property
    def token_index(self) -> ApproximateTokenIndex:
        return self._snapshot.index

    def rebuild(self, corpus_reader: CorpusReader, timeout: Optional[float] = None,
                cancel_event: Optional[threading.Event] = None) -> VocabularySnapshot:
        """
        Replace the vocabulary with the literal tokens of the whole corpus.

        The replacement is built off to the side and published only when
        complete. On any failure the previous snapshot stays published.

        Args:
            corpus_reader: Iterable of (document id, field name, field text)
                records, or a zero-argument callable returning one.
            timeout: Seconds allowed for the rebuild, including waiting for a
                concurrent rebuild to finish. None means unbounded.
            cancel_event: Optional event; setting it aborts the rebuild.

        Returns:
            The newly published snapshot.

        Raises:
            RebuildTimeoutError: If the deadline passed.
            RebuildCancelledError: If ``cancel_event`` was set.
            RebuildError: If the corpus reader failed.
            ValueError: If ``timeout`` is negative.
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be None or non-negative, got {timeout}")
        started = time.monotonic()
        deadline = started + timeout if timeout is not None else None

        acquired = self._rebuild_lock.acquire(timeout=timeout if timeout is not None else -1)
        if not acquired:
            raise RebuildTimeoutError(f"Another rebuild held the vocabulary for over {timeout}s")
        try:
            tokens = self._collect_tokens(corpus_reader, deadline, cancel_event)
            snapshot = VocabularySnapshot(frozenset(tokens), self._make_index(tokens), time.time())
            self._snapshot = snapshot
        except RebuildError as e:
            logger.warning(f"Vocabulary rebuild aborted, keeping {len(self._snapshot)} tokens: {e}")
            raise
        finally:
            self._rebuild_lock.release()

        logger.info(f"Rebuilt vocabulary: {len(snapshot)} unique tokens "
                    f"in {time.monotonic() - started:.3f}s")
        return snapshot

    def _collect_tokens(self, corpus_reader: CorpusReader, deadline: Optional[float],
                        cancel_event: Optional[threading.Event]) -> Set[str]:
        tokens = set()
        _check_abort(deadline, cancel_event)
        try:
            records = corpus_reader() if callable(corpus_reader) else corpus_reader
            for _doc_id, _field_name, text in records:
                _check_abort(deadline, cancel_event)
                tokens.update(self.tokenizer.literal_tokens(text))
        except RebuildError:
            raise
        except Exception as e:
            raise RebuildError(f"Corpus reader failed: {e}") from e
        return tokens


def _check_abort(deadline: Optional[float], cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise RebuildCancelledError("Vocabulary rebuild was cancelled")
    if deadline is not None and time.monotonic() > deadline:
        raise RebuildTimeoutError("Vocabulary rebuild exceeded its deadline")
