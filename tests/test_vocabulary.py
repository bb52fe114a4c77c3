"""
Unit Tests for the Vocabulary Store
===================================

Rebuilds replace the vocabulary wholesale and publish atomically; failed,
timed-out or cancelled rebuilds leave the previous vocabulary in place.
"""

import threading
import time

import pytest

from fuzzy_search import (
    RebuildCancelledError,
    RebuildError,
    RebuildTimeoutError,
    VocabularyStore,
)

CORPUS = [
    (1, "title", "Rush Hour 2"),
    (1, "original_title", "Rush Hour 2"),
    (2, "title", "Star Wars"),
]


@pytest.fixture
def store(config, tokenizer):
    return VocabularyStore(config, tokenizer)


def blocking_reader(started, release):
    """Corpus reader that stalls after its first record until released."""
    def read():
        yield (1, "title", "Rush Hour")
        started.set()
        release.wait(5)
        yield (2, "title", "Star Wars")
    return read


class TestRebuild:
    """Tests for VocabularyStore.rebuild."""

    def test_starts_empty(self, store):
        assert store.all_tokens() == frozenset()
        assert store.token_index.similar("rush", 3) == []

    def test_deduplicated_literal_tokens(self, store):
        store.rebuild(CORPUS)
        assert store.all_tokens() == {"rush", "hour", "2", "star", "wars"}

    def test_tokens_are_not_stemmed(self, store):
        store.rebuild(CORPUS)
        assert "wars" in store.all_tokens()
        assert "war" not in store.all_tokens()

    def test_idempotent(self, store):
        first = store.rebuild(CORPUS).tokens
        second = store.rebuild(CORPUS).tokens
        assert first == second

    def test_replaces_previous_vocabulary(self, store):
        store.rebuild(CORPUS)
        store.rebuild([(3, "title", "Four Rooms")])
        assert store.all_tokens() == {"four", "rooms"}
        assert store.token_index.similar("rush", 3) == []

    def test_accepts_callable_reader(self, store):
        store.rebuild(lambda: iter(CORPUS))
        assert "star" in store.all_tokens()

    def test_index_is_rebuilt_with_vocabulary(self, store):
        snapshot = store.rebuild([(1, "title", "rush russia rust")])
        assert [tok for tok, _ in snapshot.similar("russh", 6)] == ["rush", "russia", "rust"]
        assert snapshot.built_at is not None


class TestRebuildFailures:
    """A failed rebuild must never publish anything."""

    def test_reader_failure_keeps_old_vocabulary(self, store):
        store.rebuild(CORPUS)
        before = store.snapshot()

        def broken():
            yield (9, "title", "Half Read")
            raise IOError("corpus unavailable")

        with pytest.raises(RebuildError) as excinfo:
            store.rebuild(broken)
        assert isinstance(excinfo.value.__cause__, IOError)
        assert store.snapshot() is before

    def test_timeout_keeps_old_vocabulary(self, store):
        store.rebuild(CORPUS)
        before = store.snapshot()

        def slow():
            for i in range(5):
                time.sleep(0.05)
                yield (i, "title", f"slow title {i}")

        with pytest.raises(RebuildTimeoutError):
            store.rebuild(slow, timeout=0.01)
        assert store.snapshot() is before

    def test_cancelled(self, store):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RebuildCancelledError):
            store.rebuild(CORPUS, cancel_event=cancel)
        assert store.all_tokens() == frozenset()

    def test_waiting_for_concurrent_rebuild_times_out(self, store):
        started, release = threading.Event(), threading.Event()
        worker = threading.Thread(target=store.rebuild, args=(blocking_reader(started, release),))
        worker.start()
        try:
            assert started.wait(5)
            with pytest.raises(RebuildTimeoutError):
                store.rebuild(CORPUS, timeout=0.05)
        finally:
            release.set()
            worker.join(5)
        assert store.all_tokens() == {"rush", "hour", "star", "wars"}

    def test_negative_timeout_is_rejected(self, store):
        store.rebuild(CORPUS)
        before = store.snapshot()
        with pytest.raises(ValueError):
            store.rebuild(CORPUS, timeout=-1)
        assert store.snapshot() is before
        # the rebuild lock was never taken
        assert store.rebuild(CORPUS, timeout=0.5).tokens == before.tokens

    def test_stopwords_stay_in_the_vocabulary(self, store):
        store.rebuild([(1, "title", "The Matrix")])
        assert store.all_tokens() == {"the", "matrix"}


class TestAtomicPublication:
    """Readers see the whole old vocabulary or the whole new one."""

    def test_readers_see_old_snapshot_mid_rebuild(self, store):
        store.rebuild([(0, "title", "Four Rooms")])
        old = store.snapshot()

        started, release = threading.Event(), threading.Event()
        worker = threading.Thread(target=store.rebuild, args=(blocking_reader(started, release),))
        worker.start()
        try:
            assert started.wait(5)
            # first record already consumed, nothing of it is visible yet
            assert store.snapshot() is old
            assert store.all_tokens() == {"four", "rooms"}
        finally:
            release.set()
            worker.join(5)

        assert store.all_tokens() == {"rush", "hour", "star", "wars"}
        assert [tok for tok, _ in store.token_index.similar("rooms", 3)] == []
