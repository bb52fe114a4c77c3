"""
Unit Tests for the Document Index and In-Memory Document Store
==============================================================
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from fuzzy_search import Document, DocumentIndex, InMemoryDocumentStore, TermEntry
from fuzzy_search.utils import load_config


@pytest.fixture
def document_index(config, tokenizer):
    return DocumentIndex(config, tokenizer)


@pytest.fixture
def store(document_index):
    return InMemoryDocumentStore(document_index)


class TestDocumentIndex:
    """Tests for DocumentIndex.index."""

    def test_weighted_positioned_stems(self, document_index):
        vector = document_index.index(Document(3, {"title": "Star Wars", "original_title": "Star Wars"}))
        assert vector.entries == (
            TermEntry("star", 1.0, 0),
            TermEntry("war", 1.0, 1),
            TermEntry("star", 0.4, 2),
            TermEntry("war", 0.4, 3),
        )
        assert vector.positions("war") == [1, 3]
        assert "wars" not in vector

    def test_stopwords_keep_their_positions(self, document_index):
        vector = document_index.index(Document(2, {"title": "Hour of the Rush"}))
        assert vector.entries == (TermEntry("hour", 1.0, 0), TermEntry("rush", 1.0, 3))
        assert "the" not in vector

    def test_tagged_with_tokenizer_version(self, document_index, tokenizer):
        vector = document_index.index(Document(1, {"title": "Heat"}))
        assert vector.tokenizer_version == tokenizer.version

    def test_unknown_field_gets_default_weight(self, document_index):
        vector = document_index.index(Document(1, {"tagline": "Heat"}))
        assert vector.entries == (TermEntry("heat", 0.1, 0),)

    def test_field_weights_are_configurable(self, tokenizer):
        config = load_config({"FIELD_WEIGHTS": {"title": 2.0, "tagline": 0.5}})
        index = DocumentIndex(config, tokenizer)
        assert index.field_weight("title") == 2.0
        assert index.field_weight("tagline") == 0.5
        assert index.field_weight("original_title") == config.DEFAULT_FIELD_WEIGHT

    def test_empty_fields(self, document_index):
        vector = document_index.index(Document(1, {"title": "", "original_title": None}))
        assert len(vector) == 0

    def test_same_document_same_vector(self, document_index):
        doc = Document(5, {"title": "American Beauty"})
        assert document_index.index(doc) == document_index.index(doc)


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    def test_put_indexes_document(self, store):
        vector = store.put(Document(1, {"title": "Rush Hour 2"}))
        assert store.term_vector(1) is vector
        assert store.get(1).fields["title"] == "Rush Hour 2"
        assert 1 in store and len(store) == 1

    def test_put_replaces_and_reindexes(self, store):
        store.put(Document(1, {"title": "Rush Hour"}))
        store.put(Document(1, {"title": "Four Rooms"}))
        assert len(store) == 1
        assert "room" in store.term_vector(1)
        assert "rush" not in store.term_vector(1)

    def test_remove(self, store):
        store.put(Document(1, {"title": "Rush Hour"}))
        assert store.remove(1) is True
        assert store.remove(1) is False
        assert store.term_vector(1) is None
        assert len(store) == 0

    def test_term_vectors_view_is_read_only(self, store):
        store.put(Document(1, {"title": "Rush Hour"}))
        with pytest.raises(TypeError):
            store.term_vectors()[2] = store.term_vector(1)

    def test_published_map_is_not_mutated_by_later_writes(self, store):
        store.put(Document(1, {"title": "Rush Hour"}))
        view = store.term_vectors()
        store.put(Document(2, {"title": "Star Wars"}))
        store.remove(1)
        assert list(view) == [1]
        assert list(store.term_vectors()) == [2]

    def test_iter_fields(self, store):
        store.put_many([
            Document(1, {"title": "Rush Hour", "original_title": "Rush Hour"}),
            Document(2, {"title": "Star Wars"}),
        ])
        assert sorted(store.iter_fields()) == [
            (1, "original_title", "Rush Hour"),
            (1, "title", "Rush Hour"),
            (2, "title", "Star Wars"),
        ]

    def test_concurrent_writes(self, store):
        docs = [Document(i, {"title": f"Movie number {i}"}) for i in range(200)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(store.put, docs))
        assert len(store) == 200
        assert all(store.term_vector(i) is not None for i in range(200))

    def test_concurrent_writes_to_one_document(self, store):
        titles = [f"Title {i}" for i in range(50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda t: store.put(Document(1, {"title": t})), titles))
        assert len(store) == 1
        # the stored document and its vector always agree
        title = store.get(1).fields["title"]
        assert store.term_vector(1).terms() == ["titl", title.split()[1]]


# =============================================================================
# BULK LOAD AND LOCK REGISTRY
# =============================================================================


class TestBulkLoad:
    """put_many indexes a batch and publishes it in one step."""

    def test_publishes_once(self, store, monkeypatch):
        store.put(Document("seed", {"title": "Heat"}))
        published = []
        original = store._publish

        def counting_publish(documents, vectors):
            published.append(len(documents))
            original(documents, vectors)

        monkeypatch.setattr(store, "_publish", counting_publish)
        docs = [Document(i, {"title": f"Movie number {i}"}) for i in range(2000)]
        assert store.put_many(docs) == 2000
        assert published == [2000]
        assert len(store) == 2001
        assert all(store.term_vector(i) is not None for i in range(2000))

    def test_earlier_view_is_unchanged(self, store):
        store.put(Document(1, {"title": "Rush Hour"}))
        view = store.term_vectors()
        store.put_many([Document(2, {"title": "Star Wars"}), Document(3, {"title": "Four Rooms"})])
        assert list(view) == [1]
        assert sorted(store.term_vectors()) == [1, 2, 3]

    def test_last_duplicate_wins(self, store):
        count = store.put_many([Document(1, {"title": "Rush Hour"}), Document(1, {"title": "Four Rooms"})])
        assert count == 1
        assert store.get(1).fields["title"] == "Four Rooms"
        assert "room" in store.term_vector(1)

    def test_empty_batch(self, store):
        assert store.put_many([]) == 0
        assert len(store) == 0

    def test_overlapping_batches_do_not_deadlock(self, store):
        forward = [Document(i, {"title": f"Forward {i}"}) for i in range(100)]
        backward = [Document(i, {"title": f"Backward {i}"}) for i in reversed(range(100))]
        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(store.put_many, batch) for batch in (forward, backward) * 4]
            assert [f.result(timeout=30) for f in futures] == [100] * 8
        assert len(store) == 100
        for i in range(100):
            title = store.get(i).fields["title"]
            assert store.term_vector(i).terms() == [title.split()[0].lower(), str(i)]

    def test_id_locks_are_released(self, store):
        store.put_many([Document(i, {"title": "Heat"}) for i in range(10)])
        store.put(Document(10, {"title": "Heat"}))
        store.remove(3)
        store.remove("never-stored")
        assert store._id_locks == {}
