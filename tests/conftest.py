"""
Pytest Configuration and Shared Fixtures
=========================================

Provides a small movie corpus and ready-to-search engines built on it.
"""

import os
import sys

import pytest


# =============================================================================
# PATH SETUP
# =============================================================================

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import config as default_config  # noqa: E402
from fuzzy_search import Document, FuzzySearchEngine, Tokenizer  # noqa: E402
from fuzzy_search.utils import load_config  # noqa: E402


# =============================================================================
# CORPUS
# =============================================================================

MOVIES = [
    Document(1, {"title": "Rush Hour 2", "original_title": "Rush Hour 2"}),
    Document(2, {"title": "Rush Hour 3", "original_title": "Rush Hour 3"}),
    Document(3, {"title": "Star Wars", "original_title": "Star Wars"}),
    Document(4, {"title": "Four Rooms", "original_title": "Four Rooms"}),
    Document(5, {"title": "American Beauty", "original_title": "American Beauty"}),
    Document(6, {"title": "Apocalypse Now", "original_title": "Apocalypse Now"}),
    Document(7, {"title": "Match Point", "original_title": "Match Point"}),
    Document(8, {"title": "The Russia House", "original_title": "The Russia House"}),
]


# Fixed list so results do not depend on which NLTK data release is installed
TEST_STOPWORDS = ("a", "an", "and", "in", "of", "on", "the")


@pytest.fixture(autouse=True)
def fixed_stopwords(monkeypatch):
    monkeypatch.setattr(default_config, "STOPWORDS", TEST_STOPWORDS)
    return TEST_STOPWORDS


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def tokenizer(config):
    return Tokenizer(config)


@pytest.fixture
def engine():
    """Engine with the movie corpus stored but no vocabulary built yet."""
    eng = FuzzySearchEngine()
    eng.add_documents(MOVIES)
    return eng


@pytest.fixture
def movie_engine(engine):
    """Engine with the movie corpus stored and its vocabulary built."""
    engine.rebuild_vocabulary()
    return engine
