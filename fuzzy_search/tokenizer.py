"""
Word tokenization and stemming.

This module provides the single tokenizer shared by the vocabulary builder,
the document index and the search executor. It has two modes: literal
tokens keep the surface spelling (used for fuzzy suggestions) and stemmed
terms reduce words to their Snowball root (used for matching documents).
Stopwords are dropped from stemmed terms only.
"""

import hashlib
import re
from typing import FrozenSet, List, Optional

import nltk
from nltk.corpus import stopwords
from nltk.stem.snowball import SnowballStemmer

from .exceptions import ConfigurationError


def load_stopwords(setting, language: str) -> FrozenSet[str]:
    """
    Resolve the STOPWORDS setting to a set of words.

    Args:
        setting: "nltk" for the NLTK stopword list of the stemmer language,
            an iterable of words, or None/empty to keep every word.
        language: Stemmer language, used to pick the NLTK list.

    Returns:
        Frozen set of stopwords.

    Raises:
        ConfigurationError: If the NLTK list cannot be loaded or downloaded.
    """
    if not setting:
        return frozenset()
    if isinstance(setting, str):
        if setting != "nltk":
            raise ConfigurationError(f"STOPWORDS must be 'nltk', a list of words or None, got {setting!r}")
        try:
            return frozenset(stopwords.words(language))
        except (LookupError, OSError):
            nltk.download("stopwords", quiet=True)
        try:
            return frozenset(stopwords.words(language))
        except (LookupError, OSError) as exc:
            raise ConfigurationError(
                f"NLTK stopword list for {language!r} is not available; "
                f"install it with nltk.download('stopwords') or set STOPWORDS explicitly"
            ) from exc
    try:
        return frozenset(setting)
    except TypeError as exc:
        raise ConfigurationError(f"STOPWORDS must be 'nltk', a list of words or None, got {setting!r}") from exc


class Tokenizer:
    """Splits text into literal tokens and stemmed index terms."""

    def __init__(self, config):
        """
        Initialize with configuration.

        Raises:
            ConfigurationError: If the configured stemmer language or stopword
                list is not available.
        """
        self.config = config
        self.lowercase = config.LOWERCASE
        # words are runs of letters/digits, optionally joined by inner apostrophes
        self.word_regex = re.compile(r"[^\W_]+(?:'[^\W_]+)*")

        language = config.STEMMER_LANGUAGE
        if language not in SnowballStemmer.languages:
            raise ConfigurationError(
                f"Stemmer language {language!r} is not available; "
                f"choose one of {', '.join(SnowballStemmer.languages)}"
            )
        self.language = language
        self.stemmer = SnowballStemmer(language)

        words = load_stopwords(config.STOPWORDS, language)
        self.stopwords = frozenset(w.lower() for w in words) if self.lowercase else words

    @property
    def version(self) -> str:
        """
        Identify the stemming configuration.

        Term vectors built under one version are not valid for another;
        changing the stemmer, its library release or the stopword list
        requires a full reindex.
        """
        case = "lower" if self.lowercase else "cased"
        digest = hashlib.sha1("\n".join(sorted(self.stopwords)).encode("utf-8")).hexdigest()[:8]
        return f"snowball-{self.language}/nltk-{nltk.__version__}/{case}/stop-{digest}"

    def literal_tokens(self, text: str) -> List[str]:
        """
        Extract words as they are spelled.

        Args:
            text: Input text.

        Returns:
            List of literal tokens in text order.
        """
        if not text:
            return []
        txt = text.lower() if self.lowercase else text
        return self.word_regex.findall(txt)

    def stem_token(self, token: str) -> Optional[str]:
        """Stem one literal token; None for stopwords and empty stems."""
        if token in self.stopwords:
            return None
        return self.stemmer.stem(token) or None

    def stemmed_terms(self, text: str) -> List[str]:
        """
        Extract words reduced to their stems.

        Args:
            text: Input text.

        Returns:
            List of stemmed terms in text order, without stopwords.
        """
        terms = []
        for token in self.literal_tokens(text):
            stem = self.stem_token(token)
            if stem:
                terms.append(stem)
        return terms
