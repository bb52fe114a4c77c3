"""
Configuration settings for the fuzzy title search engine.

This module contains all configurable parameters for the search engine.
Modify these values, or pass a config_dict to FuzzySearchEngine, to
customize the behavior of the system.
"""

# Text processing settings
LOWERCASE = True  # Lowercase literal tokens and stems
STEMMER_LANGUAGE = "english"  # Snowball stemmer used for the document index
STOPWORDS = "nltk"  # "nltk" list for STEMMER_LANGUAGE, a list of words, or None to keep all words

# Fuzzy matching settings
SIMILARITY_METRIC = "trigram"  # "trigram" or "levenshtein"
NGRAM_SIZE = 3  # Shingle length for the n-gram metric
SIMILARITY_THRESHOLD = 0.3  # Minimum similarity for an alternate spelling

# Query expansion settings
# More alternates raise recall but grow the query expression and its cost
SINGLE_WORD_ALTERNATES = 3  # Alternates for a one-word query
MULTI_WORD_ALTERNATES = 6  # Alternates per word otherwise

# Ranking settings
FIELD_WEIGHTS = {
    "title": 1.0,
    "original_title": 0.4,
}
DEFAULT_FIELD_WEIGHT = 0.1  # Weight of fields missing from FIELD_WEIGHTS
POSITION_DECAY = 0.1  # How fast later positions lose weight
MATCH_MODE = "and"  # "and", or "followed_by" for words at consecutive positions

# Search settings
TOP_K_RESULTS = None  # Number of results to return (None for all)

# Rebuild settings
REBUILD_TIMEOUT = None  # Seconds allowed for a vocabulary rebuild (None for unbounded)

# Debug settings
LOG_LEVEL = "INFO"  # Logging level: DEBUG, INFO, WARNING, ERROR
