"""
Exception hierarchy for the fuzzy search engine.

Configuration problems are fatal and surface at construction time.
Rebuild problems are reported to whoever triggered the rebuild; the
previously published vocabulary always stays in place.
"""


class FuzzySearchError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(FuzzySearchError):
    """Invalid settings or an unavailable tokenizer/stemmer."""


class TokenizationMismatchError(ConfigurationError):
    """A term vector was built with a different tokenizer than the one searching it."""

    def __init__(self, document_id, expected: str, found: str):
        self.document_id = document_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Document {document_id!r} was indexed with tokenizer {found!r}, "
            f"but search uses {expected!r}; reindex the document store"
        )


class RebuildError(FuzzySearchError):
    """The vocabulary rebuild failed and nothing was published."""


class RebuildTimeoutError(RebuildError):
    """The vocabulary rebuild ran past its deadline."""


class RebuildCancelledError(RebuildError):
    """The vocabulary rebuild was cancelled by its caller."""
