"""
Value types shared across the search pipeline.

Documents and term vectors describe what is indexed; expansion groups and
compiled queries describe what is being looked for.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, NamedTuple, Tuple

DocumentId = Hashable


@dataclass(frozen=True)
class Document:
    """A document with named text fields (e.g. ``title``, ``original_title``)."""

    doc_id: DocumentId
    fields: Mapping[str, str] = field(default_factory=dict)


class TermEntry(NamedTuple):
    term: str
    weight: float
    position: int


class TermVector:
    """
    Weighted, positioned stemmed terms of one document.

    The vector remembers which tokenizer produced it so that a search
    running with a different stemming configuration can refuse it.
    """

    def __init__(self, entries: Iterable[TermEntry], tokenizer_version: str):
        self.entries: Tuple[TermEntry, ...] = tuple(entries)
        self.tokenizer_version = tokenizer_version

        postings = defaultdict(list)  # term -> [entries]
        for entry in self.entries:
            postings[entry.term].append(entry)
        self._postings: Dict[str, List[TermEntry]] = dict(postings)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, term: str) -> bool:
        return term in self._postings

    def __eq__(self, other) -> bool:
        if not isinstance(other, TermVector):
            return NotImplemented
        return (self.entries, self.tokenizer_version) == (other.entries, other.tokenizer_version)

    def __repr__(self) -> str:
        terms = " ".join(f"{e.term}:{e.position}@{e.weight:g}" for e in self.entries)
        return f"TermVector({terms!r}, version={self.tokenizer_version!r})"

    def terms(self) -> List[str]:
        return list(self._postings)

    def occurrences(self, term: str) -> List[TermEntry]:
        return self._postings.get(term, [])

    def positions(self, term: str) -> List[int]:
        return [entry.position for entry in self.occurrences(term)]


class Candidate(NamedTuple):
    """One acceptable spelling inside an expansion group, with its trust weight."""

    token: str
    weight: float


@dataclass(frozen=True)
class ExpansionGroup:
    """The verbatim query word followed by its fuzzy alternates (OR semantics)."""

    word: str
    candidates: Tuple[Candidate, ...]

    @property
    def tokens(self) -> List[str]:
        return [candidate.token for candidate in self.candidates]

    def __len__(self) -> int:
        return len(self.candidates)

    def __str__(self) -> str:
        return "(" + " | ".join(self.tokens) + ")"


@dataclass(frozen=True)
class CompiledQuery:
    """Expansion groups combined with AND, in query order."""

    groups: Tuple[ExpansionGroup, ...] = ()

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[ExpansionGroup]:
        return iter(self.groups)

    def __str__(self) -> str:
        return " & ".join(str(group) for group in self.groups)


class SearchResult(NamedTuple):
    document_id: DocumentId
    score: float
