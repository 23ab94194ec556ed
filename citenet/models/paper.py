# citenet/models/paper.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass
class PaperRef:
    """
    Minimal paper descriptor used while expanding a citation network.

    `source_id` is the citation index's own id and is the only key used for
    node identity. `canonical_id` (an arXiv id) is frequently missing for
    referenced papers and is never used to de-duplicate.
    """

    source_id: str
    title: str
    canonical_id: Optional[str] = None
    citation_count: Optional[int] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaperRef):
            return NotImplemented
        return self.source_id == other.source_id

    def __hash__(self) -> int:
        return hash(self.source_id)


@dataclass
class PaperDetails:
    """
    Full citation-index record for a single paper.
    """

    source_id: str
    title: str
    canonical_id: Optional[str] = None
    citation_count: Optional[int] = None
    reference_count: Optional[int] = None
    abstract: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    url: Optional[str] = None
    doi: Optional[str] = None
    fields_of_study: List[str] = field(default_factory=list)

    def to_ref(self) -> PaperRef:
        return PaperRef(
            source_id=self.source_id,
            title=self.title,
            canonical_id=self.canonical_id,
            citation_count=self.citation_count,
        )


@dataclass
class ArxivPaper:
    arxiv_id: str          # without version, e.g. "1706.03762"
    title: str
    authors: List[str]
    abstract: str
    url: str
    pdf_url: str
    published_at: Optional[datetime] = None
    categories: List[str] = field(default_factory=list)


class ReadingStatus(str, Enum):
    TO_READ = "TO_READ"
    READING = "READING"
    DONE = "DONE"


@dataclass
class LibraryEntry:
    """
    A paper saved into a user's library.
    """

    arxiv_id: str
    title: str
    status: ReadingStatus = ReadingStatus.TO_READ
    added_at: Optional[datetime] = None
