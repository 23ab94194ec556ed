# citenet/api/models.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from citenet.models.paper import ReadingStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Citation network
# ---------------------------------------------------------------------------

class GraphNode(_CamelModel):
    """
    One paper in the citation network.
    """
    id: str = Field(..., description="Citation-index (Semantic Scholar) paper id.")
    arxiv_id: Optional[str] = Field(
        None,
        alias="arxivId",
        description="arXiv id, when the citation index knows one.",
    )
    title: str = Field(..., description="Display title.")
    citation_count: Optional[int] = Field(
        None,
        alias="citationCount",
        ge=0,
        description="Number of citing papers, if reported.",
    )


class GraphLink(BaseModel):
    """
    Directed link: `source` cites `target`.
    """
    source: str
    target: str


class CitationGraph(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)


class CitationLookupRequest(_CamelModel):
    arxiv_id: Optional[str] = Field(None, alias="arxivId")


class CitationLookup(_CamelModel):
    paper_id: str = Field(..., alias="paperId")
    title: str
    citation_count: Optional[int] = Field(None, alias="citationCount")
    reference_count: Optional[int] = Field(None, alias="referenceCount")


# ---------------------------------------------------------------------------
# Search / arXiv
# ---------------------------------------------------------------------------

class ArxivPaperOut(_CamelModel):
    arxiv_id: str = Field(..., alias="arxivId")
    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: str = ""
    url: str
    pdf_url: str = Field(..., alias="pdfUrl")
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    categories: List[str] = Field(default_factory=list)


class IndexPaperOut(_CamelModel):
    paper_id: str = Field(..., alias="paperId")
    arxiv_id: Optional[str] = Field(None, alias="arxivId")
    title: str
    abstract: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    citation_count: Optional[int] = Field(None, alias="citationCount")
    url: Optional[str] = None


class SearchResults(_CamelModel):
    arxiv: Optional[List[ArxivPaperOut]] = None
    semantic_scholar: Optional[List[IndexPaperOut]] = Field(None, alias="semanticScholar")


class ArxivPaperList(_CamelModel):
    papers: List[ArxivPaperOut] = Field(default_factory=list)
    total_results: Optional[int] = Field(None, alias="totalResults")


class ArxivPaperResponse(BaseModel):
    paper: ArxivPaperOut


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

class LibraryPaperIn(_CamelModel):
    arxiv_id: str = Field(..., alias="arxivId", min_length=1)
    title: str = Field(..., min_length=1)
    status: ReadingStatus = ReadingStatus.TO_READ


class LibraryPaperOut(_CamelModel):
    arxiv_id: str = Field(..., alias="arxivId")
    title: str
    status: ReadingStatus
    added_at: Optional[datetime] = Field(None, alias="addedAt")
