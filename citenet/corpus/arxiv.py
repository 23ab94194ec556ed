# citenet/corpus/arxiv.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import feedparser
import requests

from citenet.config.settings import settings
from citenet.corpus.errors import PaperNotFoundError, UpstreamError, UpstreamTimeoutError
from citenet.corpus.ids import extract_arxiv_id, normalize_arxiv_id
from citenet.models.paper import ArxivPaper

logger = logging.getLogger("citenet.corpus.arxiv")

SORT_BY_VALUES = ("relevance", "lastUpdatedDate", "submittedDate")
SORT_ORDER_VALUES = ("ascending", "descending")

CATEGORY_LABELS: Dict[str, str] = {
    "cs.AI": "Artificial Intelligence",
    "cs.LG": "Machine Learning",
    "cs.CL": "Computation and Language",
    "cs.CV": "Computer Vision",
    "cs.NE": "Neural and Evolutionary Computing",
    "stat.ML": "Machine Learning (Stats)",
}


def _clean_text(text: str) -> str:
    return " ".join((text or "").split())


def _published_at(entry: Any) -> Optional[datetime]:
    parsed = entry.get("published_parsed")
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=timezone.utc)


def _is_error_entry(entry: Any) -> bool:
    # arXiv reports bad queries as a single entry whose id points at /api/errors
    return "/api/errors" in (entry.get("id") or "")


def arxiv_paper_from_entry(entry: Any, arxiv_id: Optional[str] = None) -> ArxivPaper:
    """
    Map one feedparser Atom entry onto an ArxivPaper.
    """
    paper_id = arxiv_id or extract_arxiv_id(entry.get("id") or "")

    pdf_url = None
    abs_url = None
    for link in entry.get("links") or []:
        if link.get("title") == "pdf" or link.get("type") == "application/pdf":
            pdf_url = pdf_url or link.get("href")
        elif link.get("type") == "text/html":
            abs_url = abs_url or link.get("href")

    return ArxivPaper(
        arxiv_id=paper_id,
        title=_clean_text(entry.get("title", "")),
        authors=[a.get("name") for a in entry.get("authors") or [] if a.get("name")],
        abstract=_clean_text(entry.get("summary", "")),
        url=abs_url or f"https://arxiv.org/abs/{paper_id}",
        pdf_url=pdf_url or f"https://arxiv.org/pdf/{paper_id}.pdf",
        published_at=_published_at(entry),
        categories=[t.get("term") for t in entry.get("tags") or [] if t.get("term")],
    )


@dataclass
class ArxivClientConfig:
    api_url: str
    timeout: float = 8.0

    @classmethod
    def from_settings(cls) -> "ArxivClientConfig":
        return cls(api_url=settings.ARXIV_API_URL, timeout=settings.REQUEST_TIMEOUT)


class ArxivClient:
    """
    Client for the arXiv Atom API: free-text search, lookup by id and
    browsing of the latest submissions per category.
    """

    def __init__(
        self,
        config: Optional[ArxivClientConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if config is None:
            config = ArxivClientConfig.from_settings()
        if timeout is not None:
            config.timeout = timeout

        self.config = config
        self.timeout: float = config.timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _query(self, params: Dict[str, Any]) -> Any:
        url = self.config.api_url
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise UpstreamTimeoutError(
                f"arXiv API request timed out after {self.timeout} seconds",
                url=url,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise UpstreamError(f"Error contacting arXiv at {url}: {exc}", url=url) from exc

        if not resp.ok:
            raise UpstreamError(
                f"arXiv API error: {resp.status_code}",
                status_code=resp.status_code,
                url=url,
            )

        feed = feedparser.parse(resp.text)
        if feed.get("bozo") and not feed.entries:
            logger.warning("arXiv returned an unparseable feed: %s", feed.get("bozo_exception"))
        return feed

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def search(self, query: str, max_results: int = 50) -> List[ArxivPaper]:
        """
        Relevance-ranked free-text search, at most `max_results` papers.
        """
        feed = self._query(
            {
                "search_query": f"all:{query}",
                "start": 0,
                "max_results": max_results,
                "sortBy": "relevance",
                "sortOrder": "descending",
            }
        )
        papers = [
            arxiv_paper_from_entry(entry)
            for entry in feed.entries
            if not _is_error_entry(entry)
        ]
        return papers[:max_results]

    def fetch_by_id(self, arxiv_id: str) -> ArxivPaper:
        clean_id = normalize_arxiv_id(arxiv_id)
        feed = self._query({"id_list": clean_id})

        entries = [e for e in feed.entries if not _is_error_entry(e)]
        if not entries:
            raise PaperNotFoundError(f"No arXiv entry found for {arxiv_id!r}")

        return arxiv_paper_from_entry(entries[0], arxiv_id=clean_id)

    def fetch_latest(
        self,
        categories: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        max_results: int = 50,
        start: int = 0,
        sort_by: str = "submittedDate",
        sort_order: str = "descending",
    ) -> Tuple[List[ArxivPaper], int]:
        """
        Browse submissions in `categories`, optionally restricted to any of
        `keywords`. Returns (papers, total_results).
        """
        if sort_by not in SORT_BY_VALUES:
            raise ValueError(f"sort_by must be one of {SORT_BY_VALUES}, got {sort_by!r}")
        if sort_order not in SORT_ORDER_VALUES:
            raise ValueError(f"sort_order must be one of {SORT_ORDER_VALUES}, got {sort_order!r}")

        cats = list(categories or settings.ARXIV_DEFAULT_CATEGORIES)
        search_query = "(" + " OR ".join(f"cat:{c}" for c in cats) + ")"

        kws = [k.strip() for k in keywords or [] if k and k.strip()]
        if kws:
            search_query += " AND (" + " OR ".join(f"all:{k}" for k in kws) + ")"

        feed = self._query(
            {
                "search_query": search_query,
                "start": start,
                "max_results": max_results,
                "sortBy": sort_by,
                "sortOrder": sort_order,
            }
        )

        papers = [
            arxiv_paper_from_entry(entry)
            for entry in feed.entries
            if not _is_error_entry(entry)
        ]

        try:
            total = int(feed.feed.get("opensearch_totalresults") or 0)
        except (TypeError, ValueError):
            total = 0

        return papers, total

    def fetch_todays_papers(
        self,
        categories: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> List[ArxivPaper]:
        """
        Latest submissions published since the start of yesterday (UTC).
        """
        papers, _ = self.fetch_latest(
            categories=categories,
            keywords=keywords,
            max_results=100,
            sort_by="submittedDate",
            sort_order="descending",
        )

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        cutoff = today - timedelta(days=1)

        return [p for p in papers if p.published_at is not None and p.published_at >= cutoff]
