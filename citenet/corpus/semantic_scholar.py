# citenet/corpus/semantic_scholar.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from citenet.config.settings import settings
from citenet.corpus.errors import (
    PaperNotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamTimeoutError,
)
from citenet.corpus.ids import normalize_arxiv_id
from citenet.models.paper import PaperDetails, PaperRef

logger = logging.getLogger("citenet.corpus.s2")


DETAIL_FIELDS: Sequence[str] = (
    "title",
    "abstract",
    "authors",
    "year",
    "citationCount",
    "referenceCount",
    "url",
    "externalIds",
    "fieldsOfStudy",
)

SEARCH_FIELDS: Sequence[str] = (
    "title",
    "abstract",
    "authors",
    "year",
    "citationCount",
    "url",
    "externalIds",
)

EDGE_FIELDS: Sequence[str] = (
    "title",
    "authors",
    "year",
    "citationCount",
    "externalIds",
)


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------

def _external_ids(data: Dict[str, Any]) -> Dict[str, Any]:
    ids = data.get("externalIds")
    return ids if isinstance(ids, dict) else {}


def _citation_count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def paper_ref_from_s2(data: Optional[Dict[str, Any]]) -> Optional[PaperRef]:
    """
    Map a Semantic Scholar paper object onto a PaperRef.

    Returns None when the record has no paperId (the API emits such stubs
    for references it could not resolve).
    """
    if not isinstance(data, dict):
        return None

    paper_id = data.get("paperId")
    if not paper_id:
        return None

    return PaperRef(
        source_id=str(paper_id),
        title=data.get("title") or "",
        canonical_id=_external_ids(data).get("ArXiv") or None,
        citation_count=_citation_count(data.get("citationCount")),
    )


def paper_details_from_s2(data: Optional[Dict[str, Any]]) -> Optional[PaperDetails]:
    ref = paper_ref_from_s2(data)
    if ref is None or data is None:
        return None

    authors = [
        a.get("name")
        for a in data.get("authors") or []
        if isinstance(a, dict) and a.get("name")
    ]
    external_ids = _external_ids(data)

    return PaperDetails(
        source_id=ref.source_id,
        title=ref.title,
        canonical_id=ref.canonical_id,
        citation_count=ref.citation_count,
        reference_count=_citation_count(data.get("referenceCount")),
        abstract=data.get("abstract"),
        authors=authors,
        year=data.get("year"),
        url=data.get("url"),
        doi=external_ids.get("DOI") or None,
        fields_of_study=[f for f in data.get("fieldsOfStudy") or [] if isinstance(f, str)],
    )


def _edge_papers(payload: Dict[str, Any], key: str) -> List[PaperRef]:
    """
    Unwrap the ``{"data": [{"citingPaper": {...}}, ...]}`` page shape.
    """
    refs: List[PaperRef] = []
    for item in payload.get("data") or []:
        if not isinstance(item, dict):
            continue
        ref = paper_ref_from_s2(item.get(key))
        if ref is not None:
            refs.append(ref)
    return refs


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

@dataclass
class SemanticScholarConfig:
    base_url: str
    timeout: float = 8.0
    api_key: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "SemanticScholarConfig":
        return cls(
            base_url=settings.SEMANTIC_SCHOLAR_URL.rstrip("/"),
            timeout=settings.REQUEST_TIMEOUT,
            api_key=settings.semantic_scholar_api_key,
        )


class SemanticScholarClient:
    """
    HTTP client for the Semantic Scholar Graph API (the citation index).

    Every call carries an explicit timeout. Failures are raised as
    PaperNotFoundError / RateLimitedError / UpstreamTimeoutError /
    UpstreamError.
    """

    def __init__(
        self,
        config: Optional[SemanticScholarConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if config is None:
            config = SemanticScholarConfig.from_settings()
        if timeout is not None:
            config.timeout = timeout

        self.config = config
        self.base_url: str = config.base_url
        self.timeout: float = config.timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        return headers

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            resp = self.session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise UpstreamTimeoutError(
                f"Semantic Scholar request timed out after {self.timeout}s: {url}",
                url=url,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise UpstreamError(
                f"Error contacting Semantic Scholar at {url}: {exc}",
                url=url,
            ) from exc

        if resp.status_code == 404:
            raise PaperNotFoundError(
                f"Semantic Scholar has no record for {path}",
                status_code=404,
                url=url,
            )
        if resp.status_code == 429:
            raise RateLimitedError(
                "Semantic Scholar rate limit exceeded. Please try again later.",
                status_code=429,
                url=url,
            )
        if not resp.ok:
            raise UpstreamError(
                f"Semantic Scholar API error: {resp.status_code}",
                status_code=resp.status_code,
                url=url,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Semantic Scholar returned invalid JSON for {url}",
                status_code=resp.status_code,
                url=url,
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamError(
                f"Unexpected Semantic Scholar payload for {url}",
                status_code=resp.status_code,
                url=url,
            )
        return payload

    # ------------------------------------------------------------------
    # Papers
    # ------------------------------------------------------------------
    def get_paper(
        self,
        paper_id: str,
        fields: Sequence[str] = DETAIL_FIELDS,
    ) -> PaperDetails:
        payload = self._get(f"paper/{paper_id}", {"fields": ",".join(fields)})
        details = paper_details_from_s2(payload)
        if details is None:
            raise PaperNotFoundError(f"Semantic Scholar returned no paperId for {paper_id}")
        return details

    def lookup_by_arxiv_id(self, arxiv_id: str) -> PaperDetails:
        clean_id = normalize_arxiv_id(arxiv_id)
        logger.debug("Resolving arXiv:%s in Semantic Scholar", clean_id)
        return self.get_paper(f"arXiv:{clean_id}")

    def search(
        self,
        query: str,
        limit: int = 20,
        offset: int = 0,
        fields: Sequence[str] = SEARCH_FIELDS,
    ) -> List[PaperDetails]:
        payload = self._get(
            "paper/search",
            {
                "query": query,
                "limit": limit,
                "offset": offset,
                "fields": ",".join(fields),
            },
        )
        results: List[PaperDetails] = []
        for item in payload.get("data") or []:
            details = paper_details_from_s2(item)
            if details is not None:
                results.append(details)
        return results[:limit]

    # ------------------------------------------------------------------
    # Citation edges
    # ------------------------------------------------------------------
    def get_citations(self, paper_id: str, limit: int = 50, offset: int = 0) -> List[PaperRef]:
        """Papers citing `paper_id`."""
        payload = self._get(
            f"paper/{paper_id}/citations",
            {"limit": limit, "offset": offset, "fields": ",".join(EDGE_FIELDS)},
        )
        return _edge_papers(payload, "citingPaper")

    def get_references(self, paper_id: str, limit: int = 50, offset: int = 0) -> List[PaperRef]:
        """Papers cited by `paper_id`."""
        payload = self._get(
            f"paper/{paper_id}/references",
            {"limit": limit, "offset": offset, "fields": ",".join(EDGE_FIELDS)},
        )
        return _edge_papers(payload, "citedPaper")
