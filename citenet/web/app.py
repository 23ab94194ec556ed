from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import (
    Depends,
    FastAPI,
    HTTPException,
    Query,
    Request,
    Response,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from citenet.api.models import (
    ArxivPaperList,
    ArxivPaperOut,
    ArxivPaperResponse,
    CitationGraph,
    CitationLookup,
    CitationLookupRequest,
    IndexPaperOut,
    LibraryPaperIn,
    LibraryPaperOut,
    SearchResults,
)
from citenet.config.settings import settings
from citenet.corpus.client import CorpusClient
from citenet.corpus.errors import CorpusError, PaperNotFoundError
from citenet.corpus.ids import is_valid_arxiv_id, normalize_arxiv_id
from citenet.library.graph_library import GraphLibrary
from citenet.models.paper import ArxivPaper, LibraryEntry, PaperDetails, ReadingStatus
from citenet.network.assembly import assemble_graph
from citenet.network.builder import build_citation_network
from citenet.web.security import api_key_auth, current_user, rate_limiter

logger = logging.getLogger("citenet.web")
logging.basicConfig(level=logging.INFO)

SEARCH_SOURCES = ("all", "arxiv", "semanticscholar")
ARXIV_ACTIONS = ("latest", "search", "get")


# -------------------------------------------------------------------
# Lifespan: wire up the remote clients and the library once
# -------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup/shutdown handler:
    - Create the corpus client (arXiv + Semantic Scholar sessions)
    - Load the persisted library (or start an empty one)
    """
    if getattr(app.state, "corpus", None) is None:
        app.state.corpus = CorpusClient()
    if getattr(app.state, "library", None) is None:
        app.state.library = GraphLibrary()

    yield

    corpus = getattr(app.state, "corpus", None)
    if corpus is not None and hasattr(corpus, "close"):
        corpus.close()


app = FastAPI(
    title="Citation Network API",
    description="Citation networks, search and library endpoints for a personal arXiv paper tracker.",
    version="0.1.0",
    lifespan=lifespan,
)

# -------------------------------------------------------------------
# CORS – allow everything for now (tighten later)
# -------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log method, path, and response status. Simple but effective.
    """
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    start = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    logger.info(
        f"Completed {request.method} {request.url.path} "
        f"with status {response.status_code} in {duration_ms:.2f}ms"
    )

    return response


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


def _get_corpus(app_obj: FastAPI) -> CorpusClient:
    """
    Fetch the corpus client from app.state, initializing if needed.
    """
    corpus = getattr(app_obj.state, "corpus", None)
    if corpus is None:
        corpus = CorpusClient()
        app_obj.state.corpus = corpus
    return corpus


def _get_library(app_obj: FastAPI) -> GraphLibrary:
    library = getattr(app_obj.state, "library", None)
    if library is None:
        library = GraphLibrary()
        app_obj.state.library = library
    return library


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_seed_ids(raw: Optional[str]) -> List[str]:
    """
    Comma-separated arXiv ids -> normalized list. Any malformed id rejects
    the whole request before expansion starts.
    """
    ids = _split_csv(raw)
    invalid = [i for i in ids if not is_valid_arxiv_id(i)]
    if invalid:
        raise HTTPException(
            status_code=422,
            detail=f"Malformed arXiv id(s): {', '.join(invalid)}",
        )
    return [normalize_arxiv_id(i) for i in ids]


def _arxiv_out(paper: ArxivPaper) -> ArxivPaperOut:
    return ArxivPaperOut(
        arxiv_id=paper.arxiv_id,
        title=paper.title,
        authors=paper.authors,
        abstract=paper.abstract,
        url=paper.url,
        pdf_url=paper.pdf_url,
        published_at=paper.published_at,
        categories=paper.categories,
    )


def _index_out(paper: PaperDetails) -> IndexPaperOut:
    return IndexPaperOut(
        paper_id=paper.source_id,
        arxiv_id=paper.canonical_id,
        title=paper.title,
        abstract=paper.abstract,
        authors=paper.authors,
        year=paper.year,
        citation_count=paper.citation_count,
        url=paper.url,
    )


def _library_out(entry: LibraryEntry) -> LibraryPaperOut:
    return LibraryPaperOut(
        arxiv_id=entry.arxiv_id,
        title=entry.title,
        status=entry.status,
        added_at=entry.added_at,
    )


_guarded = [Depends(api_key_auth), Depends(rate_limiter)]


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------


@app.get("/health", summary="Health check")
async def health() -> dict:
    """
    Simple health check endpoint.
    """
    return {"status": "ok"}


@app.get(
    "/citations",
    response_model=CitationGraph,
    response_model_exclude_none=True,
    dependencies=_guarded,
    summary="Build the citation network around seed papers",
)
async def get_citation_network(
    request: Request,
    arxiv_ids: Optional[str] = Query(
        None,
        alias="arxivIds",
        description="Comma-separated arXiv ids. Defaults to the user's library.",
    ),
    depth: int = Query(1, description="Expansion depth, clamped to [0, 2]."),
    user_id: str = Depends(current_user),
) -> CitationGraph:
    """
    Resolve the seeds in Semantic Scholar and attach their citing / cited
    papers. Individual seeds that fail to resolve are skipped; an empty
    graph is a valid answer.
    """
    seeds = _parse_seed_ids(arxiv_ids)

    try:
        network = await build_citation_network(
            seeds,
            depth,
            corpus=_get_corpus(request.app),
            library=_get_library(request.app),
            user_id=user_id,
        )
    except Exception:
        logger.exception("Citation network error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build citation network",
        )

    return assemble_graph(network, dedupe_links=settings.DEDUPE_LINKS)


@app.post(
    "/citations",
    response_model=CitationLookup,
    dependencies=_guarded,
    summary="Look up a single paper's citation statistics",
)
async def lookup_citation_stats(
    payload: CitationLookupRequest,
    request: Request,
) -> CitationLookup:
    if not payload.arxiv_id or not payload.arxiv_id.strip():
        raise HTTPException(status_code=400, detail="arxivId is required")

    corpus = _get_corpus(request.app)
    try:
        paper = await run_in_threadpool(
            corpus.semantic_scholar.lookup_by_arxiv_id, payload.arxiv_id
        )
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found in Semantic Scholar")
    except CorpusError as exc:
        logger.warning("Citation lookup error for %s: %s", payload.arxiv_id, exc)
        raise HTTPException(status_code=502, detail="Failed to fetch citation data")

    return CitationLookup(
        paper_id=paper.source_id,
        title=paper.title,
        citation_count=paper.citation_count,
        reference_count=paper.reference_count,
    )


@app.get(
    "/search",
    response_model=SearchResults,
    response_model_exclude_none=True,
    dependencies=_guarded,
    summary="Search arXiv and/or Semantic Scholar",
)
async def search(
    request: Request,
    query: Optional[str] = None,
    source: str = "all",
    limit: int = Query(20, ge=1, le=100),
) -> SearchResults:
    """
    Free-text search. A failing source contributes an empty list instead of
    failing the whole request.
    """
    if not query or len(query.strip()) < 2:
        raise HTTPException(status_code=400, detail="Query must be at least 2 characters")
    if source not in SEARCH_SOURCES:
        raise HTTPException(
            status_code=400,
            detail=f"source must be one of {', '.join(SEARCH_SOURCES)}",
        )

    corpus = _get_corpus(request.app)
    query = query.strip()
    results = SearchResults()

    if source in ("all", "arxiv"):
        try:
            papers = await run_in_threadpool(corpus.search_full_text, query, limit)
            results.arxiv = [_arxiv_out(p) for p in papers]
        except CorpusError as exc:
            logger.warning("arXiv search error: %s", exc)
            results.arxiv = []

    if source in ("all", "semanticscholar"):
        try:
            papers = await run_in_threadpool(corpus.semantic_scholar.search, query, limit)
            results.semantic_scholar = [_index_out(p) for p in papers]
        except CorpusError as exc:
            logger.warning("Semantic Scholar search error: %s", exc)
            results.semantic_scholar = []

    return results


@app.get(
    "/arxiv",
    dependencies=_guarded,
    summary="Browse, search or fetch arXiv papers",
)
async def arxiv_papers(
    request: Request,
    action: str = "latest",
    query: Optional[str] = None,
    arxiv_id: Optional[str] = Query(None, alias="arxivId"),
    categories: Optional[str] = None,
    keywords: Optional[str] = None,
    max_results: int = Query(50, alias="maxResults", ge=1, le=200),
    start: int = Query(0, ge=0),
):
    if action not in ARXIV_ACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"action must be one of {', '.join(ARXIV_ACTIONS)}",
        )

    arxiv = _get_corpus(request.app).arxiv

    try:
        if action == "search" and query:
            papers = await run_in_threadpool(arxiv.search, query, max_results)
            return ArxivPaperList(papers=[_arxiv_out(p) for p in papers]).model_dump(
                by_alias=True, exclude_none=True
            )

        if action == "get" and arxiv_id:
            paper = await run_in_threadpool(arxiv.fetch_by_id, arxiv_id)
            return ArxivPaperResponse(paper=_arxiv_out(paper)).model_dump(by_alias=True)

        papers, total = await run_in_threadpool(
            arxiv.fetch_latest,
            _split_csv(categories) or None,
            _split_csv(keywords),
            max_results,
            start,
        )
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except CorpusError as exc:
        logger.warning("arXiv API error: %s", exc)
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch from arXiv: {exc}",
        )

    return ArxivPaperList(
        papers=[_arxiv_out(p) for p in papers],
        total_results=total,
    ).model_dump(by_alias=True)


@app.get(
    "/library/papers",
    response_model=List[LibraryPaperOut],
    dependencies=_guarded,
    summary="List papers in the user's library",
)
async def list_library_papers(
    request: Request,
    status_filter: Optional[ReadingStatus] = Query(None, alias="status"),
    user_id: str = Depends(current_user),
) -> List[LibraryPaperOut]:
    library = _get_library(request.app)
    entries = await run_in_threadpool(library.list_papers, user_id, status_filter)
    return [_library_out(e) for e in entries]


@app.post(
    "/library/papers",
    response_model=LibraryPaperOut,
    dependencies=_guarded,
    summary="Add a paper to the library (no-op if already present)",
)
async def add_library_paper(
    payload: LibraryPaperIn,
    request: Request,
    response: Response,
    user_id: str = Depends(current_user),
) -> LibraryPaperOut:
    """
    Promote a paper (typically a node discovered in the citation network)
    into the user's library. Answers 201 when created, 200 when it was
    already there.
    """
    if not is_valid_arxiv_id(payload.arxiv_id):
        raise HTTPException(
            status_code=422,
            detail=f"Malformed arXiv id: {payload.arxiv_id}",
        )

    library = _get_library(request.app)
    entry = LibraryEntry(
        arxiv_id=normalize_arxiv_id(payload.arxiv_id),
        title=payload.title,
        status=payload.status,
    )
    stored, created = await run_in_threadpool(library.add_paper, user_id, entry)

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return _library_out(stored)
