# citenet/network/builder.py

"""
Citation-network expansion.

Given seed arXiv ids and a depth bound, every seed is resolved in the citation
index and (when depth allows) its citing and cited papers are attached as
neighbours. Seeds are expanded concurrently; within a seed the two neighbour
fetches run concurrently too.

Depth walks the seed chain, not the citation fan-out: neighbours found while
expanding a seed are added to the graph but never expanded themselves, so any
depth >= 1 produces the same one-hop neighbourhood around each seed.

Blocking corpus calls run in worker threads via ``asyncio.to_thread``. All
mutation of the accumulated network happens on the event loop thread inside
``NetworkAggregator.apply``, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Set

from citenet.config.settings import settings
from citenet.corpus.errors import (
    CorpusError,
    PaperNotFoundError,
    UpstreamTimeoutError,
)
from citenet.corpus.ids import normalize_arxiv_id
from citenet.library.gateway import LibraryGateway
from citenet.models.paper import PaperRef

logger = logging.getLogger("citenet.network")


class CitationSource(Protocol):
    """The slice of CorpusClient the builder depends on."""

    def lookup_by_canonical_id(self, canonical_id: str) -> PaperRef: ...

    def get_citing_papers(self, source_id: str, limit: int = 10) -> List[PaperRef]: ...

    def get_cited_papers(self, source_id: str, limit: int = 10) -> List[PaperRef]: ...


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Edge:
    """`source` cites `target`. Both are citation-index ids."""

    source: str
    target: str


class FailureReason(str, Enum):
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "upstream_error"
    TIMED_OUT = "timed_out"
    UNEXPECTED = "unexpected"


class BranchStage(str, Enum):
    RESOLVE = "resolve"
    NEIGHBORS = "neighbors"


@dataclass
class BranchFailure:
    seed_id: str
    stage: BranchStage
    reason: FailureReason
    message: str


@dataclass
class BranchResult:
    """
    Outcome of expanding one seed.

    A branch can fail while resolving the seed (nothing is contributed) or
    while fetching neighbours (the resolved seed is kept, no edges are added).
    """

    seed_id: str
    paper: Optional[PaperRef] = None
    citing: List[PaperRef] = field(default_factory=list)
    cited: List[PaperRef] = field(default_factory=list)
    failure: Optional[BranchFailure] = None


@dataclass
class Network:
    nodes: Dict[str, PaperRef] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    failures: List[BranchFailure] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges


class NetworkAggregator:
    """
    Owns the node map, edge list and visited set for one build.
    """

    def __init__(self) -> None:
        self.network = Network()
        self.visited: Set[str] = set()

    def claim(self, seed_id: str) -> bool:
        """
        Mark `seed_id` as being expanded. False if it already was.
        """
        if seed_id in self.visited:
            return False
        self.visited.add(seed_id)
        return True

    def upsert(self, paper: PaperRef) -> None:
        # Last write wins; all copies of one source_id come from the same record.
        self.network.nodes[paper.source_id] = paper

    def add_edge(self, source: str, target: str) -> None:
        self.network.edges.append(Edge(source=source, target=target))

    def apply(self, result: BranchResult) -> None:
        if result.paper is not None:
            self.upsert(result.paper)
            this_id = result.paper.source_id

            for citing in result.citing:
                self.upsert(citing)
                self.add_edge(citing.source_id, this_id)

            for cited in result.cited:
                self.upsert(cited)
                self.add_edge(this_id, cited.source_id)

        if result.failure is not None:
            failure = result.failure
            self.network.failures.append(failure)
            logger.warning(
                "Branch %s failed during %s (%s): %s",
                failure.seed_id,
                failure.stage.value,
                failure.reason.value,
                failure.message,
            )


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------

def clamp_depth(depth: int, max_depth: Optional[int] = None) -> int:
    if max_depth is None:
        max_depth = settings.NETWORK_MAX_DEPTH
    return max(0, min(int(depth), max_depth))


def _classify(exc: BaseException) -> FailureReason:
    if isinstance(exc, PaperNotFoundError):
        return FailureReason.NOT_FOUND
    if isinstance(exc, UpstreamTimeoutError):
        return FailureReason.TIMED_OUT
    if isinstance(exc, CorpusError):
        return FailureReason.UPSTREAM_ERROR
    return FailureReason.UNEXPECTED


def _failure(seed_id: str, stage: BranchStage, exc: BaseException) -> BranchFailure:
    return BranchFailure(
        seed_id=seed_id,
        stage=stage,
        reason=_classify(exc),
        message=str(exc) or exc.__class__.__name__,
    )


async def expand_seed(
    seed_id: str,
    depth: int,
    *,
    max_depth: int,
    corpus: CitationSource,
    aggregator: NetworkAggregator,
    neighbor_limit: int,
) -> Optional[BranchResult]:
    """
    Resolve one seed and, if `depth < max_depth`, attach its neighbours.

    Returns None when the seed was skipped (too deep or already visited).
    Never raises; failures are carried on the returned BranchResult.
    """
    if depth > max_depth or not aggregator.claim(seed_id):
        return None

    result = BranchResult(seed_id=seed_id)

    try:
        result.paper = await asyncio.to_thread(corpus.lookup_by_canonical_id, seed_id)
    except Exception as exc:  # noqa: BLE001
        if not isinstance(exc, CorpusError):
            logger.exception("Unexpected error resolving %s", seed_id)
        result.failure = _failure(seed_id, BranchStage.RESOLVE, exc)
        aggregator.apply(result)
        return result

    if depth < max_depth:
        source_id = result.paper.source_id
        try:
            citing, cited = await asyncio.gather(
                asyncio.to_thread(corpus.get_citing_papers, source_id, neighbor_limit),
                asyncio.to_thread(corpus.get_cited_papers, source_id, neighbor_limit),
            )
        except Exception as exc:  # noqa: BLE001
            if not isinstance(exc, CorpusError):
                logger.exception("Unexpected error fetching neighbours of %s", seed_id)
            result.failure = _failure(seed_id, BranchStage.NEIGHBORS, exc)
        else:
            result.citing = list(citing)
            result.cited = list(cited)

    aggregator.apply(result)
    return result


def _normalize_seeds(seed_ids: Optional[Sequence[str]]) -> List[str]:
    seeds: List[str] = []
    for raw in seed_ids or []:
        seed = normalize_arxiv_id(raw)
        if seed:
            seeds.append(seed)
    return seeds


async def build_citation_network(
    seed_ids: Optional[Sequence[str]],
    depth: int = 1,
    *,
    corpus: CitationSource,
    library: Optional[LibraryGateway] = None,
    user_id: Optional[str] = None,
    neighbor_limit: Optional[int] = None,
    max_depth: Optional[int] = None,
    seed_limit: Optional[int] = None,
) -> Network:
    """
    Build one ephemeral citation network.

    When `seed_ids` is empty and a library gateway is given, up to
    `seed_limit` ids from the user's library are used instead. No seeds at
    all yields an empty Network.
    """
    if neighbor_limit is None:
        neighbor_limit = settings.NETWORK_NEIGHBOR_LIMIT
    if seed_limit is None:
        seed_limit = settings.LIBRARY_SEED_LIMIT

    bound = clamp_depth(depth, max_depth)
    seeds = _normalize_seeds(seed_ids)

    if not seeds and library is not None:
        library_ids = await asyncio.to_thread(library.seed_ids, user_id, seed_limit)
        seeds = _normalize_seeds(library_ids)
        logger.info("No explicit seeds; using %d library entries for %s", len(seeds), user_id)

    aggregator = NetworkAggregator()
    if not seeds:
        return aggregator.network

    await asyncio.gather(
        *(
            expand_seed(
                seed,
                0,
                max_depth=bound,
                corpus=corpus,
                aggregator=aggregator,
                neighbor_limit=neighbor_limit,
            )
            for seed in seeds
        )
    )

    network = aggregator.network
    logger.info(
        "Built citation network from %d seeds (depth=%d): %d nodes, %d edges, %d failed branches",
        len(seeds),
        bound,
        len(network.nodes),
        len(network.edges),
        len(network.failures),
    )
    return network


def build_citation_network_sync(
    seed_ids: Optional[Sequence[str]],
    depth: int = 1,
    **kwargs,
) -> Network:
    """
    Blocking wrapper for callers outside an event loop (the CLI).
    """
    return asyncio.run(build_citation_network(seed_ids, depth, **kwargs))
