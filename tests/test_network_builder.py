# tests/test_network_builder.py

import asyncio
import threading
import time

from citenet.corpus.errors import UpstreamError, UpstreamTimeoutError
from citenet.network.builder import (
    BranchStage,
    Edge,
    FailureReason,
    NetworkAggregator,
    build_citation_network,
    clamp_depth,
)

from fake_corpus import FakeCorpus, ref, scenario_corpus


def build(seeds, depth=1, **kwargs):
    return asyncio.run(build_citation_network(seeds, depth, **kwargs))


class FakeLibrary:
    def __init__(self, ids):
        self.ids = ids
        self.calls = []

    def seed_ids(self, user_id, limit=10):
        self.calls.append((user_id, limit))
        return self.ids[:limit]


def test_scenario_depth_one():
    corpus = scenario_corpus()

    network = build(["2301.00001"], depth=1, corpus=corpus)

    assert list(network.nodes) == ["S1", "S2"]
    s1, s2 = network.nodes["S1"], network.nodes["S2"]
    assert (s1.canonical_id, s1.title) == ("2301.00001", "Paper A")
    assert (s2.canonical_id, s2.title) == (None, "Paper B")
    assert network.edges == [Edge(source="S1", target="S2")]
    assert network.failures == []


def test_depth_zero_resolves_seeds_without_fan_out():
    corpus = scenario_corpus()

    network = build(["2301.00001"], depth=0, corpus=corpus)

    assert list(network.nodes) == ["S1"]
    assert network.edges == []
    assert corpus.neighbor_calls == []


def test_depth_two_still_expands_only_from_seeds():
    # S2 has neighbours of its own, but neighbours are never expanded
    corpus = FakeCorpus(
        papers={
            "2301.00001": ref("S1", "Paper A", "2301.00001"),
            "2301.00002": ref("S2", "Paper B", "2301.00002"),
        },
        cited={"S1": [ref("S2", "Paper B", "2301.00002")], "S2": [ref("S3", "Paper C")]},
        citing={"S2": [ref("S4", "Paper D")]},
    )

    network = build(["2301.00001"], depth=2, corpus=corpus)

    assert set(network.nodes) == {"S1", "S2"}
    assert network.edges == [Edge("S1", "S2")]
    assert corpus.lookups == ["2301.00001"]
    assert {call[1] for call in corpus.neighbor_calls} == {"S1"}


def test_edge_direction_citing_points_into_seed_and_cited_points_out():
    corpus = FakeCorpus(
        papers={"2301.00001": ref("S1", "Seed", "2301.00001")},
        citing={"S1": [ref("C1", "Citer one"), ref("C2", "Citer two")]},
        cited={"S1": [ref("R1", "Reference")]},
    )

    network = build(["2301.00001"], corpus=corpus)

    assert Edge("C1", "S1") in network.edges
    assert Edge("C2", "S1") in network.edges
    assert Edge("S1", "R1") in network.edges
    assert len(network.edges) == 3


def test_shared_neighbour_is_a_single_node():
    shared = ref("X", "Shared reference")
    corpus = FakeCorpus(
        papers={
            "2301.00001": ref("S1", "A", "2301.00001"),
            "2301.00002": ref("S2", "B", "2301.00002"),
        },
        cited={"S1": [shared], "S2": [ref("X", "Shared reference")]},
    )

    network = build(["2301.00001", "2301.00002"], corpus=corpus)

    assert sorted(network.nodes) == ["S1", "S2", "X"]
    assert sorted((e.source, e.target) for e in network.edges) == [("S1", "X"), ("S2", "X")]


def test_parallel_edges_are_kept():
    # Two seeds citing each other produce the same edge from both sides
    corpus = FakeCorpus(
        papers={
            "2301.00001": ref("S1", "A", "2301.00001"),
            "2301.00002": ref("S2", "B", "2301.00002"),
        },
        cited={"S1": [ref("S2", "B", "2301.00002")]},
        citing={"S2": [ref("S1", "A", "2301.00001")]},
    )

    network = build(["2301.00001", "2301.00002"], corpus=corpus)

    assert set(network.nodes) == {"S1", "S2"}
    assert network.edges.count(Edge("S1", "S2")) == 2


def test_failed_seed_does_not_affect_others():
    corpus = scenario_corpus()

    network = build(["2301.00001", "2301.99999"], corpus=corpus)

    assert set(network.nodes) == {"S1", "S2"}
    assert network.edges == [Edge("S1", "S2")]
    assert len(network.failures) == 1
    failure = network.failures[0]
    assert failure.seed_id == "2301.99999"
    assert failure.stage == BranchStage.RESOLVE
    assert failure.reason == FailureReason.NOT_FOUND


def test_failure_reasons_are_classified():
    corpus = FakeCorpus(
        errors={
            "2301.00001": UpstreamTimeoutError("took too long"),
            "2301.00002": UpstreamError("HTTP 500", status_code=500),
            "2301.00003": RuntimeError("bug"),
        }
    )

    network = build(["2301.00001", "2301.00002", "2301.00003"], corpus=corpus)

    assert network.is_empty()
    reasons = {f.seed_id: f.reason for f in network.failures}
    assert reasons == {
        "2301.00001": FailureReason.TIMED_OUT,
        "2301.00002": FailureReason.UPSTREAM_ERROR,
        "2301.00003": FailureReason.UNEXPECTED,
    }


def test_neighbour_failure_keeps_resolved_seed():
    corpus = FakeCorpus(
        papers={"2301.00001": ref("S1", "A", "2301.00001")},
        neighbor_errors={"S1": UpstreamTimeoutError("slow")},
    )

    network = build(["2301.00001"], corpus=corpus)

    assert list(network.nodes) == ["S1"]
    assert network.edges == []
    assert network.failures[0].stage == BranchStage.NEIGHBORS
    assert network.failures[0].reason == FailureReason.TIMED_OUT


def test_seed_variants_are_expanded_once():
    corpus = scenario_corpus()

    network = build(["2301.00001", "arXiv:2301.00001", " 2301.00001v2 "], corpus=corpus)

    assert corpus.lookups == ["2301.00001"]
    assert len(network.edges) == 1


def test_neighbor_limit_is_forwarded():
    corpus = scenario_corpus()

    build(["2301.00001"], corpus=corpus, neighbor_limit=3)

    assert ("citing", "S1", 3) in corpus.neighbor_calls
    assert ("cited", "S1", 3) in corpus.neighbor_calls


def test_no_seeds_and_no_library_is_empty():
    corpus = scenario_corpus()

    network = build([], corpus=corpus)

    assert network.nodes == {}
    assert network.edges == []
    assert corpus.lookups == []


def test_empty_library_yields_empty_network():
    library = FakeLibrary([])

    network = build(None, corpus=scenario_corpus(), library=library, user_id="u1")

    assert network.is_empty()
    assert library.calls == [("u1", 10)]


def test_library_entries_are_used_as_seeds():
    corpus = scenario_corpus()
    library = FakeLibrary(["2301.00001", "2301.99999", "2301.88888"])

    network = build([], corpus=corpus, library=library, user_id="u1", seed_limit=2)

    assert library.calls == [("u1", 2)]
    assert sorted(corpus.lookups) == ["2301.00001", "2301.99999"]
    assert set(network.nodes) == {"S1", "S2"}


def test_explicit_seeds_skip_the_library():
    library = FakeLibrary(["2301.00002"])

    build(["2301.00001"], corpus=scenario_corpus(), library=library)

    assert library.calls == []


def test_negative_depth_is_clamped_to_zero():
    corpus = scenario_corpus()

    network = build(["2301.00001"], depth=-3, corpus=corpus)

    assert list(network.nodes) == ["S1"]
    assert corpus.neighbor_calls == []


def test_clamp_depth():
    assert clamp_depth(-1, 2) == 0
    assert clamp_depth(1, 2) == 1
    assert clamp_depth(7, 2) == 2
    assert clamp_depth(1, 0) == 0


def test_aggregator_upsert_is_last_write_wins():
    aggregator = NetworkAggregator()
    aggregator.upsert(ref("S1", "stub"))
    aggregator.upsert(ref("S1", "Full title", "2301.00001", 12))

    assert len(aggregator.network.nodes) == 1
    node = aggregator.network.nodes["S1"]
    assert node.title == "Full title"
    assert node.citation_count == 12


def test_aggregator_claim_is_idempotent():
    aggregator = NetworkAggregator()
    assert aggregator.claim("2301.00001") is True
    assert aggregator.claim("2301.00001") is False


class SlowCorpus(FakeCorpus):
    """Every remote call blocks for `delay` seconds."""

    def __init__(self, delay, **kwargs):
        super().__init__(**kwargs)
        self.delay = delay

    def lookup_by_canonical_id(self, canonical_id):
        time.sleep(self.delay)
        return super().lookup_by_canonical_id(canonical_id)

    def get_citing_papers(self, source_id, limit=10):
        time.sleep(self.delay)
        return super().get_citing_papers(source_id, limit)

    def get_cited_papers(self, source_id, limit=10):
        time.sleep(self.delay)
        return super().get_cited_papers(source_id, limit)


def test_seeds_expand_concurrently():
    delay = 0.3
    ids = [f"2301.0000{i}" for i in range(1, 6)]
    corpus = SlowCorpus(
        delay,
        papers={a: ref(f"S{i}", f"Paper {i}", a) for i, a in enumerate(ids, start=1)},
        cited={f"S{i}": [ref(f"R{i}", f"Ref {i}")] for i in range(1, 6)},
    )

    started = time.perf_counter()
    network = build(ids, corpus=corpus)
    elapsed = time.perf_counter() - started

    # one lookup plus two neighbour fetches per seed, 15 calls in total
    assert elapsed < 5 * 3 * delay / 2
    assert len(network.nodes) == 10
    assert network.failures == []


class RendezvousCorpus(FakeCorpus):
    """Neighbour fetches only return once both are in flight at the same time."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.barrier = threading.Barrier(2, timeout=5)

    def get_citing_papers(self, source_id, limit=10):
        self.barrier.wait()
        return super().get_citing_papers(source_id, limit)

    def get_cited_papers(self, source_id, limit=10):
        self.barrier.wait()
        return super().get_cited_papers(source_id, limit)


def test_citing_and_cited_fetches_overlap():
    corpus = RendezvousCorpus(
        papers={"2301.00001": ref("S1", "Seed", "2301.00001")},
        citing={"S1": [ref("C1", "Citer")]},
        cited={"S1": [ref("R1", "Reference")]},
    )

    network = build(["2301.00001"], corpus=corpus)

    assert network.failures == []
    assert Edge("C1", "S1") in network.edges
    assert Edge("S1", "R1") in network.edges
