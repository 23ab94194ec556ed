# tests/test_library.py

from datetime import datetime, timezone

import networkx as nx
import pytest

from citenet.graph.schema import EdgeType, NodeType
from citenet.library.graph_library import GraphLibrary
from citenet.library.storage import load_library, save_library
from citenet.models.paper import LibraryEntry, ReadingStatus


def entry(arxiv_id, title="T", status=ReadingStatus.TO_READ, day=1):
    return LibraryEntry(
        arxiv_id=arxiv_id,
        title=title,
        status=status,
        added_at=datetime(2024, 1, day, tzinfo=timezone.utc),
    )


def test_add_paper_is_create_if_absent(tmp_path):
    library = GraphLibrary(directory=tmp_path)

    stored, created = library.add_paper("u1", entry("2301.00001", "Paper A"))
    again, created_again = library.add_paper("u1", entry("arXiv:2301.00001v2", "Other title"))

    assert created is True
    assert created_again is False
    assert again.arxiv_id == stored.arxiv_id == "2301.00001"
    assert again.title == "Paper A"
    assert len(library.list_papers("u1")) == 1


def test_graph_layout(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    library.add_paper("u1", entry("2301.00001", "Paper A"))

    G = library.graph
    assert G.nodes["user:u1"]["type"] == NodeType.USER.value
    assert G.nodes["paper:2301.00001"]["type"] == NodeType.PAPER.value
    edges = list(G.edges("user:u1", data=True))
    assert len(edges) == 1
    assert edges[0][2]["type"] == EdgeType.LIBRARY_HAS_PAPER.value
    assert edges[0][2]["status"] == "TO_READ"


def test_seed_ids_are_oldest_first_and_limited(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    for i, arxiv_id in enumerate(["2301.00001", "2301.00002", "2301.00003"], start=1):
        library.add_paper("u1", entry(arxiv_id, day=i))

    assert library.seed_ids("u1", limit=2) == ["2301.00001", "2301.00002"]
    assert library.seed_ids("u1", limit=0) == []
    assert library.seed_ids("nobody") == []


def test_users_are_isolated(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    library.add_paper("u1", entry("2301.00001"))
    library.add_paper("u2", entry("2301.00002"))
    library.add_paper("u2", entry("2301.00001"))

    assert library.seed_ids("u1") == ["2301.00001"]
    assert library.seed_ids("u2") == ["2301.00002", "2301.00001"]


def test_default_user(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    library.add_paper(None, entry("2301.00001"))

    assert library.seed_ids("default") == ["2301.00001"]


def test_owned_ids_normalizes_input(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    library.add_paper("u1", entry("2301.00001"))

    owned = library.owned_ids("u1", ["arXiv:2301.00001", "2301.00002", ""])

    assert owned == {"2301.00001"}


def test_list_papers_newest_first_with_status_filter(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    library.add_paper("u1", entry("2301.00001", status=ReadingStatus.DONE, day=1))
    library.add_paper("u1", entry("2301.00002", status=ReadingStatus.READING, day=2))
    library.add_paper("u1", entry("2301.00003", status=ReadingStatus.DONE, day=3))

    assert [e.arxiv_id for e in library.list_papers("u1")] == [
        "2301.00003",
        "2301.00002",
        "2301.00001",
    ]
    done = library.list_papers("u1", ReadingStatus.DONE)
    assert [e.arxiv_id for e in done] == ["2301.00003", "2301.00001"]


def test_library_persists_between_instances(tmp_path):
    GraphLibrary(name="lib", directory=tmp_path).add_paper("u1", entry("2301.00001", "Paper A"))

    reloaded = GraphLibrary(name="lib", directory=tmp_path)

    papers = reloaded.list_papers("u1")
    assert [(p.arxiv_id, p.title) for p in papers] == [("2301.00001", "Paper A")]
    assert papers[0].added_at == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_add_paper_requires_an_id(tmp_path):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    with pytest.raises(ValueError):
        library.add_paper("u1", entry("  "))


def test_storage_roundtrip_and_type_check(tmp_path):
    assert load_library("missing", tmp_path) is None

    G = nx.MultiDiGraph()
    G.add_edge("user:u1", "paper:1")
    path = save_library(G, "lib", tmp_path)

    assert path == tmp_path / "lib.pkl"
    assert list(load_library("lib", tmp_path).edges()) == [("user:u1", "paper:1")]
    assert list(tmp_path.glob("*.tmp")) == []

    save_library(nx.Graph(), "wrong", tmp_path)
    with pytest.raises(TypeError):
        load_library("wrong", tmp_path)
