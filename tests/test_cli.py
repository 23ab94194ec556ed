# tests/test_cli.py

import json

from typer.testing import CliRunner

from citenet.cli import library_cli, network_cli, search_cli
from citenet.cli.main import app as cli_app
from citenet.library.graph_library import GraphLibrary
from citenet.models.paper import ArxivPaper, PaperDetails

from fake_corpus import FakeArxiv, FakeSemanticScholar, FakeWebCorpus, scenario_corpus

runner = CliRunner()


PAPER_A = ArxivPaper(
    arxiv_id="2301.00001",
    title="Paper A",
    authors=["Ada Lovelace"],
    abstract="About A.",
    url="http://arxiv.org/abs/2301.00001v1",
    pdf_url="http://arxiv.org/pdf/2301.00001v1",
)


def make_corpus():
    return scenario_corpus(
        FakeWebCorpus,
        arxiv=FakeArxiv({"2301.00001": PAPER_A}),
        semantic_scholar=FakeSemanticScholar(
            {"2301.00001": PaperDetails(source_id="S1", title="Paper A", citation_count=7)}
        ),
    )


def test_network_build_writes_json(tmp_path, monkeypatch):
    monkeypatch.setattr(network_cli, "_make_corpus", make_corpus)
    out = tmp_path / "net.json"

    result = runner.invoke(
        cli_app,
        ["network", "build", "--seed-ids", "2301.00001,2301.99999", "--output", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert "2301.99999" in result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data == {
        "nodes": [
            {"id": "S1", "arxivId": "2301.00001", "title": "Paper A"},
            {"id": "S2", "title": "Paper B"},
        ],
        "links": [{"source": "S1", "target": "S2"}],
    }


def test_network_build_from_seed_file_to_gpickle(tmp_path, monkeypatch):
    monkeypatch.setattr(network_cli, "_make_corpus", make_corpus)
    seeds = tmp_path / "seeds.txt"
    seeds.write_text("# my seeds\n2301.00001\n\n", encoding="utf-8")
    out = tmp_path / "net.gpickle"

    result = runner.invoke(
        cli_app,
        ["network", "build", "--seed-file", str(seeds), "-o", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert out.exists()


def test_network_build_rejects_malformed_id(monkeypatch):
    monkeypatch.setattr(network_cli, "_make_corpus", make_corpus)

    result = runner.invoke(cli_app, ["network", "build", "-s", "not-an-id"])

    assert result.exit_code == 1
    assert "Malformed" in result.output


def test_network_build_from_library(tmp_path, monkeypatch):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    monkeypatch.setattr(network_cli, "_make_corpus", make_corpus)
    monkeypatch.setattr(network_cli, "_make_library", lambda: library)
    monkeypatch.setattr(library_cli, "_make_library", lambda: library)

    runner.invoke(cli_app, ["library", "add", "2301.00001", "--title", "Paper A", "-u", "u1"])
    result = runner.invoke(cli_app, ["network", "build", "-u", "u1"])

    assert result.exit_code == 0, result.output
    assert "2 papers, 1 links" in result.output


def test_library_add_and_list(tmp_path, monkeypatch):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    monkeypatch.setattr(library_cli, "_make_library", lambda: library)
    monkeypatch.setattr(library_cli, "_make_corpus", make_corpus)

    first = runner.invoke(cli_app, ["library", "add", "arXiv:2301.00001"])
    again = runner.invoke(cli_app, ["library", "add", "2301.00001", "--title", "Other"])
    listed = runner.invoke(cli_app, ["library", "list"])

    assert first.exit_code == 0, first.output
    assert "Added" in first.output
    assert "Already in library" in again.output
    assert "Paper A" in listed.output
    assert library.seed_ids("default") == ["2301.00001"]


def test_library_add_unknown_paper_without_title(tmp_path, monkeypatch):
    library = GraphLibrary(directory=tmp_path, autosave=False)
    monkeypatch.setattr(library_cli, "_make_library", lambda: library)
    monkeypatch.setattr(library_cli, "_make_corpus", make_corpus)

    result = runner.invoke(cli_app, ["library", "add", "2301.99999"])

    assert result.exit_code == 1
    assert library.list_papers("default") == []


def test_papers_lookup_and_search(monkeypatch):
    monkeypatch.setattr(search_cli, "_make_corpus", make_corpus)

    lookup = runner.invoke(cli_app, ["papers", "lookup", "2301.00001"])
    search = runner.invoke(cli_app, ["papers", "search", "paper a"])
    missing = runner.invoke(cli_app, ["papers", "lookup", "2301.99999"])

    assert lookup.exit_code == 0, lookup.output
    assert "Citations: 7" in lookup.output
    assert search.exit_code == 0
    assert "2301.00001" in search.output
    assert missing.exit_code == 1
