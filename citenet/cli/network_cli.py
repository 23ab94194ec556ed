# citenet/cli/network_cli.py

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from citenet.config.settings import settings
from citenet.corpus.client import CorpusClient
from citenet.corpus.ids import is_valid_arxiv_id
from citenet.graph.io import save_graph, save_graph_json
from citenet.library.graph_library import GraphLibrary
from citenet.network.assembly import assemble_graph, network_to_digraph
from citenet.network.builder import Network, build_citation_network_sync

app = typer.Typer(help="Build and export citation networks around seed papers.")

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_corpus() -> CorpusClient:
    return CorpusClient()


def _make_library() -> GraphLibrary:
    return GraphLibrary()


def _collect_seed_ids(seed_ids: Optional[str], seed_file: Optional[Path]) -> List[str]:
    seeds: List[str] = []
    seen: set[str] = set()

    raw: List[str] = []
    if seed_ids:
        raw.extend(seed_ids.split(","))
    if seed_file:
        if not seed_file.exists():
            console.print(f"[red]Seed file not found:[/red] {seed_file}")
            raise typer.Exit(code=1)
        raw.extend(seed_file.read_text(encoding="utf-8").splitlines())

    for item in raw:
        s = item.strip()
        if not s or s.startswith("#") or s in seen:
            continue
        if not is_valid_arxiv_id(s):
            console.print(f"[red]Malformed arXiv id:[/red] {s}")
            raise typer.Exit(code=1)
        seen.add(s)
        seeds.append(s)

    return seeds


def _print_network(network: Network, limit: int) -> None:
    table = Table(title=f"{len(network.nodes)} papers, {len(network.edges)} links")
    table.add_column("Paper id", style="cyan", no_wrap=True)
    table.add_column("arXiv id")
    table.add_column("Citations", justify="right")
    table.add_column("Title")

    for paper in list(network.nodes.values())[:limit]:
        table.add_row(
            paper.source_id,
            paper.canonical_id or "-",
            "-" if paper.citation_count is None else str(paper.citation_count),
            paper.title,
        )

    console.print(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("build")
def build(
    seed_ids: Optional[str] = typer.Option(
        None,
        "--seed-ids",
        "-s",
        help="Comma-separated seed arXiv ids (e.g. 2301.00001,1706.03762).",
    ),
    seed_file: Optional[Path] = typer.Option(
        None,
        "--seed-file",
        help="Text file with one seed arXiv id per line.",
    ),
    depth: int = typer.Option(1, "--depth", "-d", help="Expansion depth, clamped to [0, 2]."),
    user: str = typer.Option(
        "default",
        "--user",
        "-u",
        help="Library whose papers are used as seeds when none are given.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the graph to this file (.json payload or .gpickle networkx graph).",
    ),
    dedupe_links: bool = typer.Option(
        settings.DEDUPE_LINKS,
        "--dedupe-links/--keep-parallel-links",
        help="Collapse parallel links in the JSON export.",
    ),
    limit: int = typer.Option(25, "--limit", "-n", min=1, help="Max papers to display."),
) -> None:
    """
    Build a citation network and print (or export) it.
    """
    seeds = _collect_seed_ids(seed_ids, seed_file)

    corpus = _make_corpus()
    library = _make_library() if not seeds else None

    try:
        network = build_citation_network_sync(
            seeds,
            depth,
            corpus=corpus,
            library=library,
            user_id=user,
        )
    finally:
        corpus.close()

    if network.is_empty():
        console.print("[yellow]Empty network[/yellow] (no seeds resolved).")
    else:
        _print_network(network, limit)

    for failure in network.failures:
        console.print(
            f"[yellow]skipped[/yellow] {failure.seed_id} "
            f"({failure.stage.value}: {failure.reason.value}) {failure.message}"
        )

    if output is not None:
        if output.suffix in (".gpickle", ".pkl"):
            path = save_graph(network_to_digraph(network), output)
        else:
            path = save_graph_json(assemble_graph(network, dedupe_links=dedupe_links), output)
        console.print(f"Saved graph to [green]{path}[/green]")
