# citenet/cli/search_cli.py

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from citenet.corpus.client import CorpusClient
from citenet.corpus.errors import CorpusError, PaperNotFoundError
from citenet.models.paper import ArxivPaper

app = typer.Typer(help="Query arXiv and Semantic Scholar directly.")

console = Console()


def _make_corpus() -> CorpusClient:
    return CorpusClient()


def _arxiv_table(title: str, papers: List[ArxivPaper]) -> Table:
    table = Table(title=title)
    table.add_column("arXiv id", style="cyan", no_wrap=True)
    table.add_column("Published")
    table.add_column("Title")
    table.add_column("Authors")

    for p in papers:
        authors = ", ".join(p.authors[:3]) + (" et al." if len(p.authors) > 3 else "")
        table.add_row(
            p.arxiv_id,
            p.published_at.date().isoformat() if p.published_at else "-",
            p.title,
            authors,
        )
    return table


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Free-text query."),
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Max number of hits."),
) -> None:
    """
    Relevance-ranked arXiv search.
    """
    if len(query.strip()) < 2:
        console.print("[red]Query must be at least 2 characters.[/red]")
        raise typer.Exit(code=1)

    corpus = _make_corpus()
    try:
        papers = corpus.search_full_text(query.strip(), limit)
    except CorpusError as exc:
        console.print(f"[red]Search failed:[/red] {exc}")
        raise typer.Exit(code=1)
    finally:
        corpus.close()

    if not papers:
        console.print(f"No results for [bold]{query}[/bold].")
        return
    console.print(_arxiv_table(f"arXiv results for '{query}'", papers))


@app.command("lookup")
def lookup(
    arxiv_id: str = typer.Argument(..., help="arXiv id, with or without 'arXiv:' prefix."),
) -> None:
    """
    Show a paper's citation-index record.
    """
    corpus = _make_corpus()
    try:
        paper = corpus.semantic_scholar.lookup_by_arxiv_id(arxiv_id)
    except PaperNotFoundError:
        console.print(f"[red]Paper not found in Semantic Scholar:[/red] {arxiv_id}")
        raise typer.Exit(code=1)
    except CorpusError as exc:
        console.print(f"[red]Lookup failed:[/red] {exc}")
        raise typer.Exit(code=1)
    finally:
        corpus.close()

    console.print(f"[bold]{paper.title}[/bold]")
    console.print(f"Semantic Scholar id: {paper.source_id}")
    console.print(f"arXiv id: {paper.canonical_id or '-'}")
    console.print(f"Citations: {paper.citation_count if paper.citation_count is not None else '-'}")
    console.print(f"References: {paper.reference_count if paper.reference_count is not None else '-'}")


@app.command("latest")
def latest(
    categories: Optional[str] = typer.Option(
        None, "--categories", "-c", help="Comma-separated arXiv categories."
    ),
    keywords: Optional[str] = typer.Option(
        None, "--keywords", "-k", help="Comma-separated keywords (any may match)."
    ),
    today: bool = typer.Option(False, "--today", help="Only papers submitted since yesterday."),
    limit: int = typer.Option(20, "--limit", "-n", min=1),
) -> None:
    """
    Browse the newest submissions.
    """
    cats = [c.strip() for c in (categories or "").split(",") if c.strip()] or None
    kws = [k.strip() for k in (keywords or "").split(",") if k.strip()]

    corpus = _make_corpus()
    try:
        if today:
            papers = corpus.arxiv.fetch_todays_papers(categories=cats, keywords=kws)[:limit]
        else:
            papers, _ = corpus.arxiv.fetch_latest(categories=cats, keywords=kws, max_results=limit)
    except CorpusError as exc:
        console.print(f"[red]arXiv request failed:[/red] {exc}")
        raise typer.Exit(code=1)
    finally:
        corpus.close()

    console.print(_arxiv_table("Latest arXiv submissions", papers))
