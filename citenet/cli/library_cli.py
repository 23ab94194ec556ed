# citenet/cli/library_cli.py

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from citenet.corpus.client import CorpusClient
from citenet.corpus.errors import CorpusError, PaperNotFoundError
from citenet.corpus.ids import is_valid_arxiv_id, normalize_arxiv_id
from citenet.library.graph_library import GraphLibrary
from citenet.models.paper import LibraryEntry, ReadingStatus

app = typer.Typer(help="Manage the local paper library used as default seeds.")

console = Console()


def _make_library() -> GraphLibrary:
    return GraphLibrary()


def _make_corpus() -> CorpusClient:
    return CorpusClient()


@app.command("add")
def add(
    arxiv_id: str = typer.Argument(..., help="arXiv id to add."),
    title: Optional[str] = typer.Option(
        None, "--title", "-t", help="Title; fetched from arXiv when omitted."
    ),
    status: ReadingStatus = typer.Option(ReadingStatus.TO_READ, "--status"),
    user: str = typer.Option("default", "--user", "-u"),
) -> None:
    """
    Add a paper to the library. Adding an existing paper is a no-op.
    """
    if not is_valid_arxiv_id(arxiv_id):
        console.print(f"[red]Malformed arXiv id:[/red] {arxiv_id}")
        raise typer.Exit(code=1)

    clean_id = normalize_arxiv_id(arxiv_id)

    if title is None:
        corpus = _make_corpus()
        try:
            title = corpus.arxiv.fetch_by_id(clean_id).title
        except PaperNotFoundError:
            console.print(f"[red]No arXiv entry found for[/red] {clean_id}")
            raise typer.Exit(code=1)
        except CorpusError as exc:
            console.print(f"[red]Could not fetch title from arXiv:[/red] {exc}")
            raise typer.Exit(code=1)
        finally:
            corpus.close()

    library = _make_library()
    entry, created = library.add_paper(
        user, LibraryEntry(arxiv_id=clean_id, title=title, status=status)
    )

    if created:
        console.print(f"Added [cyan]{entry.arxiv_id}[/cyan] {entry.title}")
    else:
        console.print(f"[yellow]Already in library:[/yellow] {entry.arxiv_id} {entry.title}")


@app.command("list")
def list_papers(
    status: Optional[ReadingStatus] = typer.Option(None, "--status"),
    user: str = typer.Option("default", "--user", "-u"),
) -> None:
    """
    List library papers, newest first.
    """
    entries = _make_library().list_papers(user, status)
    if not entries:
        console.print("Library is empty.")
        return

    table = Table(title=f"Library of {user}")
    table.add_column("arXiv id", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Added")
    table.add_column("Title")

    for e in entries:
        table.add_row(
            e.arxiv_id,
            e.status.value,
            e.added_at.date().isoformat() if e.added_at else "-",
            e.title,
        )
    console.print(table)
