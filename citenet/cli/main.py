# citenet/cli/main.py

from __future__ import annotations

import typer
from citenet.cli import library_cli, network_cli, search_cli

app = typer.Typer(help="CLI tools for the arXiv citation-network tracker.")

app.add_typer(network_cli.app, name="network")
app.add_typer(search_cli.app, name="papers")
app.add_typer(library_cli.app, name="library")

if __name__ == "__main__":
    app()
