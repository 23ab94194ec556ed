"""
Persisting and reloading the library graph.

The library is a networkx MultiDiGraph pickled to
``{library_dir}/{name}.pkl``. Writes go to a temporary file first and are
then moved into place, so a crash mid-write never leaves a truncated library.
"""

from __future__ import annotations

import logging
import os
import pickle
import tempfile
from pathlib import Path
from typing import Optional

import networkx as nx

logger = logging.getLogger("citenet.library")


def library_path(name: str, directory: Path) -> Path:
    if not name.endswith(".pkl"):
        name = f"{name}.pkl"
    return Path(directory) / name


def save_library(G: nx.MultiDiGraph, name: str, directory: Path) -> Path:
    """
    Persist the library graph using pickle and return the path written.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = library_path(name, directory)

    fd, tmp_name = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            pickle.dump(G, f, protocol=pickle.HIGHEST_PROTOCOL)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Saved library graph to %s", path)
    return path


def load_library(name: str, directory: Path) -> Optional[nx.MultiDiGraph]:
    """
    Load a previously saved library graph, or None if there is none yet.
    """
    path = library_path(name, directory)
    if not path.exists():
        return None

    with path.open("rb") as f:
        G = pickle.load(f)

    if not isinstance(G, nx.MultiDiGraph):
        raise TypeError(f"{path} does not contain a MultiDiGraph (got {type(G).__name__})")

    logger.info(
        "Loaded library %s: %d nodes, %d edges", path, G.number_of_nodes(), G.number_of_edges()
    )
    return G
