# citenet/graph/io.py

from __future__ import annotations

import json
import pickle
from pathlib import Path
from typing import Union

import networkx as nx

from citenet.api.models import CitationGraph

PathLike = Union[str, Path]


def _prepare(path: PathLike, default_suffix: str, overwrite: bool) -> Path:
    output_path = Path(path)

    if output_path.suffix == "":
        output_path = output_path.with_suffix(default_suffix)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"File already exists and overwrite=False: {output_path}")

    return output_path


def save_graph(
    graph: nx.Graph,
    path: PathLike,
    overwrite: bool = True,
) -> Path:
    """
    Serialize a NetworkX graph to disk using pickle.

    - If `path` has no suffix, `.gpickle` is appended.
    - Creates parent directories if needed.
    - If `overwrite` is False and the file already exists, raises FileExistsError.
    """
    output_path = _prepare(path, ".gpickle", overwrite)

    with output_path.open("wb") as f:
        pickle.dump(graph, f, protocol=pickle.HIGHEST_PROTOCOL)

    return output_path


def load_graph(path: PathLike) -> nx.Graph:
    """
    Load a NetworkX graph from a pickle file.
    """
    p = Path(path)
    with p.open("rb") as f:
        graph = pickle.load(f)
    return graph


def save_graph_json(
    graph: CitationGraph,
    path: PathLike,
    overwrite: bool = True,
) -> Path:
    """
    Write the `{nodes, links}` payload exactly as the web API returns it.
    """
    output_path = _prepare(path, ".json", overwrite)
    payload = graph.model_dump(by_alias=True, exclude_none=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return output_path
