# citenet/network/assembly.py

from __future__ import annotations

from typing import List, Set, Tuple

import networkx as nx

from citenet.api.models import CitationGraph, GraphLink, GraphNode
from citenet.graph.schema import EdgeType, NodeType
from citenet.network.builder import Network


def assemble_graph(network: Network, dedupe_links: bool = False) -> CitationGraph:
    """
    Flatten a Network into the `{nodes, links}` shape the graph view consumes.

    Nodes come out in node-map order, links in discovery order. With
    `dedupe_links` only the first occurrence of each (source, target) pair is
    kept.
    """
    nodes = [
        GraphNode(
            id=paper.source_id,
            arxiv_id=paper.canonical_id,
            title=paper.title,
            citation_count=paper.citation_count,
        )
        for paper in network.nodes.values()
    ]

    links: List[GraphLink] = []
    seen: Set[Tuple[str, str]] = set()
    for edge in network.edges:
        key = (edge.source, edge.target)
        if dedupe_links:
            if key in seen:
                continue
            seen.add(key)
        links.append(GraphLink(source=edge.source, target=edge.target))

    return CitationGraph(nodes=nodes, links=links)


def network_to_digraph(network: Network) -> nx.MultiDiGraph:
    """
    Convert a Network into a typed networkx graph (for export and analysis).
    Parallel links are kept as parallel edges.
    """
    G = nx.MultiDiGraph()

    for paper in network.nodes.values():
        G.add_node(
            paper.source_id,
            type=NodeType.PAPER.value,
            arxiv_id=paper.canonical_id,
            title=paper.title,
            citation_count=paper.citation_count,
        )

    for edge in network.edges:
        G.add_edge(edge.source, edge.target, type=EdgeType.CITES.value)

    return G
