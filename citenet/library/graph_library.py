# citenet/library/graph_library.py

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from citenet.config.settings import settings
from citenet.corpus.ids import normalize_arxiv_id
from citenet.graph.schema import EdgeType, NodeType, paper_node_id, user_node_id
from citenet.library.gateway import DEFAULT_USER_ID
from citenet.library.storage import load_library, save_library
from citenet.models.paper import LibraryEntry, ReadingStatus

logger = logging.getLogger("citenet.library")


class GraphLibrary:
    """
    Library gateway backed by a persisted networkx graph.

    Layout:
      user:<id>  --LIBRARY_HAS_PAPER{status, added_at, seq}-->  paper:<arxiv_id>

    Paper nodes carry the metadata shared between users (arxiv_id, title).
    """

    def __init__(
        self,
        name: Optional[str] = None,
        directory: Optional[Path] = None,
        *,
        graph: Optional[nx.MultiDiGraph] = None,
        autosave: bool = True,
    ) -> None:
        self.name = name or settings.LIBRARY_DEFAULT_NAME
        self.directory = Path(directory) if directory is not None else settings.library_dir
        self.autosave = autosave
        self._lock = threading.Lock()

        if graph is None:
            graph = load_library(self.name, self.directory)
        if graph is None:
            logger.info("No library found at %s; starting empty", self.directory)
            graph = nx.MultiDiGraph()
        self.graph: nx.MultiDiGraph = graph

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def save(self) -> Path:
        return save_library(self.graph, self.name, self.directory)

    def _ownership_edges(self, user_id: Optional[str]) -> List[Tuple[str, Dict[str, Any]]]:
        """
        (paper node, edge data) for every library entry of this user, in the
        order they were added.
        """
        node = user_node_id(user_id or DEFAULT_USER_ID)
        if node not in self.graph:
            return []

        edges = [
            (v, data)
            for _, v, data in self.graph.out_edges(node, data=True)
            if data.get("type") == EdgeType.LIBRARY_HAS_PAPER.value
        ]
        edges.sort(key=lambda item: item[1].get("seq", 0))
        return edges

    def _entry(self, paper_node: str, data: Dict[str, Any]) -> LibraryEntry:
        attrs = self.graph.nodes[paper_node]
        return LibraryEntry(
            arxiv_id=attrs["arxiv_id"],
            title=attrs.get("title") or "",
            status=ReadingStatus(data.get("status", ReadingStatus.TO_READ.value)),
            added_at=data.get("added_at"),
        )

    def _find(self, user_node: str, paper_node: str) -> Optional[Dict[str, Any]]:
        if user_node not in self.graph or paper_node not in self.graph:
            return None
        for data in (self.graph.get_edge_data(user_node, paper_node) or {}).values():
            if data.get("type") == EdgeType.LIBRARY_HAS_PAPER.value:
                return data
        return None

    # ------------------------------------------------------------------
    # Gateway
    # ------------------------------------------------------------------
    def seed_ids(self, user_id: Optional[str], limit: int = 10) -> List[str]:
        if limit <= 0:
            return []
        with self._lock:
            edges = self._ownership_edges(user_id)[:limit]
            return [self.graph.nodes[v]["arxiv_id"] for v, _ in edges]

    def owned_ids(self, user_id: Optional[str], arxiv_ids: Iterable[str]) -> Set[str]:
        wanted = {normalize_arxiv_id(a) for a in arxiv_ids if a}
        with self._lock:
            owned = {self.graph.nodes[v]["arxiv_id"] for v, _ in self._ownership_edges(user_id)}
        return wanted & owned

    def list_papers(
        self,
        user_id: Optional[str],
        status: Optional[ReadingStatus] = None,
    ) -> List[LibraryEntry]:
        """
        Library entries, most recently added first.
        """
        with self._lock:
            entries = [self._entry(v, data) for v, data in self._ownership_edges(user_id)]

        if status is not None:
            entries = [e for e in entries if e.status == status]
        entries.reverse()
        return entries

    def add_paper(self, user_id: Optional[str], entry: LibraryEntry) -> Tuple[LibraryEntry, bool]:
        arxiv_id = normalize_arxiv_id(entry.arxiv_id)
        if not arxiv_id:
            raise ValueError("Library entries need an arXiv id")

        user_node = user_node_id(user_id or DEFAULT_USER_ID)
        paper_node = paper_node_id(arxiv_id)

        with self._lock:
            existing = self._find(user_node, paper_node)
            if existing is not None:
                return self._entry(paper_node, existing), False

            if user_node not in self.graph:
                self.graph.add_node(user_node, type=NodeType.USER.value, user_id=user_id or DEFAULT_USER_ID)

            if paper_node in self.graph:
                if entry.title and not self.graph.nodes[paper_node].get("title"):
                    self.graph.nodes[paper_node]["title"] = entry.title
            else:
                self.graph.add_node(
                    paper_node,
                    type=NodeType.PAPER.value,
                    arxiv_id=arxiv_id,
                    title=entry.title,
                )

            seq = self.graph.graph.get("next_seq", 0)
            self.graph.graph["next_seq"] = seq + 1

            data = {
                "type": EdgeType.LIBRARY_HAS_PAPER.value,
                "status": entry.status.value,
                "added_at": entry.added_at or datetime.now(timezone.utc),
                "seq": seq,
            }
            self.graph.add_edge(user_node, paper_node, **data)

            if self.autosave:
                self.save()

            logger.info("Added %s to library of %s", arxiv_id, user_id or DEFAULT_USER_ID)
            return self._entry(paper_node, data), True

