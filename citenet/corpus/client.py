# citenet/corpus/client.py

from __future__ import annotations

from typing import List, Optional

from citenet.corpus.arxiv import ArxivClient
from citenet.corpus.semantic_scholar import SemanticScholarClient
from citenet.models.paper import ArxivPaper, PaperRef


class CorpusClient:
    """
    The two remote sources behind one interface.

    - canonical lookups and free-text search go to arXiv
    - identity resolution and citation edges go to Semantic Scholar

    Everything returned here is already mapped onto our own models, so the
    network builder never sees either API's schema.
    """

    def __init__(
        self,
        arxiv: Optional[ArxivClient] = None,
        semantic_scholar: Optional[SemanticScholarClient] = None,
    ) -> None:
        self.arxiv = arxiv or ArxivClient()
        self.semantic_scholar = semantic_scholar or SemanticScholarClient()

    def close(self) -> None:
        self.arxiv.close()
        self.semantic_scholar.close()

    def lookup_by_canonical_id(self, canonical_id: str) -> PaperRef:
        return self.semantic_scholar.lookup_by_arxiv_id(canonical_id).to_ref()

    def search_full_text(self, query: str, limit: int = 20) -> List[ArxivPaper]:
        if limit <= 0:
            return []
        return self.arxiv.search(query, max_results=limit)

    def get_citing_papers(self, source_id: str, limit: int = 10) -> List[PaperRef]:
        if limit <= 0:
            return []
        return self.semantic_scholar.get_citations(source_id, limit=limit)[:limit]

    def get_cited_papers(self, source_id: str, limit: int = 10) -> List[PaperRef]:
        if limit <= 0:
            return []
        return self.semantic_scholar.get_references(source_id, limit=limit)[:limit]
