# citenet/library/gateway.py

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Set, Tuple

from citenet.models.paper import LibraryEntry, ReadingStatus


DEFAULT_USER_ID = "default"


class LibraryGateway(Protocol):
    """
    What the network code needs from the user's paper library.
    """

    def seed_ids(self, user_id: Optional[str], limit: int = 10) -> List[str]:
        """Canonical ids of up to `limit` library entries, oldest first."""
        ...

    def owned_ids(self, user_id: Optional[str], arxiv_ids: Iterable[str]) -> Set[str]:
        """The subset of `arxiv_ids` already in the user's library."""
        ...

    def add_paper(self, user_id: Optional[str], entry: LibraryEntry) -> Tuple[LibraryEntry, bool]:
        """Create-if-absent. Returns (stored entry, created)."""
        ...

    def list_papers(
        self,
        user_id: Optional[str],
        status: Optional[ReadingStatus] = None,
    ) -> List[LibraryEntry]:
        ...
