# citenet/graph/schema.py

from enum import Enum


class NodeType(str, Enum):
    PAPER = "paper"
    USER = "user"


class EdgeType(str, Enum):
    # Paper->paper citation edges (source cites target)
    CITES = "CITES"

    # User->paper ownership in the library
    LIBRARY_HAS_PAPER = "LIBRARY_HAS_PAPER"


def paper_node_id(arxiv_id: str) -> str:
    return f"paper:{arxiv_id}"


def user_node_id(user_id: str) -> str:
    return f"user:{user_id}"
