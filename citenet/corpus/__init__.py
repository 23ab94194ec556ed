# citenet/corpus/__init__.py

"""
Adapters for the remote bibliographic sources (arXiv and Semantic Scholar).
"""

from .client import CorpusClient
from .errors import (
    CorpusError,
    PaperNotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamTimeoutError,
)

__all__ = [
    "CorpusClient",
    "CorpusError",
    "PaperNotFoundError",
    "RateLimitedError",
    "UpstreamError",
    "UpstreamTimeoutError",
]
