# citenet/corpus/errors.py

from __future__ import annotations

from typing import Optional


class CorpusError(RuntimeError):
    """
    Base error for anything that goes wrong talking to a bibliographic source.

    Carries the HTTP status (when the remote answered) and the URL so that
    callers can log something useful without re-deriving it.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class PaperNotFoundError(CorpusError):
    """The remote source has no record for the requested identifier."""


class UpstreamError(CorpusError):
    """The remote source failed, returned garbage, or could not be reached."""


class UpstreamTimeoutError(UpstreamError):
    """The remote source did not answer within the configured timeout."""


class RateLimitedError(UpstreamError):
    """The remote source answered HTTP 429."""
