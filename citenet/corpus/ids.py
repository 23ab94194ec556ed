# citenet/corpus/ids.py

"""
Helpers for arXiv identifiers.

Both identifier schemes are accepted:

- new style: ``YYMM.NNNN`` / ``YYMM.NNNNN`` (optionally ``vN``)
- old style: ``archive(.SUBJ)/YYMMNNN`` (optionally ``vN``), e.g. ``hep-th/9901001``
"""

from __future__ import annotations

import re

_NEW_STYLE = re.compile(r"^\d{4}\.\d{4,5}(v\d+)?$")
_OLD_STYLE = re.compile(r"^[a-z][a-z\-]*(\.[A-Z]{2})?/\d{7}(v\d+)?$")
_VERSION = re.compile(r"v\d+$")

_URL_PREFIXES = (
    "https://arxiv.org/abs/",
    "http://arxiv.org/abs/",
    "https://arxiv.org/pdf/",
    "http://arxiv.org/pdf/",
    "https://export.arxiv.org/abs/",
    "http://export.arxiv.org/abs/",
)


def normalize_arxiv_id(raw: str, *, keep_version: bool = False) -> str:
    """
    Strip the textual variants people paste around an arXiv id.

    >>> normalize_arxiv_id("arXiv:1706.03762v7")
    '1706.03762'
    >>> normalize_arxiv_id("https://arxiv.org/pdf/1706.03762.pdf")
    '1706.03762'
    """
    value = (raw or "").strip()

    for prefix in _URL_PREFIXES:
        if value.lower().startswith(prefix):
            value = value[len(prefix):]
            break

    if value.lower().startswith("arxiv:"):
        value = value[len("arxiv:"):]

    if value.lower().endswith(".pdf"):
        value = value[: -len(".pdf")]

    value = value.strip().strip("/")

    if not keep_version:
        value = _VERSION.sub("", value)

    return value


def is_valid_arxiv_id(raw: str) -> bool:
    value = normalize_arxiv_id(raw, keep_version=True)
    return bool(_NEW_STYLE.match(value) or _OLD_STYLE.match(value))


def extract_arxiv_id(entry_url: str) -> str:
    """
    Pull the id out of an Atom entry id such as
    ``http://arxiv.org/abs/1706.03762v7``. The version suffix is dropped.
    """
    match = re.search(r"(\d{4}\.\d{4,5})(v\d+)?$", entry_url)
    if match:
        return match.group(1)

    old = re.search(r"abs/(.+)$", entry_url)
    if old:
        return _VERSION.sub("", old.group(1))
    return entry_url
