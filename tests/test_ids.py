# tests/test_ids.py

import pytest

from citenet.corpus.ids import extract_arxiv_id, is_valid_arxiv_id, normalize_arxiv_id


@pytest.mark.parametrize(
    "raw",
    [
        "2301.00001",
        "arXiv:2301.00001",
        "arxiv:2301.00001v3",
        " 2301.00001 ",
        "https://arxiv.org/abs/2301.00001v2",
        "https://arxiv.org/pdf/2301.00001.pdf",
    ],
)
def test_normalize_variants(raw):
    assert normalize_arxiv_id(raw) == "2301.00001"


def test_normalize_can_keep_version():
    assert normalize_arxiv_id("arXiv:1706.03762v7", keep_version=True) == "1706.03762v7"


def test_old_style_ids():
    assert normalize_arxiv_id("arXiv:hep-th/9901001v1") == "hep-th/9901001"
    assert is_valid_arxiv_id("hep-th/9901001")
    assert is_valid_arxiv_id("math.GT/0309136")


@pytest.mark.parametrize("raw", ["", "not-an-id", "2301", "2301.1", "12345.67890", "S1"])
def test_invalid_ids(raw):
    assert not is_valid_arxiv_id(raw)


def test_extract_from_entry_url():
    assert extract_arxiv_id("http://arxiv.org/abs/2301.00001v2") == "2301.00001"
    assert extract_arxiv_id("http://arxiv.org/abs/hep-th/9901001v1") == "hep-th/9901001"
