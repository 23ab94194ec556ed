# tests/test_live_corpus.py

import pytest

from citenet.corpus.client import CorpusClient
from citenet.network.builder import build_citation_network_sync


@pytest.mark.integration
def test_lookup_attention_is_all_you_need():
    corpus = CorpusClient()
    try:
        seed = corpus.lookup_by_canonical_id("1706.03762")
    finally:
        corpus.close()

    assert seed.canonical_id == "1706.03762"
    assert "Attention" in seed.title


@pytest.mark.integration
def test_small_live_network():
    corpus = CorpusClient()
    try:
        network = build_citation_network_sync(["1706.03762"], 1, corpus=corpus, neighbor_limit=3)
    finally:
        corpus.close()

    assert network.failures == []
    assert 1 < len(network.nodes) <= 7
