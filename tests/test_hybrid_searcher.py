"""Tests for the hybrid search engine: branch orchestration, degradation and fusion."""

import time

import pytest

from catalog.exceptions import InvalidRequest, StoreUnavailable
from catalog.models import Product
from hybrid_search.hybrid_searcher import HybridSearcher
from tests.conftest import FakeCatalog, FakeEmbedder, make_product


@pytest.fixture
def milk_catalog(milk_products):
    p = milk_products
    return FakeCatalog(
        products=list(p.values()),
        vector_results=[p["A"], p["B"], p["C"]],
        text_results=[p["B"], p["D"]],
    )


@pytest.mark.parametrize("parallel", [True, False])
def test_hybrid_search_fuses_both_branches(config, milk_catalog, parallel):
    config.parallel_search = parallel
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    results = searcher.search("milk")

    assert [p.id for p in results] == ["B", "D", "A", "C"]
    assert all(isinstance(p, Product) for p in results)


def test_branches_use_configured_limits(config, milk_catalog):
    embedder = FakeEmbedder(vector=[0.5, 0.5])
    searcher = HybridSearcher(config, milk_catalog, embedder)

    searcher.search("milk")

    assert embedder.calls == ["milk"]
    assert milk_catalog.vector_calls == [([0.5, 0.5], 20, 100, None)]
    assert milk_catalog.text_calls == [("milk", ("title", "description", "category"), 20, None)]


@pytest.mark.parametrize("parallel", [True, False])
def test_embedding_failure_degrades_to_text_only(config, milk_catalog, failing_embedder, parallel):
    config.parallel_search = parallel
    searcher = HybridSearcher(config, milk_catalog, failing_embedder)

    results = searcher.search("milk")

    assert [p.id for p in results] == ["B", "D"]
    assert milk_catalog.vector_calls == []


@pytest.mark.parametrize("parallel", [True, False])
def test_embedding_timeout_does_not_cancel_text_branch(config, milk_catalog, parallel):
    config.parallel_search = parallel
    config.embedding_timeout = 0.05
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder(delay=0.5))

    start = time.monotonic()
    results = searcher.search("milk")

    assert time.monotonic() - start < 0.4
    assert [p.id for p in results] == ["B", "D"]
    assert milk_catalog.vector_calls == []
    assert len(milk_catalog.text_calls) == 1


@pytest.mark.parametrize("parallel", [True, False])
def test_slow_text_branch_is_dropped(config, milk_catalog, parallel):
    config.parallel_search = parallel
    config.branch_timeout = 0.05
    milk_catalog.text_delay = 0.5
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    results = searcher.search("milk")

    assert [p.id for p in results] == ["A", "B", "C"]


@pytest.mark.parametrize("parallel", [True, False])
def test_slow_vector_branch_is_dropped(config, milk_catalog, parallel):
    config.parallel_search = parallel
    config.branch_timeout = 0.05
    milk_catalog.vector_delay = 0.5
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    results = searcher.search("milk")

    assert [p.id for p in results] == ["B", "D"]
    assert len(milk_catalog.vector_calls) == 1


def test_text_branch_timeout_counts_from_submission(config, milk_catalog):
    config.embedding_timeout = 0.3
    config.branch_timeout = 0.3
    milk_catalog.text_delay = 1.0
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder(delay=0.25))

    start = time.monotonic()
    results = searcher.search("milk")

    assert time.monotonic() - start < 0.45
    assert [p.id for p in results] == ["A", "B", "C"]


@pytest.mark.parametrize("parallel", [True, False])
def test_store_failure_aborts_search(config, milk_catalog, parallel):
    config.parallel_search = parallel
    milk_catalog.vector_error = StoreUnavailable("connection refused")
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    with pytest.raises(StoreUnavailable):
        searcher.search("milk")


def test_text_store_failure_aborts_search(config, milk_catalog):
    milk_catalog.text_error = StoreUnavailable("connection refused")
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    with pytest.raises(StoreUnavailable):
        searcher.search("milk")


@pytest.mark.parametrize("query", [None, "", "   "])
def test_empty_query_without_category_is_rejected(config, milk_catalog, query):
    embedder = FakeEmbedder()
    searcher = HybridSearcher(config, milk_catalog, embedder)

    with pytest.raises(InvalidRequest):
        searcher.search(query)

    assert embedder.calls == []
    assert milk_catalog.vector_calls == []
    assert milk_catalog.text_calls == []


def test_category_only_searches_category_field(config, milk_catalog):
    embedder = FakeEmbedder()
    searcher = HybridSearcher(config, milk_catalog, embedder)

    results = searcher.search(None, category="Dairy")

    assert milk_catalog.text_calls == [("Dairy", ("category",), 20, None)]
    assert milk_catalog.vector_calls == []
    assert embedder.calls == []
    assert [p.id for p in results] == ["B", "D"]


def test_category_narrows_text_branch_only_by_default(config, milk_catalog):
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    searcher.search("milk", category="Dairy")

    assert milk_catalog.text_calls[0][3] == "Dairy"
    assert milk_catalog.vector_calls[0][3] is None


def test_category_narrows_vector_branch_when_configured(config, milk_catalog):
    config.category_filters_vector = True
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    searcher.search("milk", category="Dairy")

    assert milk_catalog.vector_calls[0][3] == "Dairy"
    assert milk_catalog.text_calls[0][3] == "Dairy"


def test_empty_catalog_returns_empty_result(config):
    searcher = HybridSearcher(config, FakeCatalog(), FakeEmbedder())

    assert searcher.search("milk") == []


def test_results_never_exceed_ten(config):
    catalog = FakeCatalog(
        vector_results=[make_product(f"v{i}") for i in range(20)],
        text_results=[make_product(f"t{i}") for i in range(20)],
    )
    searcher = HybridSearcher(config, catalog, FakeEmbedder())

    assert len(searcher.search("bread")) == 10


def test_repeated_searches_are_deterministic(config, milk_catalog):
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    orders = {tuple(p.id for p in searcher.search("milk")) for _ in range(5)}

    assert len(orders) == 1


def test_rank_exposes_fusion_scores(config, milk_catalog):
    searcher = HybridSearcher(config, milk_catalog, FakeEmbedder())

    candidates = searcher.rank("milk")

    assert candidates[0].product.id == "B"
    assert candidates[0].combined_score == pytest.approx(0.1 / 61 + 0.9 / 60)
