"""Tests for the search facade's mode dispatch."""

import pytest

from catalog.exceptions import InvalidRequest, NotFound
from catalog.models import SearchRequest
from hybrid_search.hybrid_searcher import HybridSearcher
from hybrid_search.search_service import ProductSearchService
from tests.conftest import FakeCatalog, FakeEmbedder, make_product


def build_service(config, catalog, embedder=None):
    searcher = HybridSearcher(config, catalog, embedder or FakeEmbedder())
    return ProductSearchService(config, catalog, searcher)


@pytest.fixture
def catalog():
    products = [make_product(f"p{i}", f"Item {i}") for i in range(12)]
    return FakeCatalog(
        products=products,
        vector_results=products[:3],
        text_results=products[2:5],
    )


def test_product_id_takes_precedence(config, catalog):
    service = build_service(config, catalog)

    result = service.get_products(
        SearchRequest(product_id="p3", random=True, query="milk", category="Dairy")
    )

    assert result.id == "p3"
    assert catalog.sample_calls == []
    assert catalog.text_calls == []


def test_missing_product_id_raises_not_found(config, catalog):
    service = build_service(config, catalog)

    with pytest.raises(NotFound):
        service.get_products(SearchRequest(product_id="does-not-exist"))


def test_random_takes_precedence_over_query(config, catalog):
    service = build_service(config, catalog)

    result = service.get_products(SearchRequest(random=True, query="milk"))

    assert len(result) == 9
    assert len({p.id for p in result}) == 9
    assert catalog.sample_calls == [9]
    assert catalog.text_calls == []


def test_random_on_small_catalog_returns_every_product(config):
    products = [make_product(f"p{i}") for i in range(4)]
    service = build_service(config, FakeCatalog(products=products))

    result = service.get_products(SearchRequest(random=True))

    assert {p.id for p in result} == {p.id for p in products}


def test_query_runs_hybrid_search(config, catalog):
    service = build_service(config, catalog)

    result = service.get_products(SearchRequest(query="milk"))

    assert [p.id for p in result] == ["p2", "p3", "p4", "p0", "p1"]


def test_category_alone_runs_hybrid_search(config, catalog):
    service = build_service(config, catalog)

    service.get_products(SearchRequest(category="Dairy"))

    assert catalog.text_calls == [("Dairy", ("category",), 20, None)]


def test_empty_query_without_category_is_invalid(config, catalog):
    service = build_service(config, catalog)

    with pytest.raises(InvalidRequest):
        service.get_products(SearchRequest(query=""))


def test_no_criteria_lists_whole_catalog_in_storage_order(config, catalog):
    service = build_service(config, catalog)

    result = service.get_products(SearchRequest())

    assert [p.id for p in result] == [f"p{i}" for i in range(12)]
