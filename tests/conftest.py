"""Shared fixtures and fake collaborators for the search tests."""

import random
import time

import pytest

from catalog.config import CatalogConfig
from catalog.exceptions import EmbeddingUnavailable
from catalog.models import Product


def make_product(product_id, title="", category="Dairy", description="", price=1.0, embedding=None):
    return Product(
        id=product_id,
        title=title or f"Product {product_id}",
        description=description,
        category=category,
        price=price,
        emoji="🛒",
        embedding=embedding,
    )


class FakeEmbedder:
    """Embedding provider returning a fixed vector, or failing on demand."""

    def __init__(self, vector=None, error=None, delay=0.0):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.delay = delay
        self.calls = []

    def embed_query(self, query):
        self.calls.append(query)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.vector)


class FakeCatalog:
    """Catalog store with canned branch results and call recording."""

    def __init__(self, products=None, vector_results=None, text_results=None):
        self.products = list(products or [])
        self.vector_results = list(vector_results or [])
        self.text_results = list(text_results or [])
        self.vector_error = None
        self.text_error = None
        self.vector_delay = 0.0
        self.text_delay = 0.0
        self.vector_calls = []
        self.text_calls = []
        self.sample_calls = []
        self.lookup_calls = []

    def vector_top_k(self, query_vector, k, num_candidates, category=None):
        self.vector_calls.append((list(query_vector), k, num_candidates, category))
        if self.vector_delay:
            time.sleep(self.vector_delay)
        if self.vector_error:
            raise self.vector_error
        return self.vector_results[:k]

    def text_top_k(self, text, fields, k, category=None):
        self.text_calls.append((text, tuple(fields), k, category))
        if self.text_delay:
            time.sleep(self.text_delay)
        if self.text_error:
            raise self.text_error
        return self.text_results[:k]

    def find_by_id(self, product_id):
        self.lookup_calls.append(product_id)
        return next((p for p in self.products if p.id == product_id), None)

    def sample(self, n):
        self.sample_calls.append(n)
        return random.sample(self.products, min(n, len(self.products)))

    def list_all(self):
        return list(self.products)


@pytest.fixture
def config():
    return CatalogConfig(
        qdrant_url=":memory:",
        nltk_auto_download=False,
        embedding_timeout=1.0,
        branch_timeout=2.0,
    )


@pytest.fixture
def milk_products():
    """Branch outputs for the milk query: vector [A, B, C], text [B, D]."""
    a = make_product("A", "Whole Milk")
    b = make_product("B", "Skim Milk")
    c = make_product("C", "Oat Drink", category="Plant-Based")
    d = make_product("D", "Milk Chocolate", category="Snacks")
    return {"A": a, "B": b, "C": c, "D": d}


@pytest.fixture
def failing_embedder():
    return FakeEmbedder(error=EmbeddingUnavailable("upstream embedding call failed"))
