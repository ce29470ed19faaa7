"""
Product catalog boundary used by the search pipeline
Combines the Qdrant store (lookups, sampling, vector search) with the
BM25 lexical index (full-text search)
"""

import logging
from typing import List, Optional, Sequence

from text_search import BM25Searcher, SEARCHABLE_FIELDS
from .config import CatalogConfig
from .models import Product
from .qdrant_store import QdrantCatalogStore


class ProductCatalog:
    """
    The catalog store as seen by search: two ranked retrieval primitives
    (vector_top_k, text_top_k) plus id lookup, random sample and full listing
    """

    def __init__(self, config: CatalogConfig, store: QdrantCatalogStore, text_searcher: BM25Searcher):
        self.config = config
        self.store = store
        self.text_searcher = text_searcher
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: CatalogConfig) -> 'ProductCatalog':
        """Connect to Qdrant and load (or build) the lexical index"""
        store = QdrantCatalogStore(config)
        catalog = cls(config, store, BM25Searcher(config))

        if not catalog.text_searcher.load_index(config.bm25_index_path):
            catalog.refresh_text_index()

        return catalog

    def refresh_text_index(self) -> bool:
        """Rebuild the in-memory lexical index from the store's current contents"""
        products = self.store.list_all()
        self.logger.info(f"Building lexical index from {len(products)} catalog products")
        return self.text_searcher.build_index(products)

    def find_by_id(self, product_id: str) -> Optional[Product]:
        return self.store.find_by_id(product_id)

    def sample(self, n: int) -> List[Product]:
        return self.store.sample(n)

    def list_all(self) -> List[Product]:
        return self.store.list_all()

    def vector_top_k(
        self,
        query_vector: List[float],
        k: int,
        num_candidates: int,
        category: Optional[str] = None
    ) -> List[Product]:
        return self.store.vector_top_k(query_vector, k, num_candidates, category)

    def text_top_k(
        self,
        text: str,
        fields: Sequence[str] = SEARCHABLE_FIELDS,
        k: int = 20,
        category: Optional[str] = None
    ) -> List[Product]:
        return self.text_searcher.search(text, fields, k, category)
