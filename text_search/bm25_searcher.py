"""
BM25 Searcher for grocery product search
Lexical branch of hybrid search: keyword relevance over selected product fields
"""

import logging
import numpy as np
from typing import List, Optional, Sequence

from catalog.config import CatalogConfig
from catalog.models import Product
from .bm25_indexer import BM25Indexer, SEARCHABLE_FIELDS


class BM25Searcher:
    """
    BM25 search engine for keyword-based product search
    A document matches when it shares at least one query term in a searched field
    """

    def __init__(self, config: CatalogConfig, indexer: Optional[BM25Indexer] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.indexer = indexer or BM25Indexer(config)

        self.logger.info("BM25 searcher initialized")

    def load_index(self, index_path: str) -> bool:
        return self.indexer.load_index(index_path)

    def build_index(self, products: Sequence[Product]) -> bool:
        return self.indexer.build_index(products)

    def search(
        self,
        query: str,
        fields: Sequence[str] = SEARCHABLE_FIELDS,
        top_k: int = 20,
        category: Optional[str] = None
    ) -> List[Product]:
        """
        Perform BM25 keyword search

        Args:
            query: Search query string
            fields: Product fields to match against
            top_k: Number of results to return
            category: Optional category narrowing the candidates before ranking

        Returns:
            Matching products ordered best-first
        """
        unknown = [f for f in fields if f not in SEARCHABLE_FIELDS]
        if unknown:
            raise ValueError(f"Unsupported search fields: {unknown}")

        documents = self.indexer.documents
        if not documents:
            return []

        tokenized_query = self.indexer.preprocess_text(query)
        if not tokenized_query:
            self.logger.warning(f"No valid tokens in query: '{query}'")
            return []

        active_fields = [f for f in fields if f in self.indexer.field_indexes]
        if not active_fields:
            return []

        # FILTER FIRST: narrow the candidate set before ranking
        candidates = range(len(documents))
        if category:
            wanted = category.strip().lower()
            candidates = [idx for idx in candidates if documents[idx].category.strip().lower() == wanted]
            if not candidates:
                self.logger.info(f"No products in category '{category}'")
                return []

        query_terms = set(tokenized_query)
        matched = [
            idx for idx in candidates
            if any(query_terms.intersection(self.indexer.field_tokens[f][idx]) for f in active_fields)
        ]
        if not matched:
            return []

        scores = np.zeros(len(documents))
        for field in active_fields:
            scores += np.asarray(self.indexer.field_indexes[field].get_scores(tokenized_query))

        # sorted() is stable, so equal scores keep catalog order
        ranked = sorted(matched, key=lambda idx: -scores[idx])[:top_k]

        self.logger.info(f"Found {len(ranked)} BM25 results for '{query}'")
        return [documents[idx] for idx in ranked]

    def get_index_stats(self):
        return self.indexer.get_index_stats()

    def test_connection(self) -> bool:
        """Test if BM25 index is loaded and ready"""
        return bool(self.indexer.field_indexes)
