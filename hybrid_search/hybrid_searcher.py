"""
Hybrid Search Engine for grocery products
Combines the vector branch (query embedding + nearest neighbours) and the
text branch (BM25 keywords) using weighted Reciprocal Rank Fusion
"""

import logging
import concurrent.futures
import time
from typing import List, Optional, Tuple

from catalog.config import CatalogConfig
from catalog.exceptions import EmbeddingUnavailable, InvalidRequest
from catalog.models import Product, RankedCandidate
from text_search import SEARCHABLE_FIELDS
from .fusion_strategies import WeightedRRFusion

CATEGORY_FIELDS = ("category",)


class HybridSearcher:
    """
    Rank fusion engine
    Runs the two retrieval branches against the catalog, fuses them and returns
    at most max_results products. Embedding failures and branch timeouts degrade
    to fewer branches; an unreachable store aborts the search.
    """

    def __init__(self, config: CatalogConfig, catalog, embedder, fusion: Optional[WeightedRRFusion] = None):
        """
        Initialize hybrid searcher

        Args:
            config: CatalogConfig with fusion weights, limits and timeouts
            catalog: Catalog store exposing vector_top_k and text_top_k
            embedder: Embedding provider exposing embed_query
            fusion: Fusion strategy (built from config if omitted)
        """
        self.config = config
        self.catalog = catalog
        self.embedder = embedder
        self.logger = logging.getLogger(__name__)

        self.fusion = fusion or WeightedRRFusion(
            vector_weight=config.vector_weight,
            text_weight=config.text_weight,
            rank_constant=config.rank_constant,
            max_results=config.max_results
        )

        self.logger.info(
            f"Hybrid searcher initialized (vector_weight={self.fusion.vector_weight}, "
            f"text_weight={self.fusion.text_weight}, k={self.fusion.k})"
        )

    def search(self, query: Optional[str], category: Optional[str] = None) -> List[Product]:
        """Hybrid search returning products only; scores are used for ordering and dropped"""
        return [candidate.product for candidate in self.rank(query, category)]

    def rank(self, query: Optional[str], category: Optional[str] = None) -> List[RankedCandidate]:
        """
        Perform hybrid search and keep the fusion scores

        Args:
            query: Shopper query text
            category: Optional category; on its own it drives a category-field text search

        Returns:
            Fused candidates, best first
        """
        query = (query or "").strip()
        category = (category or "").strip() or None

        if not query and not category:
            raise InvalidRequest("A search needs a query or a category")

        self.logger.info(f"Hybrid search: query='{query}', category={category}")

        start_time = time.time()
        if self.config.parallel_search:
            vector_results, text_results = self._parallel_search(query, category)
        else:
            vector_results, text_results = self._sequential_search(query, category)
        search_time = time.time() - start_time

        candidates = self.fusion.fuse_results(vector_results, text_results)

        self.logger.info(
            f"Hybrid search completed: {len(candidates)} results from "
            f"{len(vector_results)} vector / {len(text_results)} text candidates ({search_time:.3f}s)"
        )
        return candidates

    def _text_branch_args(self, query: str, category: Optional[str]) -> tuple:
        if query:
            return query, SEARCHABLE_FIELDS, self.config.text_top_k, category
        return category, CATEGORY_FIELDS, self.config.text_top_k, None

    def _vector_branch_args(self, query_vector: List[float], category: Optional[str]) -> tuple:
        vector_category = category if self.config.category_filters_vector else None
        return query_vector, self.config.vector_top_k, self.config.vector_num_candidates, vector_category

    def _parallel_search(self, query: str, category: Optional[str]) -> Tuple[List[Product], List[Product]]:
        """Run the text branch alongside the embedding call and the vector branch"""
        # Not a context manager: leaving it would wait on a hung embedding call
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=3)
        try:
            text_future = executor.submit(self.catalog.text_top_k, *self._text_branch_args(query, category))
            text_deadline = time.monotonic() + self.config.branch_timeout

            vector_results = []
            if query:
                embedding_future = executor.submit(self.embedder.embed_query, query)
                query_vector = self._await_embedding(embedding_future)
                if query_vector is not None:
                    vector_future = executor.submit(
                        self.catalog.vector_top_k, *self._vector_branch_args(query_vector, category)
                    )
                    vector_results = self._await_branch(
                        vector_future, "vector", time.monotonic() + self.config.branch_timeout
                    )

            text_results = self._await_branch(text_future, "text", text_deadline)
            return vector_results, text_results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _sequential_search(self, query: str, category: Optional[str]) -> Tuple[List[Product], List[Product]]:
        """Run the branches one after another, each with the same timeouts as the parallel path"""
        # One worker per step so a hung call never blocks the next one
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=3)
        try:
            vector_results = []
            if query:
                query_vector = self._await_embedding(executor.submit(self.embedder.embed_query, query))
                if query_vector is not None:
                    vector_future = executor.submit(
                        self.catalog.vector_top_k, *self._vector_branch_args(query_vector, category)
                    )
                    vector_results = self._await_branch(
                        vector_future, "vector", time.monotonic() + self.config.branch_timeout
                    )

            text_future = executor.submit(self.catalog.text_top_k, *self._text_branch_args(query, category))
            text_results = self._await_branch(text_future, "text", time.monotonic() + self.config.branch_timeout)
            return vector_results, text_results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _await_embedding(self, future: concurrent.futures.Future) -> Optional[List[float]]:
        try:
            return future.result(timeout=self.config.embedding_timeout)
        except concurrent.futures.TimeoutError:
            self.logger.warning(
                f"Embedding timed out after {self.config.embedding_timeout}s, "
                f"continuing with text results only"
            )
        except EmbeddingUnavailable as e:
            self.logger.warning(f"Embedding unavailable, continuing with text results only: {e}")
        return None

    def _await_branch(self, future: concurrent.futures.Future, name: str, deadline: float) -> List[Product]:
        """Wait for a branch until its deadline, measured from when it was submitted"""
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except concurrent.futures.TimeoutError:
            self.logger.warning(f"The {name} branch timed out after {self.config.branch_timeout}s, dropping it")
            return []

    def test_connection(self) -> bool:
        """Check that the catalog store answers"""
        try:
            self.catalog.find_by_id("__healthcheck__")
            return True
        except Exception as e:
            self.logger.error(f"Connection test failed: {e}")
            return False
