"""
Product search facade
Dispatches a search request to exactly one of: id lookup, random sample,
hybrid search or full catalog listing
"""

import logging
from typing import List, Union

from catalog.config import CatalogConfig
from catalog.exceptions import NotFound
from catalog.models import Product, SearchRequest
from .hybrid_searcher import HybridSearcher


class ProductSearchService:
    """Search entry point used by the voice assistant's tool calls"""

    def __init__(self, config: CatalogConfig, catalog, hybrid_searcher: HybridSearcher):
        self.config = config
        self.catalog = catalog
        self.hybrid_searcher = hybrid_searcher
        self.logger = logging.getLogger(__name__)

    def get_products(self, request: SearchRequest) -> Union[Product, List[Product]]:
        """
        Resolve a search request

        Precedence: product_id, then random, then query/category, then full listing.

        Raises:
            NotFound: product_id does not exist
            InvalidRequest: an empty query without a category
            StoreUnavailable: the catalog store cannot be reached
        """
        if request.product_id:
            self.logger.info(f"Searching for product ID: {request.product_id}")
            product = self.catalog.find_by_id(request.product_id)
            if product is None:
                raise NotFound(f"Product {request.product_id} not found")
            return product

        if request.random:
            self.logger.info(f"Fetching {self.config.random_sample_size} random products")
            return self.catalog.sample(self.config.random_sample_size)

        if request.query is not None or request.category:
            return self.hybrid_searcher.search(request.query, request.category)

        self.logger.info("Fetching all products")
        return self.catalog.list_all()
