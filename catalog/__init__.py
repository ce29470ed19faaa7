"""
Grocery Catalog Package
Configuration, data model, query embedding and the Qdrant-backed product store
"""

from .config import CatalogConfig
from .exceptions import (
    CatalogError, EmbeddingUnavailable, StoreUnavailable,
    NotFound, InvalidRequest
)
from .models import Product, RankedCandidate, SearchRequest
from .qdrant_store import QdrantCatalogStore
from .product_embedder import ProductEmbedder

__all__ = [
    'CatalogConfig', 'CatalogError', 'EmbeddingUnavailable', 'StoreUnavailable',
    'NotFound', 'InvalidRequest', 'Product', 'RankedCandidate', 'SearchRequest',
    'QdrantCatalogStore', 'ProductEmbedder'
]
