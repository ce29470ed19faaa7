"""
Hybrid Search Module for grocery product search
Combines vector search (query embeddings) and BM25 search (keywords)
using weighted Reciprocal Rank Fusion
"""

from .hybrid_searcher import HybridSearcher
from .fusion_strategies import WeightedRRFusion
from .search_service import ProductSearchService

__all__ = [
    "HybridSearcher",
    "WeightedRRFusion",
    "ProductSearchService"
]
