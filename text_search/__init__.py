"""
BM25 Keyword Search Module for grocery hybrid search
Provides the lexical branch: field-aware BM25 over title, description and category
"""

from .bm25_searcher import BM25Searcher
from .bm25_indexer import BM25Indexer, SEARCHABLE_FIELDS

__all__ = [
    "BM25Searcher",
    "BM25Indexer",
    "SEARCHABLE_FIELDS"
]
