"""
BM25 Indexer for grocery product search
Keeps one rank-bm25 index per searchable field so a query can target
title, description and category independently
"""

import gzip
import pickle
import logging
import re
from pathlib import Path
from typing import List, Dict, Any, Iterable, Set

import nltk
from nltk.corpus import stopwords
from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer
from rank_bm25 import BM25Okapi

from catalog.config import CatalogConfig
from catalog.models import Product

SEARCHABLE_FIELDS = ("title", "description", "category")

# Filler words that show up in spoken shopping requests
GROCERY_STOP_WORDS = {
    'product', 'item', 'items', 'brand', 'buy', 'purchase', 'price',
    'please', 'want', 'need', 'get', 'find', 'show', 'looking',
    'something', 'anything', 'pack', 'add', 'cart'
}


class BM25Indexer:
    """
    Field-aware BM25 index over the product catalog
    Documents are kept in catalog order; ties in ranking fall back to that order
    """

    def __init__(self, config: CatalogConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.tokenizer = RegexpTokenizer(r"[a-z0-9]+")
        self.stemmer = PorterStemmer()
        self.stop_words = self._load_stop_words()

        self.documents: List[Product] = []
        self.field_tokens: Dict[str, List[List[str]]] = {f: [] for f in SEARCHABLE_FIELDS}
        self.field_indexes: Dict[str, BM25Okapi] = {}

    def _load_stop_words(self) -> Set[str]:
        stop_words = set(GROCERY_STOP_WORDS)
        try:
            stop_words.update(stopwords.words('english'))
            return stop_words
        except LookupError:
            if not self.config.nltk_auto_download:
                self.logger.warning("NLTK stopwords not installed, using grocery stop words only")
                return stop_words

        self.logger.info("Downloading required NLTK data...")
        nltk.download('stopwords', quiet=True)
        try:
            stop_words.update(stopwords.words('english'))
        except LookupError:
            self.logger.warning("NLTK stopwords unavailable, using grocery stop words only")
        return stop_words

    def preprocess_text(self, text: str) -> List[str]:
        """
        Lowercase, tokenize, drop stop words and stem

        Args:
            text: Input text to preprocess

        Returns:
            List of processed tokens
        """
        if not text:
            return []

        text = re.sub(r'[^a-z0-9\s]', ' ', str(text).lower())

        processed_tokens = []
        for token in self.tokenizer.tokenize(text):
            if token in self.stop_words or not 1 < len(token) < 30:
                continue
            processed_tokens.append(self.stemmer.stem(token))

        return processed_tokens

    def build_index(self, products: Iterable[Product]) -> bool:
        """
        Build the per-field BM25 indexes

        Returns:
            True if at least one field has indexable text
        """
        self.documents = list(products)
        self.field_tokens = {
            field: [self.preprocess_text(getattr(product, field)) for product in self.documents]
            for field in SEARCHABLE_FIELDS
        }

        self.field_indexes = {}
        for field, corpus in self.field_tokens.items():
            # BM25Okapi divides by the average document length
            if any(corpus):
                self.field_indexes[field] = BM25Okapi(corpus)

        if not self.field_indexes:
            self.logger.warning("No indexable text in catalog, lexical search will return no results")
            return False

        self.logger.info(
            f"BM25 index built for {len(self.documents):,} products "
            f"(fields: {', '.join(self.field_indexes)})"
        )
        return True

    def save_index(self, index_path: str) -> bool:
        """
        Save the BM25 index to disk

        Args:
            index_path: Path where to save the index

        Returns:
            True if successful, False otherwise
        """
        if not self.field_indexes:
            self.logger.error("No BM25 index to save")
            return False

        index_data = {
            'documents': self.documents,
            'field_tokens': self.field_tokens,
            'field_indexes': self.field_indexes,
            'stop_words': self.stop_words
        }

        Path(index_path).parent.mkdir(parents=True, exist_ok=True)
        with gzip.open(index_path, 'wb') as f:
            pickle.dump(index_data, f, protocol=pickle.HIGHEST_PROTOCOL)

        file_size = Path(index_path).stat().st_size / (1024 * 1024)
        self.logger.info(f"BM25 index saved to: {index_path} ({file_size:.1f} MB)")
        return True

    def load_index(self, index_path: str) -> bool:
        """
        Load BM25 index from disk

        Args:
            index_path: Path to the saved index

        Returns:
            True if successful, False if the file does not exist
        """
        if not Path(index_path).exists():
            self.logger.warning(f"Index file not found: {index_path}")
            return False

        with gzip.open(index_path, 'rb') as f:
            index_data = pickle.load(f)

        self.documents = index_data['documents']
        self.field_tokens = index_data['field_tokens']
        self.field_indexes = index_data['field_indexes']
        self.stop_words = index_data.get('stop_words', self.stop_words)

        self.logger.info(f"BM25 index loaded from: {index_path} ({len(self.documents):,} documents)")
        return True

    def get_index_stats(self) -> Dict[str, Any]:
        """Get index statistics"""
        return {
            'total_documents': len(self.documents),
            'indexed_fields': list(self.field_indexes),
            'vocabulary_size': len({
                token
                for corpus in self.field_tokens.values()
                for doc in corpus
                for token in doc
            }),
            'stop_words_count': len(self.stop_words)
        }
