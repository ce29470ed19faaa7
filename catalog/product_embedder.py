"""
Query Embedder for grocery product search
Turns spoken/typed shopper queries into normalized sentence-transformer vectors
"""

from typing import List
import torch
import numpy as np
from sentence_transformers import SentenceTransformer
from .config import CatalogConfig
from .exceptions import EmbeddingUnavailable
import logging


class ProductEmbedder:
    """
    Embedding provider for the vector branch of hybrid search
    Catalog entries are embedded offline from title + description
    """

    def __init__(self, config: CatalogConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

        # Initialize device
        if config.device == "auto":
            if torch.cuda.is_available():
                self.device = "cuda"
            elif torch.backends.mps.is_available():
                self.device = "mps"
            else:
                self.device = "cpu"
        else:
            self.device = config.device

        self.logger.info(f"Using device: {self.device}")

        # Load embedding model
        self.model = SentenceTransformer(
            config.embedding_model,
            device=self.device
        )

        # Verify embedding dimensions
        test_embedding = self.model.encode("test")
        actual_dim = len(test_embedding)
        if actual_dim != config.embedding_dimension:
            self.logger.warning(
                f"Model dimension {actual_dim} doesn't match config {config.embedding_dimension}"
            )
            self.config.embedding_dimension = actual_dim

        self.logger.info(f"Loaded {config.embedding_model} with dimension {actual_dim}")

    def embed_query(self, query: str) -> List[float]:
        """
        Create embedding for a search query

        Args:
            query: Search query string

        Returns:
            Query embedding as list of floats

        Raises:
            EmbeddingUnavailable: if the model fails to encode the query
        """
        try:
            embedding = self.model.encode(
                query,
                convert_to_tensor=True,
                show_progress_bar=False
            )

            if isinstance(embedding, torch.Tensor):
                embedding = embedding.cpu().numpy()

            embedding = np.asarray(embedding, dtype="float32")

            # Normalize for cosine similarity
            norm = np.linalg.norm(embedding)
            if norm > 1e-8:
                embedding = embedding / norm

            return embedding.tolist()

        except Exception as e:
            self.logger.error(f"Error embedding query '{query}': {e}")
            raise EmbeddingUnavailable(f"Failed to embed query: {e}") from e

    def get_dimension(self) -> int:
        """Get embedding dimension"""
        return self.config.embedding_dimension
