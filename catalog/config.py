"""
Configuration settings for the grocery product search backend
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _default_cors_origins() -> List[str]:
    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        return [frontend_url]
    return ["http://localhost:5173", "https://localhost:5173"]


@dataclass
class CatalogConfig:
    """Configuration for the catalog, embedding and ranking components"""

    # Embedding Model Settings
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 384
    device: str = "auto"  # auto, cpu, cuda, mps

    # Qdrant Settings (":memory:" runs an in-process local store)
    qdrant_url: str = os.getenv("QDRANT_URL", "http://localhost:6333")
    qdrant_api_key: Optional[str] = os.getenv("QDRANT_API_KEY")
    collection_name: str = "products"
    qdrant_timeout: int = 30

    # Lexical index
    bm25_index_path: str = "data/bm25_index.pkl.gz"
    nltk_auto_download: bool = True

    # Rank fusion
    vector_weight: float = 0.1
    text_weight: float = 0.9
    rank_constant: int = 60
    vector_top_k: int = 20
    vector_num_candidates: int = 100
    text_top_k: int = 20
    max_results: int = 10
    random_sample_size: int = 9

    # Query-time resilience (seconds)
    embedding_timeout: float = 5.0
    branch_timeout: float = 10.0
    parallel_search: bool = True

    # Whether a category narrows the vector branch as well as the text branch
    category_filters_vector: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: List[str] = field(default_factory=_default_cors_origins)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'CatalogConfig':
        """Create config from environment variables"""
        return cls(
            qdrant_url=os.getenv("QDRANT_URL", "http://localhost:6333"),
            qdrant_api_key=os.getenv("QDRANT_API_KEY"),
            collection_name=os.getenv("QDRANT_COLLECTION", "products"),
            embedding_model=os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2"),
            device=os.getenv("DEVICE", "auto"),
            bm25_index_path=os.getenv("BM25_INDEX_PATH", "data/bm25_index.pkl.gz"),
            embedding_timeout=float(os.getenv("EMBEDDING_TIMEOUT", "5.0")),
            branch_timeout=float(os.getenv("BRANCH_TIMEOUT", "10.0")),
            category_filters_vector=os.getenv("CATEGORY_FILTERS_VECTOR", "false").lower() in ("1", "true", "yes"),
            api_port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE")
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure root logging for the server and demo scripts"""

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper()))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
