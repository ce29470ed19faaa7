"""
Qdrant Catalog Store for grocery product search
Holds product records with their precomputed embeddings and serves
id lookups, random samples, full listings and vector top-k queries
"""

from typing import List, Any, Optional
import random
import uuid
from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import (
    Distance, VectorParams, PointStruct,
    Filter, FieldCondition, MatchValue,
    HnswConfigDiff, SearchParams
)
from .config import CatalogConfig
from .exceptions import StoreUnavailable
from .models import Product
import logging

VECTOR_NAME = "embedding"
SCROLL_PAGE_SIZE = 256

STORE_ERRORS = (ResponseHandlingException, UnexpectedResponse)


def point_id_for(product_id: str) -> str:
    """Qdrant point ids must be UUIDs; derive a stable one from the product id"""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"product:{product_id}"))


class QdrantCatalogStore:
    """
    Qdrant-backed product catalog
    Each product is one point: a named `embedding` vector plus the product fields as payload
    """

    def __init__(self, config: CatalogConfig, client: Optional[QdrantClient] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        if client is not None:
            self.client = client
        elif config.qdrant_url == ":memory:":
            self.client = QdrantClient(location=":memory:")
        else:
            self.client = QdrantClient(
                url=config.qdrant_url,
                api_key=config.qdrant_api_key,
                timeout=config.qdrant_timeout
            )

        self.collection_name = config.collection_name
        self.logger.info(f"Connected to Qdrant at {config.qdrant_url}")

    def create_collection(self, force_recreate: bool = False) -> bool:
        """
        Create the product collection

        Args:
            force_recreate: Whether to delete existing collection first

        Returns:
            True if collection was created, False if already exists
        """
        try:
            collections = self.client.get_collections().collections
            collection_exists = any(c.name == self.collection_name for c in collections)

            if collection_exists:
                if force_recreate:
                    self.logger.info(f"Deleting existing collection: {self.collection_name}")
                    self.client.delete_collection(self.collection_name)
                else:
                    self.logger.info(f"Collection {self.collection_name} already exists")
                    return False

            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config={
                    VECTOR_NAME: VectorParams(
                        size=self.config.embedding_dimension,
                        distance=Distance.COSINE,
                        hnsw_config=HnswConfigDiff(m=16, ef_construct=100)
                    )
                }
            )

            self.logger.info(f"Created collection: {self.collection_name}")
            return True

        except STORE_ERRORS as e:
            self.logger.error(f"Error creating collection: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

    def upsert_products(self, products: List[Product]) -> int:
        """
        Insert or update products. Products without an embedding are stored
        without a vector and are only reachable through lexical search.

        Returns:
            Number of products written
        """
        points = []
        for product in products:
            vector = {VECTOR_NAME: list(product.embedding)} if product.embedding else {}
            points.append(
                PointStruct(
                    id=point_id_for(product.id),
                    vector=vector,
                    payload=product.to_payload()
                )
            )

        try:
            for i in range(0, len(points), SCROLL_PAGE_SIZE):
                self.client.upsert(
                    collection_name=self.collection_name,
                    points=points[i:i + SCROLL_PAGE_SIZE]
                )
        except STORE_ERRORS as e:
            self.logger.error(f"Error upserting products: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        self.logger.info(f"Upserted {len(points)} products")
        return len(points)

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """Exact lookup by product id"""
        try:
            records = self.client.retrieve(
                collection_name=self.collection_name,
                ids=[point_id_for(product_id)],
                with_payload=True,
                with_vectors=False
            )
        except STORE_ERRORS as e:
            self.logger.error(f"Error retrieving product {product_id}: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        if not records:
            return None
        return Product.from_payload(records[0].payload)

    def sample(self, n: int) -> List[Product]:
        """Uniform random subset of at most n distinct products"""
        point_ids = self._scroll_ids()
        if not point_ids:
            return []

        chosen = random.sample(point_ids, min(n, len(point_ids)))
        try:
            records = self.client.retrieve(
                collection_name=self.collection_name,
                ids=chosen,
                with_payload=True,
                with_vectors=False
            )
        except STORE_ERRORS as e:
            self.logger.error(f"Error sampling products: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        return [Product.from_payload(record.payload) for record in records]

    def list_all(self) -> List[Product]:
        """Every product in storage order"""
        products = []
        offset = None
        try:
            while True:
                records, offset = self.client.scroll(
                    collection_name=self.collection_name,
                    limit=SCROLL_PAGE_SIZE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False
                )
                products.extend(Product.from_payload(record.payload) for record in records)
                if offset is None:
                    break
        except STORE_ERRORS as e:
            self.logger.error(f"Error listing products: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        return products

    def vector_top_k(
        self,
        query_vector: List[float],
        k: int,
        num_candidates: int,
        category: Optional[str] = None
    ) -> List[Product]:
        """
        Approximate nearest neighbours by cosine similarity, best first

        Args:
            query_vector: Normalized query embedding
            k: Number of products to return
            num_candidates: HNSW search breadth, independent of k
            category: Optional exact category match

        Returns:
            Products ordered best-first
        """
        query_filter = None
        if category:
            query_filter = Filter(
                must=[FieldCondition(key="category", match=MatchValue(value=category))]
            )

        try:
            response = self.client.query_points(
                collection_name=self.collection_name,
                query=list(query_vector),
                using=VECTOR_NAME,
                query_filter=query_filter,
                limit=k,
                search_params=SearchParams(hnsw_ef=max(num_candidates, k)),
                with_payload=True,
                with_vectors=False
            )
        except STORE_ERRORS as e:
            self.logger.error(f"Error searching products: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        return [Product.from_payload(point.payload) for point in response.points]

    def count_products(self) -> int:
        """Number of products in the collection"""
        try:
            return self.client.count(collection_name=self.collection_name, exact=True).count
        except STORE_ERRORS as e:
            self.logger.error(f"Error counting products: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

    def _scroll_ids(self) -> List[Any]:
        point_ids = []
        offset = None
        try:
            while True:
                records, offset = self.client.scroll(
                    collection_name=self.collection_name,
                    limit=SCROLL_PAGE_SIZE,
                    offset=offset,
                    with_payload=False,
                    with_vectors=False
                )
                point_ids.extend(record.id for record in records)
                if offset is None:
                    break
        except STORE_ERRORS as e:
            self.logger.error(f"Error scrolling product ids: {e}")
            raise StoreUnavailable(f"Qdrant unreachable: {e}") from e

        return point_ids
