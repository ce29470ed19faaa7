"""
Data model for the grocery catalog and the ranking pipeline
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Optional


@dataclass
class Product:
    """A catalog entry. The embedding is never part of the exposed shape."""

    id: str
    title: str = ""
    description: str = ""
    category: str = ""
    price: float = 0.0
    emoji: str = ""
    process: Optional[str] = None
    embedding: Optional[List[float]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], embedding: Optional[List[float]] = None) -> 'Product':
        """Build a product from a store payload or a raw catalog record"""
        product_id = payload.get("product_id") or payload.get("id") or payload.get("_id") or ""
        return cls(
            id=str(product_id),
            title=str(payload.get("title") or ""),
            description=str(payload.get("description") or ""),
            category=str(payload.get("category") or ""),
            price=_parse_price(payload.get("price")),
            emoji=str(payload.get("emoji") or ""),
            process=payload.get("process"),
            embedding=embedding if embedding is not None else payload.get("embedding")
        )

    def to_payload(self) -> Dict[str, Any]:
        """Payload stored alongside the vector"""
        return {
            "product_id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "price": self.price,
            "emoji": self.emoji,
            "process": self.process
        }

    def to_dict(self) -> Dict[str, Any]:
        """Exposed product fields"""
        data = {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "description": self.description,
            "category": self.category,
            "emoji": self.emoji
        }
        if self.process is not None:
            data["process"] = self.process
        return data


@dataclass
class RankedCandidate:
    """
    A product annotated with its per-branch fusion scores for one search call.
    Ranks are zero-based and set only when the product appeared in that branch.
    """

    product: Product
    vector_score: float = 0.0
    text_score: float = 0.0
    vector_rank: Optional[int] = None
    text_rank: Optional[int] = None

    @property
    def combined_score(self) -> float:
        return self.vector_score + self.text_score

    @property
    def found_in(self) -> List[str]:
        sources = []
        if self.vector_rank is not None:
            sources.append("vector")
        if self.text_rank is not None:
            sources.append("text")
        return sources


@dataclass
class SearchRequest:
    """Transport-agnostic product search request"""

    query: Optional[str] = None
    category: Optional[str] = None
    product_id: Optional[str] = None
    random: bool = False


def _parse_price(price) -> float:
    """Parse price from various formats to float"""
    if not price:
        return 0.0

    if isinstance(price, (int, float)):
        return float(price)

    if isinstance(price, str):
        price_str = price.strip().replace('$', '').replace(',', '')
        try:
            return float(price_str)
        except (ValueError, TypeError):
            return 0.0

    return 0.0
