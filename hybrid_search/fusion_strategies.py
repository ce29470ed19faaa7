"""
Fusion Strategies for Hybrid Search
Implements weighted Reciprocal Rank Fusion (RRF) for combining the vector and text branches
"""

import logging
from typing import List, Dict, Any

from catalog.models import Product, RankedCandidate

VECTOR_WEIGHT = 0.1
TEXT_WEIGHT = 0.9
RANK_CONSTANT = 60
MAX_RESULTS = 10


class WeightedRRFusion:
    """
    Weighted Reciprocal Rank Fusion
    Each branch contributes weight * 1/(rank + k) for a zero-based rank; contributions
    from the two branches are summed per product id

    The constant k flattens the curve so the first few ranks score close together,
    and the weights favour lexical matches over semantic similarity
    """

    def __init__(
        self,
        vector_weight: float = VECTOR_WEIGHT,
        text_weight: float = TEXT_WEIGHT,
        rank_constant: int = RANK_CONSTANT,
        max_results: int = MAX_RESULTS
    ):
        self.vector_weight = vector_weight
        self.text_weight = text_weight
        self.k = rank_constant
        self.max_results = max_results
        self.logger = logging.getLogger(__name__)

    def rank_score(self, rank: int, weight: float) -> float:
        """Score contributed by a zero-based rank position"""
        return weight * (1.0 / (rank + self.k))

    def fuse_results(
        self,
        vector_results: List[Product],
        text_results: List[Product],
        max_results: int = None
    ) -> List[RankedCandidate]:
        """
        Fuse the vector and text branch results

        Args:
            vector_results: Vector branch products, best first
            text_results: Text branch products, best first
            max_results: Maximum number of candidates to return

        Returns:
            Candidates sorted by combined score, ties in first-seen order
        """
        max_results = self.max_results if max_results is None else max_results

        # Insertion order records first-seen position across vector then text
        candidates: Dict[str, RankedCandidate] = {}

        for rank, product in enumerate(vector_results):
            candidate = candidates.setdefault(product.id, RankedCandidate(product=product))
            # A repeated id within one branch keeps its best rank
            if candidate.vector_rank is None:
                candidate.vector_rank = rank
                candidate.vector_score = self.rank_score(rank, self.vector_weight)

        for rank, product in enumerate(text_results):
            candidate = candidates.setdefault(product.id, RankedCandidate(product=product))
            if candidate.text_rank is None:
                candidate.text_rank = rank
                candidate.text_score = self.rank_score(rank, self.text_weight)

        # sorted() is stable: equal scores keep first-seen order
        fused = sorted(candidates.values(), key=lambda c: c.combined_score, reverse=True)

        self.logger.info(f"RRF fusion completed: {len(fused)} unique products")
        return fused[:max_results]

    def get_fusion_stats(self, candidates: List[RankedCandidate]) -> Dict[str, Any]:
        """
        Get statistics about the fusion results

        Args:
            candidates: Fused candidates from fuse_results()

        Returns:
            Dictionary with fusion statistics
        """
        if not candidates:
            return {}

        consensus_count = sum(1 for c in candidates if len(c.found_in) > 1)
        vector_only = sum(1 for c in candidates if c.found_in == ['vector'])
        text_only = sum(1 for c in candidates if c.found_in == ['text'])

        return {
            'total_results': len(candidates),
            'consensus_items': consensus_count,
            'vector_only': vector_only,
            'text_only': text_only,
            'consensus_percentage': (consensus_count / len(candidates)) * 100,
            'top_score': candidates[0].combined_score,
            'rank_constant': self.k
        }
