"""
Demo script for grocery hybrid search
Runs a few shopper queries through the search facade and prints the fused rankings
"""

import sys
import logging
from typing import List

from catalog.config import CatalogConfig, setup_logging
from catalog.models import RankedCandidate, SearchRequest
from hybrid_search.api import build_service

TEST_QUERIES = [
    "milk",
    "something for breakfast",
    "fresh fruit",
    "pasta sauce",
]
TEST_CATEGORY = "Dairy"


def format_results_for_display(candidates: List[RankedCandidate]) -> str:
    """Format fused candidates for display"""
    if not candidates:
        return "No results found."

    output = [f"\nFound {len(candidates)} hybrid search results:", "=" * 80]

    for position, candidate in enumerate(candidates, 1):
        product = candidate.product
        sources = "/".join(candidate.found_in).upper()
        output.append(f"\n#{position} {product.emoji} {product.title} [{sources}]")
        output.append(
            f"   score {candidate.combined_score:.5f} "
            f"(vector {candidate.vector_score:.5f}, text {candidate.text_score:.5f})"
        )
        output.append(f"   {product.category} | ${product.price:.2f}")

    output.append("\n" + "=" * 80)
    return "\n".join(output)


def main():
    config = CatalogConfig.from_env()
    setup_logging(config.log_level, config.log_file)
    logger = logging.getLogger(__name__)

    service = build_service(config)
    if not service.hybrid_searcher.test_connection():
        print("ERROR: Catalog store is not reachable")
        sys.exit(1)

    for query in TEST_QUERIES:
        print(f"\nQuery: '{query}'")
        candidates = service.hybrid_searcher.rank(query)
        print(format_results_for_display(candidates))

        stats = service.hybrid_searcher.fusion.get_fusion_stats(candidates)
        if stats:
            print(
                f"Consensus items: {stats['consensus_items']}/{stats['total_results']} "
                f"({stats['consensus_percentage']:.1f}%), vector only: {stats['vector_only']}, "
                f"text only: {stats['text_only']}"
            )

    print(f"\nCategory: '{TEST_CATEGORY}'")
    products = service.get_products(SearchRequest(category=TEST_CATEGORY))
    for product in products:
        print(f"  {product.emoji} {product.title} (${product.price:.2f})")

    random_pick = service.get_products(SearchRequest(random=True))
    print(f"\nRandom picks: {', '.join(p.title for p in random_pick)}")
    logger.info("Demo completed")


if __name__ == "__main__":
    main()
