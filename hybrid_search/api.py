"""
HTTP API for grocery product search
Serves the voice assistant's product tool calls over GET /api/products
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.config import CatalogConfig, setup_logging
from catalog.exceptions import NotFound, InvalidRequest
from catalog.models import Product, SearchRequest
from catalog.product_catalog import ProductCatalog
from catalog.product_embedder import ProductEmbedder
from .hybrid_searcher import HybridSearcher
from .search_service import ProductSearchService

logger = logging.getLogger(__name__)


def create_app(service: ProductSearchService, config: Optional[CatalogConfig] = None) -> FastAPI:
    """Build the FastAPI application around a search service"""
    config = config or CatalogConfig()

    app = FastAPI(title="Voice Grocery Product Search")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/products")
    def get_products(
        query: Optional[str] = None,
        category: Optional[str] = None,
        product_id: Optional[str] = Query(None, alias="productId"),
        random: Optional[str] = None,
    ):
        request = SearchRequest(
            query=query,
            category=category,
            product_id=product_id,
            random=random == "true",
        )

        try:
            result = service.get_products(request)
        except NotFound:
            return JSONResponse(status_code=404, content={"error": "Product not found"})
        except InvalidRequest as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception as e:
            logger.exception(f"Products API Error: {e}")
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

        if isinstance(result, Product):
            return result.to_dict()
        return [product.to_dict() for product in result]

    return app


def build_service(config: CatalogConfig) -> ProductSearchService:
    """Wire the catalog, embedder and hybrid searcher from configuration"""
    catalog = ProductCatalog.from_config(config)
    embedder = ProductEmbedder(config)
    hybrid_searcher = HybridSearcher(config, catalog, embedder)
    return ProductSearchService(config, catalog, hybrid_searcher)


def main():
    config = CatalogConfig.from_env()
    setup_logging(config.log_level, config.log_file)

    app = create_app(build_service(config), config)
    logger.info(f"Server is running on port {config.api_port}")
    uvicorn.run(app, host=config.api_host, port=config.api_port)


if __name__ == "__main__":
    main()
