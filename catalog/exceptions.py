"""
Catalog and search exceptions

Errors raised by the embedding provider, the catalog store and the search
facade. The HTTP layer maps NotFound and InvalidRequest to distinct
responses; everything else surfaces as an internal error.
"""


class CatalogError(Exception):
    """Base exception for all catalog and search errors"""
    pass


class EmbeddingUnavailable(CatalogError):
    """Raised when the embedding model fails to produce a query vector"""
    pass


class StoreUnavailable(CatalogError):
    """Raised when the catalog store cannot be reached"""
    pass


class NotFound(CatalogError):
    """Raised when a product id does not exist in the catalog"""
    pass


class InvalidRequest(CatalogError):
    """Raised when a search request is malformed"""
    pass
