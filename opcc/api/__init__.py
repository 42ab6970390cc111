from opcc.api.collection import router as collection_router
from opcc.api.health import router as health_router
from opcc.api.search import router as search_router

__all__ = [
    "collection_router",
    "health_router",
    "search_router",
]
