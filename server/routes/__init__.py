"""API routes package."""

from server.routes.chunk_routes import router as chunk_router

__all__ = ["chunk_router"]
