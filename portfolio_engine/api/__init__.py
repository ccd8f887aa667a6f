"""
FastAPI route modules for the engine.
"""

from portfolio_engine.api.ai_routes import router as ai_router
from portfolio_engine.api.crypto_routes import router as crypto_router
from portfolio_engine.api.t212_routes import router as t212_router

__all__ = ["ai_router", "crypto_router", "t212_router"]
