"""
Portfolio Command Center Engine

Backend for the Portfolio Command Center dashboard:
- Trading 212 proxy with GBX -> GBP price normalization
- CoinGecko crypto prices and GBP/USD rate
- Anthropic chat proxy for the AI advisor
- Static front-end serving via FastAPI
"""

__version__ = "1.2.0"
__author__ = "Portfolio Command Center Team"

from portfolio_engine.config import Settings, get_settings

__all__ = ["__version__", "Settings", "get_settings"]
