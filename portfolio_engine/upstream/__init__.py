"""
Upstream API clients.

Provides:
- Trading212Client: brokerage positions, cash and instrument metadata
- CoinGeckoClient: crypto spot prices and GBP/USD rate
- AnthropicChatClient: AI advisor chat
- Error taxonomy shared by all three
"""

from portfolio_engine.upstream.chat import AnthropicChatClient
from portfolio_engine.upstream.coingecko import CoinGeckoClient
from portfolio_engine.upstream.errors import (
    ConfigurationMissing,
    NetworkError,
    UpstreamClientError,
    UpstreamError,
)
from portfolio_engine.upstream.trading212 import Trading212Client

__all__ = [
    "AnthropicChatClient",
    "CoinGeckoClient",
    "ConfigurationMissing",
    "NetworkError",
    "Trading212Client",
    "UpstreamClientError",
    "UpstreamError",
]
