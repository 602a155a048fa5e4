"""Trading client, configuration and default transport."""

from .client import TradingClient
from .config import TradingClientConfig
from .connections import HttpxTransport

__all__ = ["TradingClient", "TradingClientConfig", "HttpxTransport"]
