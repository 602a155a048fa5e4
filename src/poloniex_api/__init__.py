"""Poloniex trading API client.

This library provides an asynchronous Python interface to the Poloniex
private trading API: HMAC-SHA512 signed requests, typed responses and
exchange errors returned as data.
"""

from .base import TransportBase, TransportResponse
from .commands import COMMANDS, CommandSpec
from .constants import Account, Command, Strategy
from .core import HttpxTransport, TradingClient, TradingClientConfig
from .decoding import decode
from .exceptions import (
    ConfigurationError,
    DecodeError,
    ExchangeRejectedError,
    PoloniexError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)
from .request import SignedRequest, build_request
from .signing import sign
from .types import (
    CompleteBalance,
    Credentials,
    ExchangeError,
    MarginPositionAll,
    MarginPositionSingle,
    OpenOrdersAll,
    OpenOrdersSingle,
    OrderPlacement,
    Result,
    TradeHistoryAll,
    TradeHistorySingle,
)
from .utils import NonceGenerator, format_decimal

__version__ = "0.1.0"

__all__ = [
    # Client
    "TradingClient",
    "TradingClientConfig",
    "Credentials",
    # Transport
    "TransportBase",
    "TransportResponse",
    "HttpxTransport",
    # Protocol
    "sign",
    "build_request",
    "SignedRequest",
    "decode",
    "COMMANDS",
    "CommandSpec",
    "NonceGenerator",
    "format_decimal",
    # Types and enums
    "Command",
    "Account",
    "Strategy",
    "Result",
    "ExchangeError",
    "CompleteBalance",
    "OrderPlacement",
    "OpenOrdersSingle",
    "OpenOrdersAll",
    "TradeHistorySingle",
    "TradeHistoryAll",
    "MarginPositionSingle",
    "MarginPositionAll",
    # Exceptions
    "PoloniexError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "RequestTimeoutError",
    "DecodeError",
    "ExchangeRejectedError",
]
