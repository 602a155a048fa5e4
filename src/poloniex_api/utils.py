"""Utility functions for the Poloniex trading API client."""

import re
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from .constants import MAX_TRADE_HISTORY_LIMIT, Account
from .exceptions import ValidationError

_PAIR_RE = re.compile(r"^[A-Z0-9]+_[A-Z0-9]+$")
_CURRENCY_RE = re.compile(r"^[A-Z0-9]+$")


def to_decimal(value: Decimal | int | str, field: str = "value") -> Decimal:
    """Coerce a monetary input to ``Decimal`` without passing through binary floats."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(
            f"{field} must be a Decimal, int or decimal string, not {type(value).__name__}",
            field=field,
            value=value,
        )

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{field} is not a decimal number", field=field, value=value)
    else:
        raise ValidationError(
            f"Unsupported type for {field}: {type(value).__name__}", field=field, value=value
        )

    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field=field, value=value)

    return result


def to_positive_decimal(value: Decimal | int | str, field: str = "value") -> Decimal:
    """Coerce to ``Decimal`` and require a strictly positive value."""
    result = to_decimal(value, field)
    if result <= 0:
        raise ValidationError(f"{field} must be positive", field=field, value=value)
    return result


def format_decimal(value: Decimal) -> str:
    """Render a decimal as fixed-point text with no exponent and no trailing zeros."""
    if not value.is_finite():
        raise ValidationError("Cannot format a non-finite decimal", field="value", value=value)

    token = format(value, "f")
    if "." in token:
        token = token.rstrip("0").rstrip(".")
    if token in ("", "-0"):
        return "0"
    return token


def normalize_currency_pair(pair: str) -> str:
    """Normalize a market identifier such as ``btc_eth`` to ``BTC_ETH``."""
    if not isinstance(pair, str):
        raise ValidationError("Currency pair must be a string", field="currency_pair", value=pair)

    normalized = pair.strip().upper()
    if not _PAIR_RE.match(normalized):
        raise ValidationError(
            f"Invalid currency pair: {pair!r}. Expected BASE_QUOTE, e.g. BTC_ETH",
            field="currency_pair",
            value=pair,
        )
    return normalized


def normalize_currency(currency: str) -> str:
    """Normalize a currency code such as ``btc`` to ``BTC``."""
    if not isinstance(currency, str):
        raise ValidationError("Currency must be a string", field="currency", value=currency)

    normalized = currency.strip().upper()
    if not _CURRENCY_RE.match(normalized):
        raise ValidationError(f"Invalid currency: {currency!r}", field="currency", value=currency)
    return normalized


def normalize_account(account: Account | str, field: str = "account") -> str:
    """Return the wire name of an account, accepting ``Account`` members or strings."""
    try:
        return Account(account.lower() if isinstance(account, str) else account).value
    except (ValueError, AttributeError):
        allowed = ", ".join(member.value for member in Account)
        raise ValidationError(
            f"Invalid {field}: {account!r}. Must be one of {allowed}", field=field, value=account
        )


def to_unix_seconds(value: datetime | int, field: str = "timestamp") -> int:
    """Convert a datetime (naive values are UTC) or integer seconds to UNIX seconds."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        seconds = int(value.timestamp())
    elif isinstance(value, int) and not isinstance(value, bool):
        seconds = value
    else:
        raise ValidationError(
            f"{field} must be a datetime or integer UNIX seconds", field=field, value=value
        )

    if seconds < 0:
        raise ValidationError(f"{field} cannot be before 1970", field=field, value=value)
    return seconds


def validate_time_range(start: int | None, end: int | None) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError(
            "end must not be earlier than start",
            field="end",
            value=end,
            details={"start": start},
        )


def validate_limit(limit: int, maximum: int | None = MAX_TRADE_HISTORY_LIMIT) -> int:
    """Validate a row limit against the exchange maximum, if there is one."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError("limit must be an integer", field="limit", value=limit)
    if limit < 1:
        raise ValidationError("limit must be at least 1", field="limit", value=limit)
    if maximum is not None and limit > maximum:
        raise ValidationError(
            f"limit cannot exceed {maximum}", field="limit", value=limit, details={"max": maximum}
        )
    return limit


def validate_order_number(order_number: int) -> int:
    if isinstance(order_number, bool) or not isinstance(order_number, int) or order_number < 0:
        raise ValidationError(
            "Order number must be a non-negative integer",
            field="order_number",
            value=order_number,
        )
    return order_number


class NonceGenerator:
    """Strictly increasing nonces seeded from wall-clock milliseconds.

    Shared by every request of one client, so concurrent calls never reuse or
    reorder a nonce even when the clock has not advanced between them.
    """

    def __init__(self, clock=time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> int:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last = max(now_ms, self._last + 1)
            return self._last

    @property
    def last(self) -> int:
        return self._last
