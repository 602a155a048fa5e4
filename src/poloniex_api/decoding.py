"""Decoding of trading API responses into ``Result`` values."""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from .commands import CommandSpec
from .constants import Strategy
from .exceptions import DecodeError
from .types import ExchangeError, Result, ShapeError


def parse_json(raw_body: bytes) -> Any:
    """Parse a response body, keeping every JSON number with a fraction as ``Decimal``."""
    try:
        return json.loads(raw_body, parse_float=Decimal)
    except ValueError as exc:
        raise DecodeError(
            "Response body is not valid JSON",
            raw_body=raw_body,
            detail=str(exc),
        ) from exc


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def _routes_to_error(status_code: int, data: Any, strategy: Strategy) -> bool:
    if not is_success_status(status_code):
        return True
    # Order placement reports rejections inside a 200 body
    return strategy is Strategy.BODY and isinstance(data, Mapping) and "error" in data


def decode(
    status_code: int,
    raw_body: bytes,
    spec: CommandSpec,
    *,
    filtered: bool | None = None,
) -> Result[Any]:
    """Decode one response according to its command entry.

    Args:
        status_code: HTTP status returned by the transport
        raw_body: Undecoded response body
        spec: Command entry naming the strategy and success parser(s)
        filtered: Whether a market filter was sent; required for commands whose
            success shape depends on it

    Returns:
        ``Result`` holding the parsed success value or the exchange's error

    Raises:
        DecodeError: If the body is not JSON or does not match the selected shape
        ValueError: If ``filtered`` is omitted for a filter-discriminated command
    """
    parser = spec.parser_for(filtered)
    data = parse_json(raw_body)
    command = spec.command.value

    try:
        if _routes_to_error(status_code, data, spec.strategy):
            return Result.fail(ExchangeError.from_dict(data), raw_response=data, command=command)
        value = parser(data)
    except ShapeError as exc:
        raise DecodeError(
            f"Unexpected {command} response shape (HTTP {status_code})",
            raw_body=raw_body,
            detail=str(exc),
            details={"command": command, "status_code": status_code},
        ) from exc

    if isinstance(value, ExchangeError):
        return Result.fail(value, raw_response=data, command=command)
    return Result.ok(value, raw_response=data, command=command)
