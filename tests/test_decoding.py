"""Tests for response decoding strategies."""

import json
from decimal import Decimal

import pytest

from poloniex_api.commands import COMMANDS
from poloniex_api.constants import Command
from poloniex_api.decoding import decode, parse_json
from poloniex_api.exceptions import DecodeError
from poloniex_api.types import (
    ExchangeError,
    OpenOrdersAll,
    OpenOrdersSingle,
    OrderPlacement,
    TradeHistoryAll,
    TradeHistorySingle,
)

OPEN_ORDER = {
    "orderNumber": "120466",
    "type": "sell",
    "rate": "0.025",
    "amount": "100",
    "total": "2.5",
}

TRADE = {
    "globalTradeID": 25129732,
    "tradeID": "6325758",
    "date": "2016-04-05 08:08:40",
    "rate": "0.02565498",
    "amount": "0.10000000",
    "total": "0.00256549",
    "fee": "0.00200000",
    "orderNumber": "34225313575",
    "type": "sell",
    "category": "exchange",
}


def _body(payload) -> bytes:
    return json.dumps(payload).encode()


class TestStatusDiscriminated:
    """Test the default strategy where the HTTP status selects the shape."""

    def test_success_status_decodes_balances(self):
        result = decode(200, b'{"BTC":"1.0"}', COMMANDS[Command.RETURN_BALANCES])

        assert result.success
        assert result.value == {"BTC": Decimal("1.0")}
        assert result.error is None
        assert result.command == "returnBalances"

    def test_error_status_decodes_error(self):
        result = decode(403, b'{"error":"Invalid API key"}', COMMANDS[Command.RETURN_BALANCES])

        assert not result.success
        assert result.value is None
        assert result.error == ExchangeError(message="Invalid API key")
        assert result.raw_response == {"error": "Invalid API key"}

    def test_error_shape_accepts_message_field(self):
        result = decode(422, b'{"message":"Nonce must be greater"}', COMMANDS[Command.SELL])
        assert result.error == ExchangeError(message="Nonce must be greater")

    def test_error_field_in_success_status_is_not_sniffed(self):
        """Status strategy parses 2xx bodies as the success shape only."""
        with pytest.raises(DecodeError):
            decode(200, b'{"error":"Invalid API key"}', COMMANDS[Command.RETURN_FEE_INFO])

    def test_error_status_without_error_shape_raises(self):
        with pytest.raises(DecodeError) as excinfo:
            decode(500, b'{"unexpected": true}', COMMANDS[Command.RETURN_BALANCES])
        assert excinfo.value.raw_body == b'{"unexpected": true}'

    def test_acknowledgement_with_success_zero_is_error(self):
        body = _body({"success": 0, "message": "Transfer failed."})
        result = decode(200, body, COMMANDS[Command.TRANSFER_BALANCE])
        assert result.error == ExchangeError(message="Transfer failed.")


class TestBodyDiscriminated:
    """Test order placement where errors arrive inside a 200 body."""

    def test_error_in_success_status(self):
        result = decode(200, b'{"error":"Not enough funds"}', COMMANDS[Command.BUY])

        assert not result.success
        assert result.error.message == "Not enough funds"

    def test_success_body(self):
        body = _body(
            {
                "orderNumber": 31226040,
                "resultingTrades": [
                    {
                        "amount": "338.8732",
                        "date": "2014-10-18 23:03:21",
                        "rate": "0.00000173",
                        "total": "0.00058625",
                        "tradeID": "16164",
                        "type": "buy",
                    }
                ],
            }
        )
        result = decode(200, body, COMMANDS[Command.SELL])

        assert isinstance(result.value, OrderPlacement)
        assert result.value.order_number == 31226040
        trade = result.value.resulting_trades[0]
        assert trade.trade_id == 16164
        assert trade.rate == Decimal("0.00000173")

    def test_error_status_without_error_field(self):
        result = decode(400, b'{"message":"Bad request"}', COMMANDS[Command.BUY])
        assert result.error.message == "Bad request"


class TestFilterDiscriminated:
    """Test shape selection from the request's market filter."""

    def test_unfiltered_decodes_mapping(self):
        body = _body({"BTC_XCP": [OPEN_ORDER], "BTC_ETH": []})
        result = decode(200, body, COMMANDS[Command.RETURN_OPEN_ORDERS], filtered=False)

        assert isinstance(result.value, OpenOrdersAll)
        assert set(result.value.orders) == {"BTC_XCP", "BTC_ETH"}
        assert result.value.orders["BTC_XCP"][0].order_number == 120466

    def test_filtered_decodes_sequence(self):
        body = _body([OPEN_ORDER])
        result = decode(200, body, COMMANDS[Command.RETURN_OPEN_ORDERS], filtered=True)

        assert isinstance(result.value, OpenOrdersSingle)
        assert result.value.orders[0].rate == Decimal("0.025")

    def test_filtered_request_does_not_accept_mapping(self):
        """The requested shape wins; the body is not inspected to pick one."""
        body = _body({"BTC_XCP": [OPEN_ORDER]})
        with pytest.raises(DecodeError):
            decode(200, body, COMMANDS[Command.RETURN_OPEN_ORDERS], filtered=True)

    def test_empty_array_for_all_markets(self):
        result = decode(200, b"[]", COMMANDS[Command.RETURN_OPEN_ORDERS], filtered=False)
        assert result.value == OpenOrdersAll(orders={})

    def test_trade_history_shapes(self):
        spec = COMMANDS[Command.RETURN_TRADE_HISTORY]

        single = decode(200, _body([TRADE]), spec, filtered=True)
        every = decode(200, _body({"BTC_NXT": [TRADE]}), spec, filtered=False)

        assert isinstance(single.value, TradeHistorySingle)
        assert isinstance(every.value, TradeHistoryAll)
        assert every.value.trades["BTC_NXT"][0] == single.value.trades[0]
        assert single.value.trades[0].order_number == 34225313575

    def test_missing_filter_flag_is_programmer_error(self):
        with pytest.raises(ValueError):
            decode(200, b"[]", COMMANDS[Command.RETURN_OPEN_ORDERS])


class TestDecodeFailures:
    """Test failures surface as DecodeError with the raw body."""

    def test_malformed_json(self):
        with pytest.raises(DecodeError) as excinfo:
            decode(200, b"<html>oops</html>", COMMANDS[Command.RETURN_BALANCES])

        assert excinfo.value.raw_body == b"<html>oops</html>"
        assert excinfo.value.detail

    def test_empty_body(self):
        with pytest.raises(DecodeError):
            decode(200, b"", COMMANDS[Command.RETURN_BALANCES])

    def test_missing_required_field(self):
        body = _body({"makerFee": "0.001", "takerFee": "0.002"})
        with pytest.raises(DecodeError) as excinfo:
            decode(200, body, COMMANDS[Command.RETURN_FEE_INFO])

        assert "thirtyDayVolume" in excinfo.value.detail
        assert excinfo.value.details["command"] == "returnFeeInfo"

    def test_type_mismatch(self):
        with pytest.raises(DecodeError):
            decode(200, b'{"BTC": ["1.0"]}', COMMANDS[Command.RETURN_BALANCES])

    def test_invalid_decimal(self):
        with pytest.raises(DecodeError):
            decode(200, b'{"BTC": "one"}', COMMANDS[Command.RETURN_BALANCES])

    @pytest.mark.parametrize("amount", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_non_finite_decimal(self, amount):
        body = _body({"BTC": amount})
        with pytest.raises(DecodeError):
            decode(200, body, COMMANDS[Command.RETURN_BALANCES])

    def test_non_ascii_digits_in_integer_field(self):
        body = _body({"orderNumber": "\u00b2", "resultingTrades": []})
        with pytest.raises(DecodeError) as excinfo:
            decode(200, body, COMMANDS[Command.BUY])
        assert "orderNumber" in excinfo.value.detail


def test_json_numbers_become_decimals() -> None:
    assert parse_json(b'{"rate": 0.1}') == {"rate": Decimal("0.1")}


def test_numeric_balances_keep_precision() -> None:
    result = decode(200, b'{"BTC": 0.30000000000000004}', COMMANDS[Command.RETURN_BALANCES])
    assert result.value["BTC"] == Decimal("0.30000000000000004")


def test_order_status_rejection() -> None:
    body = _body(
        {
            "result": {"error": "Order not found, or you are not the person who placed it."},
            "success": 0,
        }
    )
    result = decode(200, body, COMMANDS[Command.RETURN_ORDER_STATUS])
    assert result.error.message.startswith("Order not found")


def test_order_status_success() -> None:
    body = _body(
        {
            "result": {
                "6071071": {
                    "status": "Open",
                    "rate": "0.40000000",
                    "amount": "1.00000000",
                    "currencyPair": "BTC_ETH",
                    "date": "2018-10-17 17:04:50",
                    "total": "0.40000000",
                    "type": "buy",
                    "startingAmount": "1.00000",
                }
            },
            "success": 1,
        }
    )
    result = decode(200, body, COMMANDS[Command.RETURN_ORDER_STATUS])
    assert result.value[6071071].currency_pair == "BTC_ETH"
