"""Tests for utility functions."""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from poloniex_api.constants import Account
from poloniex_api.exceptions import ValidationError
from poloniex_api.utils import (
    NonceGenerator,
    format_decimal,
    normalize_account,
    normalize_currency,
    normalize_currency_pair,
    to_decimal,
    to_positive_decimal,
    to_unix_seconds,
    validate_limit,
    validate_order_number,
    validate_time_range,
)


class TestDecimalConversion:
    """Test monetary input coercion."""

    def test_decimal_passthrough(self):
        """Test Decimal values are returned unchanged."""
        value = Decimal("0.00000173")
        assert to_decimal(value) is value

    def test_int_and_string(self):
        """Test ints and decimal strings convert exactly."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal(" 0.1 ") == Decimal("0.1")

    def test_float_rejected(self):
        """Test binary floats are refused."""
        with pytest.raises(ValidationError) as excinfo:
            to_decimal(0.1, "rate")  # type: ignore[arg-type]
        assert excinfo.value.field == "rate"

    @pytest.mark.parametrize("value", [True, None, "abc", "Infinity", Decimal("NaN")])
    def test_invalid_values_rejected(self, value):
        """Test bools, garbage and non-finite values are refused."""
        with pytest.raises(ValidationError):
            to_decimal(value)

    @pytest.mark.parametrize("value", [0, "0", Decimal("-0.1")])
    def test_positive_required(self, value):
        """Test zero and negative amounts are refused."""
        with pytest.raises(ValidationError):
            to_positive_decimal(value, "amount")


class TestFormatDecimal:
    """Test canonical fixed-point rendering."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Decimal("1.50"), "1.5"),
            (Decimal("0.00000173"), "0.00000173"),
            (Decimal("1E-8"), "0.00000001"),
            (Decimal("1E+3"), "1000"),
            (Decimal("100"), "100"),
            (Decimal("2.000"), "2"),
            (Decimal("0.000"), "0"),
            (Decimal("-0"), "0"),
        ],
    )
    def test_format(self, value, expected):
        """Test no exponent and no trailing zeros."""
        assert format_decimal(value) == expected

    def test_non_finite_rejected(self):
        """Test NaN cannot be formatted."""
        with pytest.raises(ValidationError):
            format_decimal(Decimal("NaN"))


class TestNormalization:
    """Test market, currency and account normalization."""

    def test_pair_uppercased(self):
        assert normalize_currency_pair(" btc_eth ") == "BTC_ETH"

    @pytest.mark.parametrize("pair", ["BTCETH", "BTC-ETH", "_ETH", "BTC_", "", 42])
    def test_invalid_pair(self, pair):
        with pytest.raises(ValidationError) as excinfo:
            normalize_currency_pair(pair)
        assert excinfo.value.field == "currency_pair"

    def test_currency(self):
        assert normalize_currency("usdt") == "USDT"
        with pytest.raises(ValidationError):
            normalize_currency("BTC_ETH")

    def test_account(self):
        assert normalize_account(Account.MARGIN) == "margin"
        assert normalize_account("Lending") == "lending"

    def test_invalid_account_names_field(self):
        with pytest.raises(ValidationError) as excinfo:
            normalize_account("savings", "from_account")
        assert excinfo.value.field == "from_account"


class TestTimestamps:
    """Test timestamp conversion and range checks."""

    def test_aware_datetime(self):
        moment = datetime(2024, 1, 1, 1, tzinfo=timezone(timedelta(hours=1)))
        assert to_unix_seconds(moment) == 1704067200

    def test_naive_datetime_is_utc(self):
        assert to_unix_seconds(datetime(2024, 1, 1)) == 1704067200

    def test_int_seconds(self):
        assert to_unix_seconds(1410158341) == 1410158341

    @pytest.mark.parametrize("value", [-1, "1410158341", 1.5, True])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            to_unix_seconds(value, "start")

    def test_datetime_before_epoch(self):
        with pytest.raises(ValidationError) as excinfo:
            to_unix_seconds(datetime(1969, 12, 31, 23, 59), "start")
        assert excinfo.value.field == "start"

    def test_range(self):
        validate_time_range(100, 100)
        validate_time_range(None, 5)
        with pytest.raises(ValidationError):
            validate_time_range(200, 100)


class TestLimits:
    """Test row limit and order number validation."""

    @pytest.mark.parametrize("limit", [1, 500, 10_000])
    def test_within_bounds(self, limit):
        assert validate_limit(limit) == limit

    @pytest.mark.parametrize("limit", [0, -5, 10_001, True, "10"])
    def test_out_of_bounds(self, limit):
        with pytest.raises(ValidationError) as excinfo:
            validate_limit(limit)
        assert excinfo.value.field == "limit"

    def test_no_maximum(self):
        assert validate_limit(50_000, maximum=None) == 50_000

    def test_order_number(self):
        assert validate_order_number(0) == 0
        with pytest.raises(ValidationError):
            validate_order_number(-1)
        with pytest.raises(ValidationError):
            validate_order_number("120466")  # type: ignore[arg-type]


class TestNonceGenerator:
    """Test nonce monotonicity."""

    def test_uses_clock_milliseconds(self):
        nonces = NonceGenerator(clock=lambda: 1700000000.123)
        assert nonces.next() == 1700000000123

    def test_increments_when_clock_stalls(self):
        nonces = NonceGenerator(clock=lambda: 1.0)
        assert [nonces.next() for _ in range(3)] == [1000, 1001, 1002]
        assert nonces.last == 1002

    def test_never_goes_backwards(self):
        ticks = iter([5.0, 4.0, 6.0])
        nonces = NonceGenerator(clock=lambda: next(ticks))
        assert [nonces.next() for _ in range(3)] == [5000, 5001, 6000]

    def test_unique_across_threads(self):
        nonces = NonceGenerator(clock=lambda: 1.0)
        seen: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            batch = [nonces.next() for _ in range(200)]
            with lock:
                seen.extend(batch)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(seen)) == 1600
        assert max(seen) == 1000 + 1599
