"""Type definitions and data models for the Poloniex trading API."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

from .exceptions import ConfigurationError, ExchangeRejectedError

S = TypeVar("S")
T = TypeVar("T")

OrderNumber = int
CurrencyPair = str  # e.g. "BTC_ETH"
Currency = str  # e.g. "BTC"


class ShapeError(ValueError):
    """A decoded JSON value does not have the expected structure."""


@dataclass(frozen=True)
class Credentials:
    """API key and secret used to authenticate trading requests."""

    api_key: str
    secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("API key must be a non-empty string")
        if not isinstance(self.secret, str) or not self.secret:
            raise ConfigurationError("API secret must be a non-empty string")


@dataclass(frozen=True)
class ExchangeError:
    """Error reported by the exchange, e.g. ``Not enough BTC.``"""

    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "ExchangeError":
        data = _mapping(data, "error response")
        for key in ("error", "message"):
            message = data.get(key)
            if isinstance(message, str):
                return cls(message=message)
        raise ShapeError("error response has no 'error' or 'message' string")


@dataclass(frozen=True)
class Result(Generic[S]):
    """Outcome of one trading API call: a success payload or an exchange error."""

    value: S | None = None
    error: ExchangeError | None = None
    raw_response: Any = None
    command: str | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("Result must hold exactly one of value or error")

    @classmethod
    def ok(cls, value: S, raw_response: Any = None, command: str | None = None) -> "Result[S]":
        return cls(value=value, raw_response=raw_response, command=command)

    @classmethod
    def fail(
        cls, error: ExchangeError, raw_response: Any = None, command: str | None = None
    ) -> "Result[S]":
        return cls(error=error, raw_response=raw_response, command=command)

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> S:
        """Return the success value or raise ``ExchangeRejectedError``."""
        if self.error is not None:
            raise ExchangeRejectedError(
                self.error.message,
                command=self.command,
                details={"raw_response": self.raw_response},
            )
        return self.value  # type: ignore[return-value]


# ----------------------------------------------------------------------
# Field readers
# ----------------------------------------------------------------------
def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    # The exchange serialises empty objects as []
    if isinstance(value, list) and not value:
        return {}
    raise ShapeError(f"{what} must be a JSON object, got {type(value).__name__}")


def _list(value: Any, what: str) -> list[Any]:
    if isinstance(value, list):
        return value
    raise ShapeError(f"{what} must be a JSON array, got {type(value).__name__}")


def _field(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise ShapeError(f"missing field {key!r}")
    return data[key]


def parse_decimal(value: Any, what: str = "value") -> Decimal:
    if isinstance(value, bool):
        raise ShapeError(f"{what} must be a decimal, got bool")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ShapeError(f"{what} is not a decimal: {value!r}")
        if not result.is_finite():
            raise ShapeError(f"{what} must be finite, got {value!r}")
        return result
    raise ShapeError(f"{what} must be a decimal, got {type(value).__name__}")


def _dec(data: Mapping[str, Any], key: str) -> Decimal:
    return parse_decimal(_field(data, key), key)


def _str(data: Mapping[str, Any], key: str) -> str:
    value = _field(data, key)
    if not isinstance(value, str):
        raise ShapeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _parse_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ShapeError(f"{what} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.strip().lstrip("-").isdigit():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    raise ShapeError(f"{what} must be an integer, got {value!r}")


def _int(data: Mapping[str, Any], key: str) -> int:
    return _parse_int(_field(data, key), key)


def _flag(data: Mapping[str, Any], key: str) -> bool:
    value = _field(data, key)
    if isinstance(value, bool):
        return value
    return _parse_int(value, key) != 0


def _optional(
    reader: Callable[[Mapping[str, Any], str], T], data: Mapping[str, Any], key: str
) -> T | None:
    if data.get(key) is None:
        return None
    return reader(data, key)


def _rejection(data: Mapping[str, Any]) -> ExchangeError | None:
    """Return an error for ``{"success": 0, ...}`` acknowledgements."""
    if "success" in data and not _flag(data, "success"):
        message = data.get("message") or data.get("error") or "Request was not successful"
        return ExchangeError(message=str(message))
    return None


def decimal_map(data: Any, what: str = "balances") -> dict[str, Decimal]:
    return {key: parse_decimal(value, key) for key, value in _mapping(data, what).items()}


def string_map(data: Any, what: str = "addresses") -> dict[str, str]:
    result: dict[str, str] = {}
    for key, value in _mapping(data, what).items():
        if not isinstance(value, str):
            raise ShapeError(f"{what}[{key!r}] must be a string")
        result[key] = value
    return result


def nested_decimal_map(data: Any, what: str = "balances") -> dict[str, dict[str, Decimal]]:
    return {key: decimal_map(value, key) for key, value in _mapping(data, what).items()}


def list_of(parser: Callable[[Any], T], data: Any, what: str) -> list[T]:
    return [parser(item) for item in _list(data, what)]


def keyed(parser: Callable[[Any], T], data: Any, what: str) -> dict[str, T]:
    return {key: parser(value) for key, value in _mapping(data, what).items()}


def grouped(parser: Callable[[Any], T], data: Any, what: str) -> dict[str, list[T]]:
    return {key: list_of(parser, value, key) for key, value in _mapping(data, what).items()}


# ----------------------------------------------------------------------
# Balances and wallet
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class CompleteBalance:
    available: Decimal
    on_orders: Decimal
    btc_value: Decimal

    @classmethod
    def from_dict(cls, data: Any) -> "CompleteBalance":
        data = _mapping(data, "complete balance")
        return cls(
            available=_dec(data, "available"),
            on_orders=_dec(data, "onOrders"),
            btc_value=_dec(data, "btcValue"),
        )


@dataclass(frozen=True)
class NewAddress:
    address: str

    @classmethod
    def from_dict(cls, data: Any) -> "NewAddress | ExchangeError":
        data = _mapping(data, "new address")
        rejection = _rejection(data)
        if rejection is not None:
            return ExchangeError(message=str(data.get("response") or rejection.message))
        return cls(address=_str(data, "response"))


@dataclass(frozen=True)
class Deposit:
    currency: str
    address: str
    amount: Decimal
    confirmations: int
    txid: str
    timestamp: int
    status: str

    @classmethod
    def from_dict(cls, data: Any) -> "Deposit":
        data = _mapping(data, "deposit")
        return cls(
            currency=_str(data, "currency"),
            address=_str(data, "address"),
            amount=_dec(data, "amount"),
            confirmations=_int(data, "confirmations"),
            txid=_str(data, "txid"),
            timestamp=_int(data, "timestamp"),
            status=_str(data, "status"),
        )


@dataclass(frozen=True)
class WithdrawalRecord:
    withdrawal_number: int
    currency: str
    address: str
    amount: Decimal
    timestamp: int
    status: str
    ip_address: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "WithdrawalRecord":
        data = _mapping(data, "withdrawal")
        return cls(
            withdrawal_number=_int(data, "withdrawalNumber"),
            currency=_str(data, "currency"),
            address=_str(data, "address"),
            amount=_dec(data, "amount"),
            timestamp=_int(data, "timestamp"),
            status=_str(data, "status"),
            ip_address=_optional(_str, data, "ipAddress"),
        )


@dataclass(frozen=True)
class DepositsWithdrawals:
    deposits: list[Deposit]
    withdrawals: list[WithdrawalRecord]

    @classmethod
    def from_dict(cls, data: Any) -> "DepositsWithdrawals":
        data = _mapping(data, "deposits and withdrawals")
        return cls(
            deposits=list_of(Deposit.from_dict, _field(data, "deposits"), "deposits"),
            withdrawals=list_of(
                WithdrawalRecord.from_dict, _field(data, "withdrawals"), "withdrawals"
            ),
        )


@dataclass(frozen=True)
class Withdrawal:
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "Withdrawal":
        return cls(message=_str(_mapping(data, "withdrawal"), "response"))


@dataclass(frozen=True)
class TransferBalance:
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "TransferBalance | ExchangeError":
        data = _mapping(data, "transfer")
        return _rejection(data) or cls(message=_str(data, "message"))


@dataclass(frozen=True)
class FeeInfo:
    maker_fee: Decimal
    taker_fee: Decimal
    thirty_day_volume: Decimal
    next_tier: Decimal | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "FeeInfo":
        data = _mapping(data, "fee info")
        return cls(
            maker_fee=_dec(data, "makerFee"),
            taker_fee=_dec(data, "takerFee"),
            thirty_day_volume=_dec(data, "thirtyDayVolume"),
            next_tier=_optional(_dec, data, "nextTier"),
        )


# ----------------------------------------------------------------------
# Orders and trades
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class OpenOrder:
    order_number: OrderNumber
    type: str
    rate: Decimal
    amount: Decimal
    total: Decimal
    starting_amount: Decimal | None = None
    date: str | None = None
    margin: bool | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "OpenOrder":
        data = _mapping(data, "open order")
        return cls(
            order_number=_int(data, "orderNumber"),
            type=_str(data, "type"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            total=_dec(data, "total"),
            starting_amount=_optional(_dec, data, "startingAmount"),
            date=_optional(_str, data, "date"),
            margin=_optional(_flag, data, "margin"),
        )


@dataclass(frozen=True)
class OpenOrdersSingle:
    """Open orders of the one market that was requested."""

    orders: list[OpenOrder]

    @classmethod
    def from_json(cls, data: Any) -> "OpenOrdersSingle":
        return cls(orders=list_of(OpenOrder.from_dict, data, "open orders"))


@dataclass(frozen=True)
class OpenOrdersAll:
    """Open orders keyed by market."""

    orders: dict[CurrencyPair, list[OpenOrder]]

    @classmethod
    def from_json(cls, data: Any) -> "OpenOrdersAll":
        return cls(orders=grouped(OpenOrder.from_dict, data, "open orders"))


OpenOrders = OpenOrdersSingle | OpenOrdersAll


@dataclass(frozen=True)
class TradeHistoryEntry:
    global_trade_id: int
    trade_id: int
    date: str
    rate: Decimal
    amount: Decimal
    total: Decimal
    fee: Decimal
    order_number: OrderNumber
    type: str
    category: str

    @classmethod
    def from_dict(cls, data: Any) -> "TradeHistoryEntry":
        data = _mapping(data, "trade")
        return cls(
            global_trade_id=_int(data, "globalTradeID"),
            trade_id=_int(data, "tradeID"),
            date=_str(data, "date"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            total=_dec(data, "total"),
            fee=_dec(data, "fee"),
            order_number=_int(data, "orderNumber"),
            type=_str(data, "type"),
            category=_str(data, "category"),
        )


@dataclass(frozen=True)
class TradeHistorySingle:
    """Trades of the one market that was requested."""

    trades: list[TradeHistoryEntry]

    @classmethod
    def from_json(cls, data: Any) -> "TradeHistorySingle":
        return cls(trades=list_of(TradeHistoryEntry.from_dict, data, "trade history"))


@dataclass(frozen=True)
class TradeHistoryAll:
    """Trades keyed by market."""

    trades: dict[CurrencyPair, list[TradeHistoryEntry]]

    @classmethod
    def from_json(cls, data: Any) -> "TradeHistoryAll":
        return cls(trades=grouped(TradeHistoryEntry.from_dict, data, "trade history"))


TradeHistory = TradeHistorySingle | TradeHistoryAll


@dataclass(frozen=True)
class OrderTrade:
    global_trade_id: int
    trade_id: int
    currency_pair: CurrencyPair
    type: str
    rate: Decimal
    amount: Decimal
    total: Decimal
    fee: Decimal
    date: str

    @classmethod
    def from_dict(cls, data: Any) -> "OrderTrade":
        data = _mapping(data, "order trade")
        return cls(
            global_trade_id=_int(data, "globalTradeID"),
            trade_id=_int(data, "tradeID"),
            currency_pair=_str(data, "currencyPair"),
            type=_str(data, "type"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            total=_dec(data, "total"),
            fee=_dec(data, "fee"),
            date=_str(data, "date"),
        )


def parse_order_trades(data: Any) -> "list[OrderTrade] | ExchangeError":
    # Unknown orders come back as {"error": ...} with a success status
    if isinstance(data, Mapping) and "error" in data:
        return ExchangeError.from_dict(data)
    return list_of(OrderTrade.from_dict, data, "order trades")


@dataclass(frozen=True)
class OrderStatus:
    status: str
    rate: Decimal
    amount: Decimal
    currency_pair: CurrencyPair
    date: str
    total: Decimal
    type: str
    starting_amount: Decimal

    @classmethod
    def from_dict(cls, data: Any) -> "OrderStatus":
        data = _mapping(data, "order status")
        return cls(
            status=_str(data, "status"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            currency_pair=_str(data, "currencyPair"),
            date=_str(data, "date"),
            total=_dec(data, "total"),
            type=_str(data, "type"),
            starting_amount=_dec(data, "startingAmount"),
        )


def parse_order_status(data: Any) -> "dict[OrderNumber, OrderStatus] | ExchangeError":
    data = _mapping(data, "order status response")
    result = _mapping(_field(data, "result"), "result")
    if not _flag(data, "success"):
        return ExchangeError.from_dict(result)
    return {
        _parse_int(number, "orderNumber"): OrderStatus.from_dict(status)
        for number, status in result.items()
    }


@dataclass(frozen=True)
class ResultingTrade:
    trade_id: int
    type: str
    rate: Decimal
    amount: Decimal
    total: Decimal
    date: str

    @classmethod
    def from_dict(cls, data: Any) -> "ResultingTrade":
        data = _mapping(data, "resulting trade")
        return cls(
            trade_id=_int(data, "tradeID"),
            type=_str(data, "type"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            total=_dec(data, "total"),
            date=_str(data, "date"),
        )


@dataclass(frozen=True)
class OrderPlacement:
    """Outcome of a successful buy or sell."""

    order_number: OrderNumber
    resulting_trades: list[ResultingTrade]

    @classmethod
    def from_dict(cls, data: Any) -> "OrderPlacement":
        data = _mapping(data, "order placement")
        return cls(
            order_number=_int(data, "orderNumber"),
            resulting_trades=list_of(
                ResultingTrade.from_dict, data.get("resultingTrades", []), "resultingTrades"
            ),
        )


@dataclass(frozen=True)
class CancelOrder:
    message: str | None = None
    amount: Decimal | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "CancelOrder | ExchangeError":
        data = _mapping(data, "cancel order")
        return _rejection(data) or cls(
            message=_optional(_str, data, "message"),
            amount=_optional(_dec, data, "amount"),
        )


@dataclass(frozen=True)
class MoveOrder:
    order_number: OrderNumber
    resulting_trades: dict[CurrencyPair, list[ResultingTrade]]

    @classmethod
    def from_dict(cls, data: Any) -> "MoveOrder | ExchangeError":
        data = _mapping(data, "move order")
        return _rejection(data) or cls(
            order_number=_int(data, "orderNumber"),
            resulting_trades=grouped(
                ResultingTrade.from_dict, data.get("resultingTrades", {}), "resultingTrades"
            ),
        )


# ----------------------------------------------------------------------
# Margin trading
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class MarginAccountSummary:
    total_value: Decimal
    pl: Decimal
    lending_fees: Decimal
    net_value: Decimal
    total_borrowed_value: Decimal
    current_margin: Decimal

    @classmethod
    def from_dict(cls, data: Any) -> "MarginAccountSummary":
        data = _mapping(data, "margin account summary")
        return cls(
            total_value=_dec(data, "totalValue"),
            pl=_dec(data, "pl"),
            lending_fees=_dec(data, "lendingFees"),
            net_value=_dec(data, "netValue"),
            total_borrowed_value=_dec(data, "totalBorrowedValue"),
            current_margin=_dec(data, "currentMargin"),
        )


@dataclass(frozen=True)
class MarginOrder:
    order_number: OrderNumber
    message: str | None
    resulting_trades: dict[CurrencyPair, list[ResultingTrade]]

    @classmethod
    def from_dict(cls, data: Any) -> "MarginOrder | ExchangeError":
        data = _mapping(data, "margin order")
        return _rejection(data) or cls(
            order_number=_int(data, "orderNumber"),
            message=_optional(_str, data, "message"),
            resulting_trades=grouped(
                ResultingTrade.from_dict, data.get("resultingTrades", {}), "resultingTrades"
            ),
        )


@dataclass(frozen=True)
class MarginPosition:
    amount: Decimal
    total: Decimal
    base_price: Decimal
    liquidation_price: Decimal
    pl: Decimal
    lending_fees: Decimal
    type: str

    @classmethod
    def from_dict(cls, data: Any) -> "MarginPosition":
        data = _mapping(data, "margin position")
        return cls(
            amount=_dec(data, "amount"),
            total=_dec(data, "total"),
            base_price=_dec(data, "basePrice"),
            liquidation_price=_dec(data, "liquidationPrice"),
            pl=_dec(data, "pl"),
            lending_fees=_dec(data, "lendingFees"),
            type=_str(data, "type"),
        )

    @property
    def is_open(self) -> bool:
        return self.type != "none"


@dataclass(frozen=True)
class MarginPositionSingle:
    """Margin position in the one market that was requested."""

    position: MarginPosition

    @classmethod
    def from_json(cls, data: Any) -> "MarginPositionSingle":
        return cls(position=MarginPosition.from_dict(data))


@dataclass(frozen=True)
class MarginPositionAll:
    """Margin positions keyed by market."""

    positions: dict[CurrencyPair, MarginPosition]

    @classmethod
    def from_json(cls, data: Any) -> "MarginPositionAll":
        return cls(
            positions=keyed(MarginPosition.from_dict, data, "margin positions")
        )


MarginPositions = MarginPositionSingle | MarginPositionAll


@dataclass(frozen=True)
class CloseMarginPosition:
    message: str
    resulting_trades: dict[CurrencyPair, list[ResultingTrade]]

    @classmethod
    def from_dict(cls, data: Any) -> "CloseMarginPosition | ExchangeError":
        data = _mapping(data, "close margin position")
        return _rejection(data) or cls(
            message=_str(data, "message"),
            resulting_trades=grouped(
                ResultingTrade.from_dict, data.get("resultingTrades", {}), "resultingTrades"
            ),
        )


# ----------------------------------------------------------------------
# Lending
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Acknowledgement:
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "Acknowledgement | ExchangeError":
        data = _mapping(data, "acknowledgement")
        return _rejection(data) or cls(message=_str(data, "message"))


@dataclass(frozen=True)
class LoanOfferCreated:
    order_id: int
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "LoanOfferCreated | ExchangeError":
        data = _mapping(data, "loan offer")
        return _rejection(data) or cls(
            order_id=_int(data, "orderID"),
            message=_str(data, "message"),
        )


@dataclass(frozen=True)
class LoanOffer:
    id: int
    rate: Decimal
    amount: Decimal
    duration: int
    auto_renew: bool
    date: str

    @classmethod
    def from_dict(cls, data: Any) -> "LoanOffer":
        data = _mapping(data, "loan offer")
        return cls(
            id=_int(data, "id"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            duration=_int(data, "duration"),
            auto_renew=_flag(data, "autoRenew"),
            date=_str(data, "date"),
        )


@dataclass(frozen=True)
class ActiveLoan:
    id: int
    currency: Currency
    rate: Decimal
    amount: Decimal
    range: int
    auto_renew: bool
    date: str
    fees: Decimal

    @classmethod
    def from_dict(cls, data: Any) -> "ActiveLoan":
        data = _mapping(data, "active loan")
        return cls(
            id=_int(data, "id"),
            currency=_str(data, "currency"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            range=_int(data, "range"),
            auto_renew=_flag(data, "autoRenew"),
            date=_str(data, "date"),
            fees=_dec(data, "fees"),
        )


@dataclass(frozen=True)
class ActiveLoans:
    provided: list[ActiveLoan]
    used: list[ActiveLoan]

    @classmethod
    def from_dict(cls, data: Any) -> "ActiveLoans":
        data = _mapping(data, "active loans")
        return cls(
            provided=list_of(ActiveLoan.from_dict, data.get("provided", []), "provided"),
            used=list_of(ActiveLoan.from_dict, data.get("used", []), "used"),
        )


@dataclass(frozen=True)
class LendingHistoryEntry:
    id: int
    currency: Currency
    rate: Decimal
    amount: Decimal
    duration: Decimal
    interest: Decimal
    fee: Decimal
    earned: Decimal
    open: str
    close: str

    @classmethod
    def from_dict(cls, data: Any) -> "LendingHistoryEntry":
        data = _mapping(data, "lending history entry")
        return cls(
            id=_int(data, "id"),
            currency=_str(data, "currency"),
            rate=_dec(data, "rate"),
            amount=_dec(data, "amount"),
            duration=_dec(data, "duration"),
            interest=_dec(data, "interest"),
            fee=_dec(data, "fee"),
            earned=_dec(data, "earned"),
            open=_str(data, "open"),
            close=_str(data, "close"),
        )


@dataclass(frozen=True)
class AutoRenewToggle:
    auto_renew: bool

    @classmethod
    def from_dict(cls, data: Any) -> "AutoRenewToggle | ExchangeError":
        data = _mapping(data, "auto renew toggle")
        return _rejection(data) or cls(auto_renew=_flag(data, "message"))
