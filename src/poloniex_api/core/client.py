"""Asynchronous client for the Poloniex trading API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from ..base import TransportBase
from ..commands import get_spec
from ..constants import ALL_MARKETS, DEFAULT_REQUEST_TIMEOUT, Account, Command
from ..decoding import decode
from ..exceptions import DecodeError, RequestTimeoutError, ValidationError
from ..request import build_request
from ..types import (
    Acknowledgement,
    ActiveLoans,
    AutoRenewToggle,
    CancelOrder,
    CloseMarginPosition,
    CompleteBalance,
    DepositsWithdrawals,
    FeeInfo,
    LendingHistoryEntry,
    LoanOffer,
    LoanOfferCreated,
    MarginAccountSummary,
    MarginOrder,
    MarginPositions,
    MoveOrder,
    NewAddress,
    OpenOrders,
    OrderPlacement,
    OrderStatus,
    OrderTrade,
    Result,
    TradeHistory,
    TransferBalance,
    Withdrawal,
)
from ..utils import (
    NonceGenerator,
    format_decimal,
    normalize_account,
    normalize_currency,
    normalize_currency_pair,
    to_positive_decimal,
    to_unix_seconds,
    validate_limit,
    validate_order_number,
    validate_time_range,
)
from .config import TradingClientConfig
from .connections import HttpxTransport

logger = logging.getLogger(__name__)

Amount = Decimal | int | str
Timestamp = datetime | int


def _market_filter(currency_pair: str | None) -> tuple[str, bool]:
    """Return the ``currencyPair`` value and whether a single market was requested."""
    if currency_pair is None:
        return ALL_MARKETS, False
    return normalize_currency_pair(currency_pair), True


def _time_range(start: Timestamp | None, end: Timestamp | None) -> dict[str, str]:
    start_s = to_unix_seconds(start, "start") if start is not None else None
    end_s = to_unix_seconds(end, "end") if end is not None else None
    validate_time_range(start_s, end_s)

    params: dict[str, str] = {}
    if start_s is not None:
        params["start"] = str(start_s)
    if end_s is not None:
        params["end"] = str(end_s)
    return params


def _order_flags(**flags: bool) -> dict[str, str]:
    chosen = [name for name, enabled in flags.items() if enabled]
    if len(chosen) > 1:
        raise ValidationError(
            f"Order flags are mutually exclusive, got {', '.join(chosen)}",
            field="flags",
            value=chosen,
        )
    return {name: "1" for name in chosen}


def _account_filter(account: Account | str | None) -> dict[str, str]:
    if account is None:
        return {}
    if isinstance(account, str) and account.lower() == "all":
        return {"account": "all"}
    return {"account": normalize_account(account)}


class TradingClient:
    """Signed access to the private trading API.

    Every command method is a coroutine returning a ``Result``. Errors reported
    by the exchange come back as ``Result.error``; invalid arguments raise
    ``ValidationError`` before any request is sent, and transport, timeout and
    decoding failures raise.
    """

    def __init__(
        self,
        api_key: str,
        secret: str,
        *,
        base_url: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: TransportBase | None = None,
        nonce_generator: NonceGenerator | None = None,
    ) -> None:
        self._config = TradingClientConfig(
            api_key=api_key,
            secret=secret,
            base_url=base_url,
            request_timeout=request_timeout,
        )
        self._credentials = self._config.credentials
        self._transport = transport or HttpxTransport()
        self._owns_transport = transport is None
        self._nonces = nonce_generator or NonceGenerator()

    @classmethod
    def from_config(
        cls, config: TradingClientConfig, *, transport: TransportBase | None = None
    ) -> TradingClient:
        return cls(
            config.api_key,
            config.secret,
            base_url=config.base_url,
            request_timeout=config.request_timeout,
            transport=transport,
        )

    @classmethod
    def from_env(
        cls, dotenv_path: str | Path | None = None, *, transport: TransportBase | None = None
    ) -> TradingClient:
        return cls.from_config(TradingClientConfig.from_env(dotenv_path), transport=transport)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def __aenter__(self) -> TradingClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    @property
    def config(self) -> TradingClientConfig:
        return self._config

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    async def _dispatch(
        self,
        command: Command,
        params: Mapping[str, str] | None = None,
        *,
        filtered: bool | None = None,
    ) -> Result[Any]:
        spec = get_spec(command)
        request = build_request(command, params or {}, self._nonces.next(), self._credentials)
        url = self._config.resolved_url()
        timeout = self._config.request_timeout

        logger.debug("Dispatching %s (nonce=%s)", command.value, request.nonce)
        try:
            response = await asyncio.wait_for(
                self._transport.post(url, request.header_items(), request.body, timeout),
                timeout=timeout,
            )
        except RequestTimeoutError:
            raise
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(
                f"{command.value} got no response within {timeout}s",
                endpoint=url,
                timeout=timeout,
            ) from exc

        try:
            result = decode(response.status_code, response.body, spec, filtered=filtered)
        except DecodeError as exc:
            logger.error(
                "Failed to decode %s response (HTTP %s): %s",
                command.value,
                response.status_code,
                exc.detail,
            )
            raise

        if not result.success:
            logger.warning("%s rejected by exchange: %s", command.value, result.error.message)
        return result

    # ------------------------------------------------------------------
    # Balances and wallet
    # ------------------------------------------------------------------
    async def return_balances(self) -> Result[dict[str, Decimal]]:
        """Available balance per currency in the exchange account."""
        return await self._dispatch(Command.RETURN_BALANCES)

    async def return_complete_balances(
        self, account: Account | str | None = None
    ) -> Result[dict[str, CompleteBalance]]:
        """Available, on-order and BTC-valued balances per currency.

        Pass ``account="all"`` to include margin and lending accounts.
        """
        return await self._dispatch(Command.RETURN_COMPLETE_BALANCES, _account_filter(account))

    async def return_deposit_addresses(self) -> Result[dict[str, str]]:
        return await self._dispatch(Command.RETURN_DEPOSIT_ADDRESSES)

    async def generate_new_address(self, currency: str) -> Result[NewAddress]:
        params = {"currency": normalize_currency(currency)}
        return await self._dispatch(Command.GENERATE_NEW_ADDRESS, params)

    async def return_deposits_withdrawals(
        self, start: Timestamp | None = None, end: Timestamp | None = None
    ) -> Result[DepositsWithdrawals]:
        return await self._dispatch(Command.RETURN_DEPOSITS_WITHDRAWALS, _time_range(start, end))

    async def withdraw(
        self,
        currency: str,
        amount: Amount,
        address: str,
        payment_id: str | None = None,
    ) -> Result[Withdrawal]:
        """Withdraw immediately, without email confirmation.

        The API key needs the withdrawal privilege.
        """
        if not isinstance(address, str) or not address.strip():
            raise ValidationError(
                "address must be a non-empty string", field="address", value=address
            )

        params = {
            "currency": normalize_currency(currency),
            "amount": format_decimal(to_positive_decimal(amount, "amount")),
            "address": address.strip(),
        }
        if payment_id:
            params["paymentId"] = payment_id
        return await self._dispatch(Command.WITHDRAW, params)

    async def return_fee_info(self) -> Result[FeeInfo]:
        return await self._dispatch(Command.RETURN_FEE_INFO)

    async def return_available_account_balances(
        self, account: Account | str | None = None
    ) -> Result[dict[str, dict[str, Decimal]]]:
        params = {"account": normalize_account(account)} if account is not None else {}
        return await self._dispatch(Command.RETURN_AVAILABLE_ACCOUNT_BALANCES, params)

    async def return_tradable_balances(self) -> Result[dict[str, dict[str, Decimal]]]:
        return await self._dispatch(Command.RETURN_TRADABLE_BALANCES)

    async def transfer_balance(
        self,
        currency: str,
        amount: Amount,
        from_account: Account | str,
        to_account: Account | str,
    ) -> Result[TransferBalance]:
        source = normalize_account(from_account, "from_account")
        target = normalize_account(to_account, "to_account")
        if source == target:
            raise ValidationError(
                "from_account and to_account must differ", field="to_account", value=target
            )

        params = {
            "currency": normalize_currency(currency),
            "amount": format_decimal(to_positive_decimal(amount, "amount")),
            "fromAccount": source,
            "toAccount": target,
        }
        return await self._dispatch(Command.TRANSFER_BALANCE, params)

    # ------------------------------------------------------------------
    # Orders and trades
    # ------------------------------------------------------------------
    async def return_open_orders(self, currency_pair: str | None = None) -> Result[OpenOrders]:
        """Open orders for one market, or for every market when no pair is given.

        The result is ``OpenOrdersSingle`` when ``currency_pair`` is set and
        ``OpenOrdersAll`` otherwise.
        """
        pair, filtered = _market_filter(currency_pair)
        return await self._dispatch(
            Command.RETURN_OPEN_ORDERS, {"currencyPair": pair}, filtered=filtered
        )

    async def return_trade_history(
        self,
        currency_pair: str | None = None,
        start: Timestamp | None = None,
        end: Timestamp | None = None,
        limit: int | None = None,
    ) -> Result[TradeHistory]:
        """Trade history for one market, or for every market when no pair is given.

        Without a range the exchange returns one day; without ``limit`` at most
        500 rows. ``limit`` may not exceed 10,000.
        """
        pair, filtered = _market_filter(currency_pair)
        params = {"currencyPair": pair, **_time_range(start, end)}
        if limit is not None:
            params["limit"] = str(validate_limit(limit))
        return await self._dispatch(Command.RETURN_TRADE_HISTORY, params, filtered=filtered)

    async def return_order_trades(self, order_number: int) -> Result[list[OrderTrade]]:
        params = {"orderNumber": str(validate_order_number(order_number))}
        return await self._dispatch(Command.RETURN_ORDER_TRADES, params)

    async def return_order_status(self, order_number: int) -> Result[dict[int, OrderStatus]]:
        params = {"orderNumber": str(validate_order_number(order_number))}
        return await self._dispatch(Command.RETURN_ORDER_STATUS, params)

    async def _place_order(
        self,
        command: Command,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        flags: dict[str, str],
    ) -> Result[OrderPlacement]:
        params = {
            "currencyPair": normalize_currency_pair(currency_pair),
            "rate": format_decimal(to_positive_decimal(rate, "rate")),
            "amount": format_decimal(to_positive_decimal(amount, "amount")),
            **flags,
        }
        return await self._dispatch(command, params)

    async def buy(
        self,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        *,
        fill_or_kill: bool = False,
        immediate_or_cancel: bool = False,
        post_only: bool = False,
    ) -> Result[OrderPlacement]:
        """Place a limit buy order.

        At most one of ``fill_or_kill``, ``immediate_or_cancel`` and
        ``post_only`` may be set.
        """
        flags = _order_flags(
            fillOrKill=fill_or_kill, immediateOrCancel=immediate_or_cancel, postOnly=post_only
        )
        return await self._place_order(Command.BUY, currency_pair, rate, amount, flags)

    async def sell(
        self,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        *,
        fill_or_kill: bool = False,
        immediate_or_cancel: bool = False,
        post_only: bool = False,
    ) -> Result[OrderPlacement]:
        """Place a limit sell order. Options match ``buy``."""
        flags = _order_flags(
            fillOrKill=fill_or_kill, immediateOrCancel=immediate_or_cancel, postOnly=post_only
        )
        return await self._place_order(Command.SELL, currency_pair, rate, amount, flags)

    async def cancel_order(self, order_number: int) -> Result[CancelOrder]:
        params = {"orderNumber": str(validate_order_number(order_number))}
        return await self._dispatch(Command.CANCEL_ORDER, params)

    async def move_order(
        self,
        order_number: int,
        rate: Amount,
        amount: Amount | None = None,
        *,
        immediate_or_cancel: bool = False,
        post_only: bool = False,
    ) -> Result[MoveOrder]:
        """Atomically cancel an order and place a new one of the same type."""
        params = {
            "orderNumber": str(validate_order_number(order_number)),
            "rate": format_decimal(to_positive_decimal(rate, "rate")),
        }
        if amount is not None:
            params["amount"] = format_decimal(to_positive_decimal(amount, "amount"))
        params.update(_order_flags(immediateOrCancel=immediate_or_cancel, postOnly=post_only))
        return await self._dispatch(Command.MOVE_ORDER, params)

    # ------------------------------------------------------------------
    # Margin trading
    # ------------------------------------------------------------------
    async def return_margin_account_summary(self) -> Result[MarginAccountSummary]:
        return await self._dispatch(Command.RETURN_MARGIN_ACCOUNT_SUMMARY)

    async def _place_margin_order(
        self,
        command: Command,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        lending_rate: Amount | None,
    ) -> Result[MarginOrder]:
        params = {
            "currencyPair": normalize_currency_pair(currency_pair),
            "rate": format_decimal(to_positive_decimal(rate, "rate")),
            "amount": format_decimal(to_positive_decimal(amount, "amount")),
        }
        if lending_rate is not None:
            params["lendingRate"] = format_decimal(
                to_positive_decimal(lending_rate, "lending_rate")
            )
        return await self._dispatch(command, params)

    async def margin_buy(
        self,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        lending_rate: Amount | None = None,
    ) -> Result[MarginOrder]:
        """Place a margin buy order, optionally capping the lending rate."""
        return await self._place_margin_order(
            Command.MARGIN_BUY, currency_pair, rate, amount, lending_rate
        )

    async def margin_sell(
        self,
        currency_pair: str,
        rate: Amount,
        amount: Amount,
        lending_rate: Amount | None = None,
    ) -> Result[MarginOrder]:
        return await self._place_margin_order(
            Command.MARGIN_SELL, currency_pair, rate, amount, lending_rate
        )

    async def get_margin_position(
        self, currency_pair: str | None = None
    ) -> Result[MarginPositions]:
        """Margin position in one market, or in every market when no pair is given.

        A market without a position reports ``type == "none"``.
        """
        pair, filtered = _market_filter(currency_pair)
        return await self._dispatch(
            Command.GET_MARGIN_POSITION, {"currencyPair": pair}, filtered=filtered
        )

    async def close_margin_position(self, currency_pair: str) -> Result[CloseMarginPosition]:
        params = {"currencyPair": normalize_currency_pair(currency_pair)}
        return await self._dispatch(Command.CLOSE_MARGIN_POSITION, params)

    # ------------------------------------------------------------------
    # Lending
    # ------------------------------------------------------------------
    async def create_loan_offer(
        self,
        currency: str,
        amount: Amount,
        duration: int,
        auto_renew: bool,
        lending_rate: Amount,
    ) -> Result[LoanOfferCreated]:
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
            raise ValidationError(
                "duration must be a positive number of days", field="duration", value=duration
            )

        params = {
            "currency": normalize_currency(currency),
            "amount": format_decimal(to_positive_decimal(amount, "amount")),
            "duration": str(duration),
            "autoRenew": "1" if auto_renew else "0",
            "lendingRate": format_decimal(to_positive_decimal(lending_rate, "lending_rate")),
        }
        return await self._dispatch(Command.CREATE_LOAN_OFFER, params)

    async def cancel_loan_offer(self, order_number: int) -> Result[Acknowledgement]:
        params = {"orderNumber": str(validate_order_number(order_number))}
        return await self._dispatch(Command.CANCEL_LOAN_OFFER, params)

    async def return_open_loan_offers(self) -> Result[dict[str, list[LoanOffer]]]:
        return await self._dispatch(Command.RETURN_OPEN_LOAN_OFFERS)

    async def return_active_loans(self) -> Result[ActiveLoans]:
        return await self._dispatch(Command.RETURN_ACTIVE_LOANS)

    async def return_lending_history(
        self, start: Timestamp, end: Timestamp, limit: int | None = None
    ) -> Result[list[LendingHistoryEntry]]:
        params = _time_range(start, end)
        if limit is not None:
            params["limit"] = str(validate_limit(limit, maximum=None))
        return await self._dispatch(Command.RETURN_LENDING_HISTORY, params)

    async def toggle_auto_renew(self, order_number: int) -> Result[AutoRenewToggle]:
        """Flip auto-renew on an active loan; the result holds the new setting."""
        params = {"orderNumber": str(validate_order_number(order_number))}
        return await self._dispatch(Command.TOGGLE_AUTO_RENEW, params)
