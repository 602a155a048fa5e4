"""Declarative table of trading API commands and their response shapes."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .constants import Command, Strategy
from .types import (
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
    MarginPositionAll,
    MarginPositionSingle,
    MoveOrder,
    NewAddress,
    OpenOrdersAll,
    OpenOrdersSingle,
    OrderPlacement,
    TradeHistoryAll,
    TradeHistorySingle,
    TransferBalance,
    Withdrawal,
    decimal_map,
    grouped,
    keyed,
    list_of,
    nested_decimal_map,
    parse_order_status,
    parse_order_trades,
    string_map,
)

Parser = Callable[[Any], Any]


@dataclass(frozen=True)
class CommandSpec:
    """How one command's response is decoded.

    ``parse`` handles the success shape. Commands with an optional market
    filter also set ``parse_all`` for the unfiltered, keyed-by-market shape.
    """

    command: Command
    parse: Parser
    strategy: Strategy = Strategy.STATUS
    parse_all: Parser | None = None

    @property
    def filter_discriminated(self) -> bool:
        return self.parse_all is not None

    def parser_for(self, filtered: bool | None) -> Parser:
        if self.parse_all is None:
            return self.parse
        if filtered is None:
            raise ValueError(
                f"{self.command.value} needs to know whether a market filter was sent"
            )
        return self.parse if filtered else self.parse_all


def _complete_balances(data: Any) -> dict[str, CompleteBalance]:
    return keyed(CompleteBalance.from_dict, data, "complete balances")


def _open_loan_offers(data: Any) -> dict[str, list[LoanOffer]]:
    return grouped(LoanOffer.from_dict, data, "open loan offers")


def _lending_history(data: Any) -> list[LendingHistoryEntry]:
    return list_of(LendingHistoryEntry.from_dict, data, "lending history")


_SPECS = (
    CommandSpec(Command.RETURN_BALANCES, decimal_map),
    CommandSpec(Command.RETURN_COMPLETE_BALANCES, _complete_balances),
    CommandSpec(Command.RETURN_DEPOSIT_ADDRESSES, string_map),
    CommandSpec(Command.GENERATE_NEW_ADDRESS, NewAddress.from_dict),
    CommandSpec(Command.RETURN_DEPOSITS_WITHDRAWALS, DepositsWithdrawals.from_dict),
    CommandSpec(
        Command.RETURN_OPEN_ORDERS,
        OpenOrdersSingle.from_json,
        parse_all=OpenOrdersAll.from_json,
    ),
    CommandSpec(
        Command.RETURN_TRADE_HISTORY,
        TradeHistorySingle.from_json,
        parse_all=TradeHistoryAll.from_json,
    ),
    CommandSpec(Command.RETURN_ORDER_TRADES, parse_order_trades),
    CommandSpec(Command.RETURN_ORDER_STATUS, parse_order_status),
    CommandSpec(Command.BUY, OrderPlacement.from_dict, strategy=Strategy.BODY),
    CommandSpec(Command.SELL, OrderPlacement.from_dict, strategy=Strategy.BODY),
    CommandSpec(Command.CANCEL_ORDER, CancelOrder.from_dict),
    CommandSpec(Command.MOVE_ORDER, MoveOrder.from_dict),
    CommandSpec(Command.WITHDRAW, Withdrawal.from_dict),
    CommandSpec(Command.RETURN_FEE_INFO, FeeInfo.from_dict),
    CommandSpec(Command.RETURN_AVAILABLE_ACCOUNT_BALANCES, nested_decimal_map),
    CommandSpec(Command.RETURN_TRADABLE_BALANCES, nested_decimal_map),
    CommandSpec(Command.TRANSFER_BALANCE, TransferBalance.from_dict),
    CommandSpec(Command.RETURN_MARGIN_ACCOUNT_SUMMARY, MarginAccountSummary.from_dict),
    CommandSpec(Command.MARGIN_BUY, MarginOrder.from_dict),
    CommandSpec(Command.MARGIN_SELL, MarginOrder.from_dict),
    CommandSpec(
        Command.GET_MARGIN_POSITION,
        MarginPositionSingle.from_json,
        parse_all=MarginPositionAll.from_json,
    ),
    CommandSpec(Command.CLOSE_MARGIN_POSITION, CloseMarginPosition.from_dict),
    CommandSpec(Command.CREATE_LOAN_OFFER, LoanOfferCreated.from_dict),
    CommandSpec(Command.CANCEL_LOAN_OFFER, Acknowledgement.from_dict),
    CommandSpec(Command.RETURN_OPEN_LOAN_OFFERS, _open_loan_offers),
    CommandSpec(Command.RETURN_ACTIVE_LOANS, ActiveLoans.from_dict),
    CommandSpec(Command.RETURN_LENDING_HISTORY, _lending_history),
    CommandSpec(Command.TOGGLE_AUTO_RENEW, AutoRenewToggle.from_dict),
)

COMMANDS: Mapping[Command, CommandSpec] = MappingProxyType({spec.command: spec for spec in _SPECS})


def get_spec(command: Command | str) -> CommandSpec:
    """Look up the decoding entry for a command by member or wire name."""
    try:
        return COMMANDS[Command(command)]
    except ValueError:
        raise ValueError(f"Unknown command: {command}")
