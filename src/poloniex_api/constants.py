"""Constants and enumerations for the Poloniex trading API."""

from enum import Enum

TRADING_API_URL = "https://poloniex.com/tradingApi"

# Seconds before an outbound request is abandoned
DEFAULT_REQUEST_TIMEOUT = 3.0

MAX_TRADE_HISTORY_LIMIT = 10_000

# Value sent for the market filter when no pair is requested
ALL_MARKETS = "all"

RESERVED_PARAMS = frozenset({"nonce", "command"})


class Command(str, Enum):
    """Trading API commands and their wire names."""

    RETURN_BALANCES = "returnBalances"
    RETURN_COMPLETE_BALANCES = "returnCompleteBalances"
    RETURN_DEPOSIT_ADDRESSES = "returnDepositAddresses"
    GENERATE_NEW_ADDRESS = "generateNewAddress"
    RETURN_DEPOSITS_WITHDRAWALS = "returnDepositsWithdrawals"
    RETURN_OPEN_ORDERS = "returnOpenOrders"
    RETURN_TRADE_HISTORY = "returnTradeHistory"
    RETURN_ORDER_TRADES = "returnOrderTrades"
    RETURN_ORDER_STATUS = "returnOrderStatus"
    BUY = "buy"
    SELL = "sell"
    CANCEL_ORDER = "cancelOrder"
    MOVE_ORDER = "moveOrder"
    WITHDRAW = "withdraw"
    RETURN_FEE_INFO = "returnFeeInfo"
    RETURN_AVAILABLE_ACCOUNT_BALANCES = "returnAvailableAccountBalances"
    RETURN_TRADABLE_BALANCES = "returnTradableBalances"
    TRANSFER_BALANCE = "transferBalance"
    RETURN_MARGIN_ACCOUNT_SUMMARY = "returnMarginAccountSummary"
    MARGIN_BUY = "marginBuy"
    MARGIN_SELL = "marginSell"
    GET_MARGIN_POSITION = "getMarginPosition"
    CLOSE_MARGIN_POSITION = "closeMarginPosition"
    CREATE_LOAN_OFFER = "createLoanOffer"
    CANCEL_LOAN_OFFER = "cancelLoanOffer"
    RETURN_OPEN_LOAN_OFFERS = "returnOpenLoanOffers"
    RETURN_ACTIVE_LOANS = "returnActiveLoans"
    RETURN_LENDING_HISTORY = "returnLendingHistory"
    TOGGLE_AUTO_RENEW = "toggleAutoRenew"


class Account(str, Enum):
    """Poloniex wallet accounts usable in balance and transfer commands."""

    EXCHANGE = "exchange"
    MARGIN = "margin"
    LENDING = "lending"


class Strategy(Enum):
    """How a response is routed to the success or error shape."""

    STATUS = "status"  # HTTP status decides
    BODY = "body"  # presence of an "error" field decides
