"""Basic usage example for the Poloniex trading API client."""

import asyncio

from poloniex_api import TradingClient, TradingClientConfig

# Credentials come from POLONIEX_API_KEY / POLONIEX_API_SECRET or a .env file
config = TradingClientConfig.from_env()


async def example_account_overview():
    """Print balances, fees and open orders."""

    async with TradingClient.from_config(config) as client:
        balances = await client.return_balances()
        if balances.success:
            for currency, amount in balances.value.items():
                if amount:
                    print(f"{currency}: {amount}")
        else:
            print(f"Balances failed: {balances.error.message}")

        fees = await client.return_fee_info()
        if fees.success:
            print(f"Maker fee: {fees.value.maker_fee}, taker fee: {fees.value.taker_fee}")

        # Without a market filter the result is keyed by market
        open_orders = await client.return_open_orders()
        if open_orders.success:
            for pair, orders in open_orders.value.orders.items():
                if orders:
                    print(f"{pair}: {len(orders)} open order(s)")

        history = await client.return_trade_history("BTC_ETH", limit=10)
        if history.success:
            for trade in history.value.trades:
                print(f"{trade.date} {trade.type} {trade.amount} @ {trade.rate}")


async def main():
    await example_account_overview()


if __name__ == "__main__":
    asyncio.run(main())
