"""Place a post-only limit order and cancel it."""

import asyncio
from decimal import Decimal

from poloniex_api import ExchangeRejectedError, TradingClient


async def example_place_and_cancel():
    async with TradingClient.from_env() as client:
        # Buy 1 ETH at 0.00001 BTC, far below the market so it rests on the book
        response = await client.buy(
            "BTC_ETH", Decimal("0.00001"), Decimal("1"), post_only=True
        )
        if not response.success:
            print(f"Order failed: {response.error.message}")
            return

        order_number = response.value.order_number
        print(f"Order placed: {order_number}")

        status = await client.return_order_status(order_number)
        if status.success:
            print(f"Status: {status.value[order_number].status}")

        try:
            cancelled = (await client.cancel_order(order_number)).unwrap()
        except ExchangeRejectedError as exc:
            print(f"Cancel failed: {exc.message}")
        else:
            print(f"Cancelled: {cancelled.message}")


if __name__ == "__main__":
    asyncio.run(example_place_and_cancel())
