"""Inspect margin positions and manage a loan offer."""

import asyncio
from decimal import Decimal

from poloniex_api import Account, TradingClient


async def example_margin():
    async with TradingClient.from_env() as client:
        summary = await client.return_margin_account_summary()
        if summary.success:
            print(f"Net value: {summary.value.net_value}")

        positions = await client.get_margin_position()
        if positions.success:
            for pair, position in positions.value.positions.items():
                if position.is_open:
                    print(f"{pair}: {position.type} {position.amount} (pl {position.pl})")


async def example_lending():
    async with TradingClient.from_env() as client:
        # Move funds from the exchange account into the lending account first
        transfer = await client.transfer_balance(
            "BTC", Decimal("0.01"), Account.EXCHANGE, Account.LENDING
        )
        if not transfer.success:
            print(f"Transfer failed: {transfer.error.message}")
            return

        offer = await client.create_loan_offer(
            "BTC", Decimal("0.01"), duration=2, auto_renew=False, lending_rate=Decimal("0.0002")
        )
        if not offer.success:
            print(f"Loan offer failed: {offer.error.message}")
            return
        print(f"Loan offer {offer.value.order_id}: {offer.value.message}")

        offers = await client.return_open_loan_offers()
        if offers.success:
            print(f"Open BTC offers: {len(offers.value.get('BTC', []))}")

        cancelled = await client.cancel_loan_offer(offer.value.order_id)
        print(cancelled.value.message if cancelled.success else cancelled.error.message)


async def main():
    await example_margin()
    await example_lending()


if __name__ == "__main__":
    asyncio.run(main())
