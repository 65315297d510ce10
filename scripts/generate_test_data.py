#!/usr/bin/env python3
"""
Seed a data directory with a realistic demo portfolio.
Creates a few exchanges with crypto holdings and sets an initial capital.

Usage:
  ./venv/bin/python scripts/generate_test_data.py [DATA_DIR]
"""

import asyncio
import random
import sys
from decimal import Decimal
from pathlib import Path

from cryptofolio.app_context import AppContext
from cryptofolio.config.settings import Settings
from cryptofolio.core.exceptions import ValidationError
from cryptofolio.domain.models import AssetCreate, ExchangeCreate

# Exchanges and the symbols held on each, with approximate purchase prices
HOLDINGS = {
    "Binance": [("BTC", 38000.0), ("ETH", 2100.0), ("BNB", 280.0), ("USDT", 1.0)],
    "Coinbase": [("BTC", 41000.0), ("SOL", 60.0), ("ADA", 0.45)],
    "Ledger": [("ETH", 1800.0), ("DOT", 6.5), ("LINK", 12.0)],
}


async def generate_demo_data(data_dir: Path) -> None:
    """Create exchanges and assets unless they already exist."""
    context = AppContext(Settings(data_dir=data_dir, connectivity_probe_enabled=False))
    await context.start()
    store = context.portfolio
    rng = random.Random(7)

    try:
        existing = {e.name: e for e in store.exchanges}
        for name, assets in HOLDINGS.items():
            exchange = existing.get(name) or await store.add_exchange(ExchangeCreate(name=name))
            print(f"✓ Exchange '{name}'")
            for symbol, price in assets:
                quantity = Decimal(str(round(rng.uniform(0.1, 5.0) * (1000 if price < 10 else 1), 4)))
                try:
                    await store.add_asset(
                        AssetCreate(
                            exchange_id=exchange.id,
                            symbol=symbol,
                            quantity=quantity,
                            purchase_price_avg=Decimal(str(price)),
                        )
                    )
                    print(f"  + {symbol}: {quantity} @ ${price:,.2f}")
                except ValidationError:
                    print(f"  = {symbol} already present")

        await store.update_initial_capital(Decimal("50000"))
        await store.refresh_prices()

        summary = store.summary
        print("=" * 60)
        print(f"Total value:      ${summary.total_value:,.2f}")
        print(f"Initial capital:  ${summary.total_investment:,.2f}")
        print(f"Profit/loss:      ${summary.total_profit_loss:,.2f} ({summary.profit_loss_percentage:.2f}%)")
    finally:
        await context.close()


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Settings().get_data_dir()
    asyncio.run(generate_demo_data(target))
