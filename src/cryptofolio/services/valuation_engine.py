"""Valuation engine: holdings + quotes + initial capital -> portfolio summary."""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from cryptofolio.domain.models import Asset, Exchange, is_stablecoin, to_decimal
from cryptofolio.domain.views import (
    AssetAllocation,
    AssetWithValue,
    ExchangeAllocation,
    ExchangeWithAssets,
    PortfolioSummary,
    Quote,
    ValuationResult,
)

ZERO = Decimal("0")
ONE = Decimal("1.0")
HUNDRED = Decimal("100")


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is not positive."""
    if whole <= ZERO:
        return ZERO
    return part / whole * HUNDRED


def value_asset(asset: Asset, quote: Optional[Quote]) -> AssetWithValue:
    """
    Value a single holding.

    - stablecoin: price 1.0, no profit/loss
    - fresh quote: market value against purchase cost
    - stale quote: last known price for display, no profit/loss
    - no quote: purchase price for display, no profit/loss
    """
    last_priced_at = quote.as_of if quote is not None else None
    is_price_stale = False

    if is_stablecoin(asset.symbol):
        current_price = ONE
        current_value = asset.quantity * ONE
        profit_loss = ZERO
        profit_loss_pct = ZERO
    elif quote is not None and not quote.is_stale:
        current_price = quote.current_price
        current_value = asset.quantity * current_price
        investment = asset.investment
        profit_loss = current_value - investment
        profit_loss_pct = percentage(profit_loss, investment)
    else:
        # Never fabricate a gain/loss from an absent or stale quote
        current_price = quote.current_price if quote is not None else asset.purchase_price_avg
        current_value = asset.quantity * current_price
        profit_loss = ZERO
        profit_loss_pct = ZERO
        is_price_stale = quote is not None

    return AssetWithValue(
        id=asset.id,
        exchange_id=asset.exchange_id,
        symbol=asset.symbol,
        quantity=asset.quantity,
        purchase_price_avg=asset.purchase_price_avg,
        last_updated=asset.last_updated,
        logo_url=asset.logo_url or (quote.image_url if quote is not None else None),
        current_price=current_price,
        current_value=current_value,
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss_pct,
        last_priced_at=last_priced_at,
        is_price_stale=is_price_stale,
    )


def group_by_exchange(exchanges: Sequence[Exchange], assets: Sequence[Asset]) -> list[ExchangeWithAssets]:
    """
    Build unvalued ExchangeWithAssets from flat records.

    Assets whose exchange is not in exchanges are dropped.
    """
    by_exchange: dict[str, list[Asset]] = defaultdict(list)
    for asset in assets:
        by_exchange[asset.exchange_id].append(asset)

    return [
        ExchangeWithAssets(
            id=exchange.id,
            name=exchange.name,
            created_at=exchange.created_at,
            assets=[value_asset(a, None) for a in by_exchange.get(exchange.id, [])],
        )
        for exchange in exchanges
    ]


class ValuationEngine:
    """
    Aggregates holdings into a PortfolioSummary.

    recompute() is a pure function of its arguments; it reads no cache or
    clock of its own.
    """

    def recompute(
        self,
        exchanges: Sequence[ExchangeWithAssets],
        quotes: Mapping[str, Optional[Quote]],
        initial_capital: Decimal,
        as_of: Optional[datetime] = None,
    ) -> ValuationResult:
        """
        Value every asset and aggregate.

        Args:
            exchanges: Current holdings grouped by exchange
            quotes: upper-case symbol -> Quote (None or missing = no price)
            initial_capital: User-set baseline used as total investment
            as_of: Timestamp for the summary; defaults to the newest quote

        Returns:
            ValuationResult with valued exchanges and the summary
        """
        updated: list[ExchangeWithAssets] = []
        value_by_symbol: dict[str, Decimal] = defaultdict(lambda: ZERO)
        newest_quote: Optional[datetime] = None

        for exchange in exchanges:
            valued_assets: list[AssetWithValue] = []
            for asset in exchange.assets:
                quote = quotes.get(asset.symbol)
                valued = value_asset(asset, quote)
                valued_assets.append(valued)
                value_by_symbol[valued.symbol] += valued.current_value
                if quote is not None and (newest_quote is None or quote.as_of > newest_quote):
                    newest_quote = quote.as_of

            updated.append(
                ExchangeWithAssets(
                    id=exchange.id,
                    name=exchange.name,
                    created_at=exchange.created_at,
                    assets=valued_assets,
                    total_value=sum((a.current_value for a in valued_assets), ZERO),
                )
            )

        total_value = sum((e.total_value for e in updated), ZERO)
        total_investment = to_decimal(initial_capital)
        total_profit_loss = total_value - total_investment

        by_exchange: list[ExchangeAllocation] = []
        by_asset: list[AssetAllocation] = []
        if total_value > ZERO:
            by_exchange = sorted(
                (
                    ExchangeAllocation(
                        exchange_id=e.id,
                        exchange_name=e.name,
                        value=e.total_value,
                        percentage=percentage(e.total_value, total_value),
                    )
                    for e in updated
                ),
                key=lambda item: item.value,
                reverse=True,
            )
            by_asset = sorted(
                (
                    AssetAllocation(
                        symbol=symbol,
                        value=value,
                        percentage=percentage(value, total_value),
                    )
                    for symbol, value in value_by_symbol.items()
                ),
                key=lambda item: item.value,
                reverse=True,
            )

        summary = PortfolioSummary(
            total_value=total_value,
            total_investment=total_investment,
            total_profit_loss=total_profit_loss,
            profit_loss_percentage=percentage(total_profit_loss, total_investment),
            distribution_by_exchange=by_exchange,
            distribution_by_asset=by_asset,
            as_of=as_of or newest_quote,
        )
        return ValuationResult(updated_portfolio=updated, summary=summary)
