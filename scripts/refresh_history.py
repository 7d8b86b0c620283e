#!/usr/bin/env python3
"""
Fetch one league's trade history, merge it into the archive and print the
income summary.

Usage:
    python scripts/refresh_history.py "Settlers" --divine-price 150
"""

import argparse
import asyncio
import sys

from trade_archive.application import TradeHistoryService, ViewerStateStore
from trade_archive.common.factories import build_archive
from trade_archive.config import get_config
from trade_archive.infrastructure.observability import setup_logging
from trade_archive.ingestion import HistoryApiError, TradeHistoryClient


async def refresh(league: str, divine_price: float | None, only_new: bool) -> int:
    config = get_config()
    setup_logging(level=config.logging.level, json_logs=config.logging.json_logs)

    archive = build_archive(config.archive)
    client = TradeHistoryClient(config=config.history_api.to_client_config())
    service = TradeHistoryService(
        client,
        archive,
        state_store=ViewerStateStore(archive.store),
        limits=config.analytics.row_limits.to_row_limits(),
    )
    service.update_settings(preferred_currency=config.analytics.preferred_currency)
    if divine_price is not None:
        service.update_settings(divine_chaos_price=divine_price)
    if only_new:
        service.update_settings(only_new=True)

    try:
        await service.refresh(league)
    except HistoryApiError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await client.close()

    view = service.render()
    stats = view.stats
    print(view.status_text)
    print(f"Shown {view.count} ({view.new_count} new) of {view.archived_count} archived")
    print(f"Total: {stats.total_preferred_text or stats.total_text or '—'}")
    print(f"Best day:  {stats.best_text}")
    print(f"Worst day: {stats.worst_text}")
    for row in stats.by_day:
        print(f"  {row.label}  {row.count_text:>4}  {row.income_text}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Refresh and summarize trade history")
    parser.add_argument("league", help="League name, e.g. Standard")
    parser.add_argument(
        "--divine-price", type=float, default=None, help="Manual rate: 1 divine = N chaos"
    )
    parser.add_argument("--only-new", action="store_true", help="Summarize unseen sales only")
    args = parser.parse_args()

    sys.exit(asyncio.run(refresh(args.league, args.divine_price, args.only_new)))


if __name__ == "__main__":
    main()
