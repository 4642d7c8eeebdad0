#!/usr/bin/env python3
"""
Demo runner: drives every Carbon Calculator use case against a live API.

Usage:
    # Start the sandbox first:
    uvicorn carbon_calculator.sandbox.main:app

    # Run all use cases (register, aggregate, history, delete, bulk enrol):
    python demo/run_usecases.py

    # Seed sample transactions into the sandbox and show their footprints:
    python demo/run_usecases.py --seed

    # Custom server, BIN and currency:
    python demo/run_usecases.py --base-url http://localhost:9000 --bin 222300 --currency EUR

CONSUMER_KEY and SIGNING_SECRET must be set in the environment or .env,
with the same values the server uses.
"""

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import replace
from datetime import date, timedelta

from carbon_calculator.client import ApiClient
from carbon_calculator.config import settings
from carbon_calculator.logging_config import configure_logging
from carbon_calculator.result import Err
from carbon_calculator.schemas.footprint import AggregateType
from carbon_calculator.usecases import (
    HISTORY_END_DATE,
    HISTORY_START_DATE,
    UseCaseContext,
    aggregate_transaction_footprints,
    delete_payment_cards,
    historical_transaction_footprints,
    register_payment_card,
    run_all,
)

logger = logging.getLogger("demo")

SAMPLE_MCCS = ["4511", "5411", "5541", "5812", "5732"]


def log(msg: str) -> None:
    print(f"  {msg}")


async def seed_transactions(api_client: ApiClient, payment_card_id: str, currency: str, count: int = 12) -> None:
    """Record random transactions inside the history window (sandbox only)."""
    start = date.fromisoformat(HISTORY_START_DATE)
    span = (date.fromisoformat(HISTORY_END_DATE) - start).days
    for _ in range(count):
        await api_client.request(
            "POST",
            f"/sandbox/payment-cards/{payment_card_id}/transactions",
            json_body={
                "transactionDate": (start + timedelta(days=random.randint(0, span))).isoformat(),
                "mcc": random.choice(SAMPLE_MCCS),
                "amountCents": random.randint(5_00, 250_00),
                "currencyCode": currency,
            },
        )
    log(f"Seeded {count} transactions on {payment_card_id}")


async def seeded_walkthrough(ctx: UseCaseContext, api_client: ApiClient) -> int:
    registered = await register_payment_card(ctx)
    if isinstance(registered, Err):
        return 1
    card = registered.value
    log(f"Registered card {card.payment_card_id} ending in {card.last4fpan}")

    await seed_transactions(api_client, card.payment_card_id, ctx.card_base_currency)

    for aggregate_type in AggregateType:
        result = await aggregate_transaction_footprints(ctx, card.payment_card_id, aggregate_type)
        if isinstance(result, Err):
            return 1
        for footprint in result.value:
            for score in footprint.aggregate_carbon_score:
                log(f"{aggregate_type.name:<8s} {score.aggregate_date:<12s} "
                    f"{score.carbon_emission_in_grams:>12,.2f} g  ({score.transaction_count} txns)")

    history = await historical_transaction_footprints(ctx, card.payment_card_id)
    if isinstance(history, Err):
        return 1
    log(f"History: {history.value.count} of {history.value.total} footprints")

    deleted = await delete_payment_cards(ctx, [card.payment_card_id])
    return 1 if isinstance(deleted, Err) else 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="Run the Carbon Calculator use cases")
    parser.add_argument(
        "--base-url", default=settings.API_BASE_URL,
        help=f"Base URL of the API (default: {settings.API_BASE_URL})",
    )
    parser.add_argument("--bin", default=settings.TEST_DATA_BIN, help="BIN for generated FPANs")
    parser.add_argument("--currency", default=settings.TEST_DATA_CARD_BASE_CURRENCY, help="Card base currency")
    parser.add_argument(
        "--seed", action="store_true",
        help="Seed sandbox transactions and print their footprints",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(args.log_level)

    async with ApiClient(base_url=args.base_url) as api_client:
        ctx = replace(
            UseCaseContext.from_settings(api_client),
            bin=args.bin,
            card_base_currency=args.currency,
        )

        if args.seed:
            return await seeded_walkthrough(ctx, api_client)

        result = await run_all(ctx)
        if isinstance(result, Err):
            logger.error("Use cases failed: %s", result.error)
            return 1
        for key, value in result.value.items():
            log(f"{key}: {value}")
        return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
