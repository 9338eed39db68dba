"""Utility script to report activities to a collector from the command line."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from bakery.config import get_settings
from bakery.infrastructure.activity import ActivityBatcher, HttpActivityTransport


def parse_args() -> argparse.Namespace:
    """Parse command line arguments describing the activity to send."""

    parser = argparse.ArgumentParser(
        description="Send an activity event to the bakery activity collector.",
    )
    parser.add_argument("action", help="Activity category, e.g. VIEW, CREATE or DELETE")
    parser.add_argument("resource", help="Entity, page or control acted upon")
    parser.add_argument(
        "--resource-id",
        default=None,
        help="Identifier of the specific instance (optional)",
    )
    parser.add_argument(
        "--details",
        default=None,
        help="JSON object with extra context; sensitive keys are redacted",
    )
    parser.add_argument(
        "--collector",
        default=None,
        help="Collector URL (defaults to ACTIVITY_COLLECTOR_URL)",
    )
    return parser.parse_args()


async def send(args: argparse.Namespace, collector_url: str) -> int:
    details = json.loads(args.details) if args.details else None
    transport = HttpActivityTransport(collector_url)
    batcher = ActivityBatcher(transport)
    try:
        batcher.track(args.action.upper(), args.resource, args.resource_id, details)
        await batcher.flush()
        left = len(batcher.pending)
    finally:
        await transport.aclose()
    return left


def main() -> None:
    """Track one activity and deliver it immediately."""

    logging.basicConfig(level=logging.INFO)
    args = parse_args()

    collector_url = args.collector or get_settings().activity_collector_url
    if not collector_url:
        raise SystemExit("No collector URL given and ACTIVITY_COLLECTOR_URL is not set.")

    try:
        left = asyncio.run(send(args, collector_url))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"--details is not valid JSON: {exc}") from exc

    if left:
        raise SystemExit("The collector did not accept the activity.")
    print(f"Activity {args.action.upper()} on {args.resource} delivered to {collector_url}")


if __name__ == "__main__":
    main()
