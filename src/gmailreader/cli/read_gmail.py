"""Read a Gmail mailbox over a time range as JSON lines, polling while the range is open."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from gmailreader.application.options import build_read_config, parse_duration, parse_moment
from gmailreader.application.query.filter_compiler import parse_filter_ast
from gmailreader.application.use_cases.fetch_records import RecordFetcher
from gmailreader.application.use_cases.poll_window import RetryPolicy, WindowPollDriver
from gmailreader.domain.errors import ConfigurationError, GmailReaderError
from gmailreader.infrastructure.gmail.client import gmail_client_from_settings
from gmailreader.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler
from gmailreader.infrastructure.settings import GmailReaderSettings, get_settings
from gmailreader.infrastructure.sinks.json_lines import JsonLinesSink

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gmail-read", description="Read Gmail messages in a time range")
    parser.add_argument("--from", dest="from_", default=None, help="Start of range (ISO-8601 or 'now')")
    parser.add_argument("--to", default=None, help="End of range (ISO-8601, 'now' or 'end' to keep polling)")
    parser.add_argument("--last", default=None, help="Read the last duration, e.g. 1h (excludes --from/--to)")
    parser.add_argument("--raw", default=None, help="Raw Gmail search expression")
    parser.add_argument("--delay", default=None, help="Delay between polls, e.g. 5s")
    parser.add_argument("--filter", dest="filter_json", default=None, help="Filter tree as JSON")
    parser.add_argument("--timezone", default=None, help="Zone used to quantize search days")
    parser.add_argument("--log-level", default=None, help="Log level (default from GMAIL_LOG_LEVEL)")
    return parser


def options_from_args(args: argparse.Namespace, now: datetime) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if args.from_ is not None:
        options["from"] = parse_moment(args.from_, now)
    if args.to is not None:
        options["to"] = parse_moment(args.to, now, allow_end=True)
    if args.last is not None:
        options["last"] = parse_duration(args.last)
    if args.raw is not None:
        options["raw"] = args.raw
    if args.delay is not None:
        options["delay"] = parse_duration(args.delay)
    return options


async def run(args: argparse.Namespace, settings: GmailReaderSettings) -> int:
    now = datetime.now(timezone.utc)
    filter_ast = parse_filter_ast(args.filter_json) if args.filter_json else None
    config = build_read_config(
        options_from_args(args, now),
        now=now,
        default_delay=settings.poll_delay,
        filter_ast=filter_ast,
    )
    zone = ZoneInfo(args.timezone) if args.timezone else settings.zone

    sink = JsonLinesSink(sys.stdout)
    scheduler = AsyncioScheduler()
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # Windows
            pass

    async with gmail_client_from_settings(settings) as client:
        driver = WindowPollDriver(
            fetcher=RecordFetcher(client),
            sink=sink,
            scheduler=scheduler,
            time_range=config.time_range,
            delay=config.delay,
            zone=zone,
            raw=config.raw,
            filter_expr=config.filter_expr,
            retry=RetryPolicy(
                attempts=settings.fetch_retry_attempts,
                max_wait=settings.fetch_retry_max_wait_seconds,
            ),
        )
        await driver.start()

        done = asyncio.ensure_future(sink.wait())
        stopped = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({done, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            scheduler.close()
            stopped.cancel()

        if not done.done():
            done.cancel()
            logger.info("Interrupted, shutting down")
            return 0
        error = done.exception()
        if error is not None:
            logger.error(f"Read failed: {error}")
            return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for gmail-read."""
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=(args.log_level or settings.log_level).upper())

    try:
        return asyncio.run(run(args, settings))
    except (ConfigurationError, ZoneInfoNotFoundError) as e:
        logger.error(f"Invalid options: {e}")
        return 2
    except GmailReaderError as e:
        logger.error(f"Read failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
