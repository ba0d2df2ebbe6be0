"""Validate read options and build the initial time range."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from loguru import logger

from gmailreader.application.query.filter_compiler import FilterGmailCompiler, FilterNode
from gmailreader.domain.errors import ConfigurationError
from gmailreader.domain.time_range import UNBOUNDED, TimeRange, Unbounded

TIME_OPTIONS = ("from", "to", "last")
ALLOWED_OPTIONS = TIME_OPTIONS + ("raw", "delay")

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w)?\s*$")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


@dataclass(frozen=True)
class ReadConfig:
    time_range: TimeRange
    delay: timedelta
    raw: Optional[str] = None
    filter_expr: Optional[str] = None


def parse_duration(value: str) -> timedelta:
    """``500ms``, ``30s``, ``5m``, ``1h``, ``2d``, ``1w``; bare numbers are seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise ConfigurationError("INVALID-VALUE", f"not a duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


def parse_moment(value: str, now: datetime, allow_end: bool = False) -> datetime | Unbounded:
    """ISO-8601 timestamp, ``now``, or (for upper bounds) ``end``."""
    text = value.strip().lower()
    if text == "now":
        return now
    if text == "end":
        if not allow_end:
            raise ConfigurationError("INVALID-VALUE", "'end' is only valid as an upper bound")
        return UNBOUNDED
    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ConfigurationError("INVALID-VALUE", f"not a timestamp: {value!r}") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def build_read_config(
    options: Mapping[str, Any],
    *,
    now: datetime,
    default_delay: timedelta = timedelta(seconds=1),
    filter_ast: Optional[FilterNode] = None,
) -> ReadConfig:
    """Validate ``options`` (from/to/last/raw/delay) into a :class:`ReadConfig`."""
    unknown = [k for k in options if k not in ALLOWED_OPTIONS]
    if unknown:
        raise ConfigurationError("UNKNOWN-OPTION", f"unknown option '{unknown[0]}'")

    if not any(k in options for k in TIME_OPTIONS):
        raise ConfigurationError("MISSING-TIME-RANGE", "one of 'from', 'to' or 'last' is required")

    if "last" in options and ("from" in options or "to" in options):
        raise ConfigurationError("LAST-FROM-TO", "'last' cannot be combined with 'from' or 'to'")

    start = options.get("from")
    end = options.get("to")
    if start is UNBOUNDED:
        raise ConfigurationError("INVALID-VALUE", "'from' must be a timestamp")
    if isinstance(start, datetime) and isinstance(end, datetime) and start > end:
        raise ConfigurationError("TO-FROM-ORDER", "'from' must be before 'to'")

    if "last" in options:
        last = options["last"]
        if not isinstance(last, timedelta) or last < timedelta(0):
            raise ConfigurationError("INVALID-VALUE", "'last' must be a non-negative duration")
        start, end = now - last, now
    else:
        start = start or now
        end = end or now
        if isinstance(end, datetime) and start > end:
            # e.g. only 'from' given, and it lies in the future
            raise ConfigurationError("TO-FROM-ORDER", "'from' must be before 'to'")

    delay = options.get("delay", default_delay)
    if not isinstance(delay, timedelta) or delay <= timedelta(0):
        raise ConfigurationError("INVALID-VALUE", "'delay' must be a positive duration")

    filter_expr = None
    if filter_ast is not None:
        logger.debug(f"Filter ast: {filter_ast}")
        filter_expr = FilterGmailCompiler().compile(filter_ast)

    return ReadConfig(
        time_range=TimeRange(start=start, end=end),
        delay=delay,
        raw=options.get("raw") or None,
        filter_expr=filter_expr,
    )
