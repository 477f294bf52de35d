from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from stockdata.historical.window import (
    TIMEFRAMES, AbsoluteWindow, RelativeWindow, TimeWindow, resolve_start,
)

RATIO_TYPES = ("pe", "pb", "ps")


class InvalidWindowError(ValueError):
    pass


def parse_date_param(value: str, label: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidWindowError(f"Invalid {label} date format. Use YYYY-MM-DD format.")


def parse_window(args: Mapping[str, str], strict_timeframe: bool = True) -> TimeWindow:
    """Build a TimeWindow from query args.

    `timeframe` selects a RelativeWindow, otherwise `start`/`end` build an
    AbsoluteWindow (both optional). Mixing the two is rejected. Unknown tokens
    are rejected in strict mode and left for the selector to treat as ALL
    otherwise.
    """
    start = args.get("start") or None
    end = args.get("end") or None
    timeframe = args.get("timeframe") or None

    if timeframe is not None:
        if start or end:
            raise InvalidWindowError("Use either timeframe or start/end, not both.")
        if strict_timeframe and timeframe.strip().upper() not in TIMEFRAMES:
            raise InvalidWindowError(f"Invalid timeframe. Must be one of {', '.join(TIMEFRAMES)}")
        return RelativeWindow(timeframe)

    s = parse_date_param(start, "start") if start else None
    e = parse_date_param(end, "end") if end else None
    if s and e and s > e:
        raise InvalidWindowError("Start date cannot be after end date.")
    return AbsoluteWindow(s, e)


def describe_window(window: TimeWindow, now: datetime) -> Dict[str, Any]:
    if isinstance(window, RelativeWindow):
        lower = resolve_start(window.token, now)
        return {
            "timeframe": window.normalized,
            "start": lower.date().isoformat() if lower else None,
        }
    return {
        "start": window.start.isoformat() if window.start else None,
        "end": window.end.isoformat() if window.end else None,
    }


def parse_ratio_type(value: Optional[str]) -> Optional[str]:
    t = (value or "").strip().lower()
    return t if t in RATIO_TYPES else None
