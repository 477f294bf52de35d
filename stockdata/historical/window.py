from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

Record = Mapping[str, Any]

TIMEFRAMES = ("1W", "1M", "3M", "6M", "1Y", "2Y", "ALL")

_OFFSETS: Dict[str, Union[timedelta, relativedelta]] = {
    "1W": timedelta(days=7),
    "1M": relativedelta(months=1),
    "3M": relativedelta(months=3),
    "6M": relativedelta(months=6),
    "1Y": relativedelta(years=1),
    "2Y": relativedelta(years=2),
}


class DataIntegrityError(ValueError):
    """A stored record is missing its date or carries one that does not parse."""


@dataclass(frozen=True)
class AbsoluteWindow:
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class RelativeWindow:
    token: Optional[str] = None

    @property
    def normalized(self) -> str:
        return (self.token or "ALL").strip().upper()


TimeWindow = Union[AbsoluteWindow, RelativeWindow]


def _parse_date(d: str) -> datetime:
    return datetime.strptime(d, "%Y-%m-%d")


def record_date(record: Record) -> datetime:
    """Parse a record's date; only ISO dates and ISO datetimes are accepted."""
    raw = record.get("date")
    if raw is None:
        raise DataIntegrityError(f"record has no date field: {dict(record)!r}")
    if not isinstance(raw, str):
        raise DataIntegrityError(f"record has malformed date {raw!r}")
    try:
        return _parse_date(raw)
    except ValueError:
        pass
    try:
        return naive_utc(datetime.fromisoformat(raw))
    except ValueError as e:
        raise DataIntegrityError(f"record has malformed date {raw!r}") from e


def resolve_start(token: Optional[str], now: datetime) -> Optional[datetime]:
    """Resolve a relative timeframe token to its lower-bound instant.

    Month and year offsets use calendar arithmetic, so 31 March minus one month
    is 28/29 February rather than "30 days ago". ALL, a missing token and any
    unrecognized token resolve to None (no lower bound).
    """
    offset = _OFFSETS.get(RelativeWindow(token).normalized)
    if offset is None:
        return None
    return now - offset


def naive_utc(now: datetime) -> datetime:
    # record dates are naive calendar dates; compare aware clocks in UTC
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    return now


def select(series: Sequence[Record], window: TimeWindow, now: Optional[datetime] = None) -> List[Record]:
    """Return the records of `series` inside `window`, sorted ascending by date.

    - AbsoluteWindow: start <= date <= end, each bound optional (inclusive)
    - RelativeWindow: resolve_start(token, now) <= date <= now; ALL and
      unrecognized tokens return the whole series
    - Input order is irrelevant; the sort key is the record's date
    """
    keyed = [(record_date(r), r) for r in series]

    if isinstance(window, AbsoluteWindow):
        picked = [
            (d, r) for d, r in keyed
            if (window.start is None or d.date() >= window.start)
            and (window.end is None or d.date() <= window.end)
        ]
    elif isinstance(window, RelativeWindow):
        now = naive_utc(now or datetime.now())
        start = resolve_start(window.token, now)
        picked = keyed if start is None else [(d, r) for d, r in keyed if start <= d <= now]
    else:
        raise TypeError(f"unsupported window type: {type(window).__name__}")

    picked.sort(key=lambda pair: pair[0])
    return [r for _, r in picked]


def project(records: Sequence[Record], field: str, label: Optional[str] = None) -> List[Dict[str, Any]]:
    """Project selected records to [{date, <label>}] pairs."""
    key = label or field
    return [{"date": r["date"], key: r.get(field)} for r in records]
