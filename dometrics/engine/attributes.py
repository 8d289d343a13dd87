"""DomainAttributes -- the engine's per-call input record.

Built by the caller (usually from a registry/subgraph name record via
``attributes_from_record()``) and never mutated by the engine.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86_400


def to_utc(value: datetime | str) -> datetime:
    """Coerce an ISO string or datetime to an aware UTC datetime.

    Naive datetimes (and bare dates, as YAML loads them) are taken to be
    UTC already.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if not isinstance(value, datetime):
        raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RecentEvent:
    """One on-chain or marketplace event (offer, transfer, renewal...)."""

    type: str
    timestamp: datetime | str


@dataclass(frozen=True)
class DomainAttributes:
    """Raw attributes of one tokenized domain.

    ``name`` is the second-level label and ``tld`` the top-level label
    without its leading dot.  Counts are not validated; negative values
    simply flow through the arithmetic and get clamped on output.
    """

    name: str
    tld: str
    expires_at: datetime | str
    lock_status: bool = False
    registrar_id: int | None = None
    renewal_count: int = 0
    offer_count: int = 0
    activity_7d: int = 0
    activity_30d: int = 0
    recent_events: tuple[RecentEvent, ...] = ()
    registrar_name: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name}.{self.tld}"

    def days_until_expiry(self, now: datetime | None = None) -> int:
        return days_until_expiry(self.expires_at, now)


def days_until_expiry(expires_at: datetime | str, now: datetime | None = None) -> int:
    """Whole days from ``now`` until ``expires_at``, floored (negative once expired)."""
    current = to_utc(now) if now is not None else utc_now()
    delta = to_utc(expires_at) - current
    return math.floor(delta.total_seconds() / _SECONDS_PER_DAY)


def count_recent_events(
    events: Iterable[RecentEvent] | None,
    window_hours: float,
    now: datetime | None = None,
) -> int:
    """Count events strictly newer than ``now - window_hours``."""
    if not events:
        return 0
    current = to_utc(now) if now is not None else utc_now()
    cutoff = current - timedelta(hours=window_hours)
    return sum(1 for event in events if to_utc(event.timestamp) > cutoff)


# ---------------------------------------------------------------------------
# Registry record mapping
# ---------------------------------------------------------------------------

def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First present, non-None value among ``keys`` (camelCase or snake_case)."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def split_domain_name(full_name: str) -> tuple[str, str]:
    """Split ``"crypto.io"`` into ``("crypto", "io")``.

    Multi-label suffixes stay together (``"shop.co.uk"`` -> ``("shop", "co.uk")``);
    a bare label gets ``"com"``.
    """
    parts = full_name.strip().lower().split(".")
    name = parts[0]
    tld = ".".join(parts[1:]) or "com"
    return name, tld


def attributes_from_record(record: Mapping[str, Any]) -> DomainAttributes:
    """Build DomainAttributes from a registry/subgraph name record.

    Expected shape (market fields optional, missing counts are 0)::

        {
            "name": "crypto.io",
            "expiresAt": "2026-05-01T00:00:00Z",
            "transferLock": false,
            "registrar": {"name": "Acme Registrar", "ianaId": "101"},
            "renewalCount": 2, "offerCount": 4,
            "activity7d": 3, "activity30d": 12,
            "recentEvents": [{"type": "OFFER", "createdAt": "..."}]
        }

    When ``expiresAt`` is missing on the name, the first token's expiry
    is used.  Non-mapping event entries are dropped.  Raises
    ``ValueError`` when no usable expiry is available, or when
    ``recentEvents`` is not a list or holds an unparsable timestamp.
    """
    name, tld = split_domain_name(str(_pick(record, "name", default="")))
    if "tld" in record and record["tld"]:
        tld = str(record["tld"]).lstrip(".").lower()

    expires_at = _pick(record, "expiresAt", "expires_at")
    if expires_at is None:
        tokens = record.get("tokens") or []
        if isinstance(tokens, list) and tokens and isinstance(tokens[0], Mapping):
            expires_at = _pick(tokens[0], "expiresAt", "expires_at")
    if expires_at is None:
        raise ValueError(f"Record for {name}.{tld} has no expiry")
    expires_at = to_utc(expires_at)

    registrar = record.get("registrar") or {}
    registrar_id = _to_int(_pick(record, "registrarId", "registrar_id"))
    registrar_name = None
    if isinstance(registrar, Mapping):
        if registrar_id is None:
            registrar_id = _to_int(registrar.get("ianaId"))
        registrar_name = registrar.get("name")
    elif isinstance(registrar, str):
        registrar_name = registrar

    raw_events = _pick(record, "recentEvents", "recent_events", default=[])
    if not isinstance(raw_events, list):
        raise ValueError(f"Record for {name}.{tld} has malformed recentEvents")
    events = tuple(
        RecentEvent(
            type=str(_pick(ev, "type", "eventType", default="UNKNOWN")),
            timestamp=to_utc(_pick(ev, "timestamp", "createdAt")),
        )
        for ev in raw_events
        if isinstance(ev, Mapping) and _pick(ev, "timestamp", "createdAt") is not None
    )
    if len(events) != len(raw_events):
        logger.debug("Dropped %d unusable events for %s.%s", len(raw_events) - len(events), name, tld)

    attrs = DomainAttributes(
        name=name,
        tld=tld,
        expires_at=expires_at,
        lock_status=bool(_pick(record, "transferLock", "lockStatus", "lock_status", default=False)),
        registrar_id=registrar_id,
        renewal_count=int(_pick(record, "renewalCount", "renewal_count", default=0)),
        offer_count=int(_pick(record, "offerCount", "activeOffers", "offer_count", default=0)),
        activity_7d=int(_pick(record, "activity7d", "activity_7d", default=0)),
        activity_30d=int(_pick(record, "activity30d", "activity_30d", default=0)),
        recent_events=events,
        registrar_name=registrar_name,
    )
    logger.debug("Mapped registry record %s", attrs.full_name)
    return attrs
