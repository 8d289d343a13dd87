"""Shared test fixtures for Dometrics.

Every test scores against a fixed reference time so expiry and
recent-event windows are deterministic.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from dometrics.engine.attributes import DomainAttributes

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_domain(
    name: str = "example",
    tld: str = "com",
    days: float = 365,
    **kwargs,
) -> DomainAttributes:
    """DomainAttributes expiring ``days`` after NOW."""
    return DomainAttributes(
        name=name,
        tld=tld,
        expires_at=NOW + timedelta(days=days),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Reference domains
# ---------------------------------------------------------------------------

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_domain():
    """Factory for DomainAttributes expiring a number of days after NOW."""
    return _make_domain


@pytest.fixture
def short_trusted() -> DomainAttributes:
    """ab.com: long runway, trusted registrar, renewed, active market."""
    return _make_domain(
        "ab", "com", days=200,
        lock_status=False,
        registrar_id=1,
        renewal_count=3,
        offer_count=5,
        activity_7d=10,
        activity_30d=20,
    )


@pytest.fixture
def long_risky() -> DomainAttributes:
    """Long random .xyz name, 10 days left, locked, unknown registrar."""
    return _make_domain(
        "myrandomlongname123", "xyz", days=10,
        lock_status=True,
        registrar_id=None,
    )


@pytest.fixture
def registry_record() -> dict:
    """Subgraph-style name record."""
    return {
        "name": "crypto.io",
        "expiresAt": "2026-06-01T12:00:00Z",
        "transferLock": False,
        "registrar": {"name": "Acme Registrar", "ianaId": "101"},
        "renewalCount": 2,
        "offerCount": 4,
        "activity7d": 3,
        "activity30d": 12,
        "recentEvents": [
            {"type": "OFFER", "createdAt": "2025-06-01T10:00:00Z"},
            {"type": "TRANSFER", "createdAt": "2025-05-01T10:00:00Z"},
        ],
    }
