"""Property-based tests using Hypothesis.

Invariants that should hold for ANY input, including nonsense counts:
- Sub-scores always in [0, 100]
- Dollar values never below the $100 floor
- More offers never lower the rarity score
- Scoring is deterministic
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from dometrics.engine.attributes import DomainAttributes, RecentEvent
from dometrics.engine.factors import ScoreFactor, top_factors
from dometrics.engine.scorer import compute_scores_sync
from dometrics.engine.subscores import (
    calc_forecast_score,
    calc_momentum_score,
    calc_rarity_score,
    expiry_risk,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

labels = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=0, max_size=30)
tlds = st.sampled_from(["com", "net", "io", "xyz", "eth", "defi", "nft", "dao", "zz"])
counts = st.integers(min_value=-10, max_value=10_000)
scores_0_100 = st.floats(min_value=0.0, max_value=100.0, allow_nan=False)

events = st.lists(
    st.builds(
        RecentEvent,
        type=st.sampled_from(["OFFER", "TRANSFER", "RENEWAL"]),
        timestamp=st.integers(min_value=-24 * 30, max_value=24).map(
            lambda h: NOW + timedelta(hours=h)
        ),
    ),
    max_size=10,
).map(tuple)


@st.composite
def domains(draw) -> DomainAttributes:
    return DomainAttributes(
        name=draw(labels),
        tld=draw(tlds),
        expires_at=NOW + timedelta(days=draw(st.integers(min_value=-2000, max_value=5000))),
        lock_status=draw(st.booleans()),
        registrar_id=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=200))),
        renewal_count=draw(counts),
        offer_count=draw(counts),
        activity_7d=draw(counts),
        activity_30d=draw(counts),
        recent_events=draw(events),
    )


# ---------------------------------------------------------------------------
# Range invariants
# ---------------------------------------------------------------------------

class TestRanges:

    @given(domain=domains())
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_scores_in_range(self, domain):
        scores = compute_scores_sync(domain, now=NOW)
        for value in (scores.risk, scores.rarity, scores.momentum, scores.forecast):
            assert 0.0 <= value <= 100.0

    @given(domain=domains())
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_values_floored(self, domain):
        scores = compute_scores_sync(domain, now=NOW)
        assert scores.current_value >= 100.0
        assert scores.projected_value >= 100.0
        assert 0.0 <= scores.value_confidence <= 95.0

    @given(days=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False))
    def test_expiry_risk_bounded(self, days):
        assert 0.0 <= expiry_risk(days) <= 100.0

    @given(risk=scores_0_100, rarity=scores_0_100, momentum=scores_0_100)
    def test_forecast_band_contains_forecast(self, risk, rarity, momentum):
        result = calc_forecast_score(risk, rarity, momentum)
        assert 0.0 <= result["forecast"] <= 100.0
        assert result["low"] <= result["forecast"] <= result["high"] + 1e-9


# ---------------------------------------------------------------------------
# Monotonicity
# ---------------------------------------------------------------------------

class TestMonotonicity:

    @given(domain=domains(), extra=st.integers(min_value=1, max_value=100))
    def test_more_offers_never_lower_rarity(self, domain, extra):
        if domain.offer_count < 0:
            domain = replace(domain, offer_count=0)
        more = replace(domain, offer_count=domain.offer_count + extra)
        before, _ = calc_rarity_score(domain)
        after, _ = calc_rarity_score(more)
        assert after >= before

    @given(domain=domains(), extra=st.integers(min_value=1, max_value=100))
    def test_offers_do_not_move_momentum(self, domain, extra):
        more = replace(domain, offer_count=domain.offer_count + extra)
        assert calc_momentum_score(domain, now=NOW)[0] == calc_momentum_score(more, now=NOW)[0]

    @given(risk_a=scores_0_100, risk_b=scores_0_100)
    def test_risk_never_raises_forecast(self, risk_a, risk_b):
        lo, hi = sorted((risk_a, risk_b))
        assert calc_forecast_score(hi, 50.0, 50.0)["forecast"] <= \
            calc_forecast_score(lo, 50.0, 50.0)["forecast"]


# ---------------------------------------------------------------------------
# Determinism and ordering
# ---------------------------------------------------------------------------

class TestDeterminism:

    @given(domain=domains())
    @settings(max_examples=50)
    def test_repeatable(self, domain):
        assert compute_scores_sync(domain, now=NOW).to_dict() == \
            compute_scores_sync(domain, now=NOW).to_dict()

    @given(contribs=st.lists(st.floats(min_value=-1e6, max_value=1e6, allow_nan=False), max_size=12),
           n=st.integers(min_value=0, max_value=12))
    def test_top_factors_sorted(self, contribs, n):
        factors = [ScoreFactor(f"f{i}", 0, 0, c, "") for i, c in enumerate(contribs)]
        top = top_factors(factors, n)
        assert len(top) == min(n, len(factors))
        mags = [abs(f.contribution) for f in top]
        assert mags == sorted(mags, reverse=True)
