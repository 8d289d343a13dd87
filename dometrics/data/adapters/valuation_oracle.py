"""Valuation Oracle -- external LLM appraisal of a domain's USD value.

The engine talks to any object implementing ``ValuationOracle``: one
``async evaluate(request)`` call returning the raw JSON-like response.
``normalize_oracle_response()`` turns that response into a validated
``OracleValuation``, defaulting and clamping each field on its own
instead of rejecting the whole payload.

``LLMValuationOracle`` is the production implementation: a chat
completion call (DeepSeek-compatible API) over ``httpx.AsyncClient``
whose reply must contain a JSON object.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Protocol

import httpx

from dometrics.config.defaults import ORACLE_DEFAULTS, ORACLE_RESPONSE
from dometrics.config.schema import OracleConfig
from dometrics.engine.attributes import DomainAttributes
from dometrics.engine.factors import ScoreFactor

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

_SYSTEM_PROMPT = (
    "You are an expert domain appraiser with deep knowledge of domain values, "
    "market trends, branding, SEO value, and commercial potential. Provide "
    "detailed, accurate domain valuations in JSON format."
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class OracleError(Exception):
    """The oracle could not produce a usable valuation."""


class OracleDisabledError(OracleError):
    """No API key configured; the oracle is switched off."""


# ---------------------------------------------------------------------------
# Request / response types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValuationRequest:
    """The name/TLD/market-data tuple sent to the oracle."""
    name: str
    tld: str
    days_until_expiry: int
    offer_count: int
    activity_30d: int
    registrar: str
    transfer_lock: bool

    @classmethod
    def from_domain(
        cls, domain: DomainAttributes, now: datetime | None = None,
    ) -> "ValuationRequest":
        return cls(
            name=domain.name,
            tld=domain.tld,
            days_until_expiry=domain.days_until_expiry(now),
            offer_count=domain.offer_count,
            activity_30d=domain.activity_30d,
            registrar=domain.registrar_name or "Unknown",
            transfer_lock=domain.lock_status,
        )


@dataclass(frozen=True)
class OracleValuation:
    """Validated oracle output."""
    current_value: float
    projected_value: float
    confidence: float
    keywords: list[str]
    category: str
    brandability: float
    memorability: float
    commercial_value: float
    factors: list[ScoreFactor] = field(default_factory=list)
    reasoning: str = ""


class ValuationOracle(Protocol):
    """Anything that can appraise a domain asynchronously."""

    async def evaluate(self, request: ValuationRequest) -> Mapping[str, Any]:
        ...


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _number(value: Any) -> float | None:
    """Finite float from a number or numeric string; None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def _given(value: Any) -> float | None:
    """Like _number, but a zero counts as not given."""
    num = _number(value)
    return num if num else None


def _bounded(value: Any, default: float, lo: float, hi: float) -> float:
    num = _given(value)
    if num is None:
        num = default
    return max(lo, min(hi, num))


def _parse_factors(raw: Any) -> list[ScoreFactor]:
    """Keep well-formed factor entries, skip the rest."""
    if not isinstance(raw, list):
        return []
    factors: list[ScoreFactor] = []
    for item in raw:
        if not isinstance(item, Mapping) or not item.get("name"):
            continue
        contribution = _number(item.get("contribution"))
        if contribution is None:
            continue
        factors.append(ScoreFactor(
            name=str(item["name"]),
            value=_number(item.get("value")) or 0.0,
            weight=_number(item.get("weight")) or 0.0,
            contribution=contribution,
            description=str(item.get("description") or ""),
        ))
    return factors


def normalize_oracle_response(raw: Any, domain_name: str) -> OracleValuation:
    """Validate an oracle payload field by field.

    - currentValue: missing/zero/non-numeric -> 1000, floored at 100
    - projectedValue: missing/zero -> current * 1.1, floored at 100
    - confidence: missing/zero -> 75, clamped to [50, 95]
    - keywordAnalysis numbers: missing/zero -> 50, clamped to [0, 100]

    Raises OracleError only when the payload is not an object at all.
    """
    if not isinstance(raw, Mapping):
        raise OracleError(f"Oracle response is not an object: {type(raw).__name__}")

    r = ORACLE_RESPONSE
    current = _given(raw.get("currentValue"))
    if current is None:
        current = r["default_current_value"]
    current = max(100.0, current)

    projected = _given(raw.get("projectedValue"))
    if projected is None:
        projected = current * r["projected_growth"]
    projected = max(100.0, projected)

    confidence = _bounded(
        raw.get("confidence"), r["default_confidence"],
        r["confidence_min"], r["confidence_max"],
    )

    ka = raw.get("keywordAnalysis")
    if not isinstance(ka, Mapping):
        ka = {}
    keywords = ka.get("keywords")
    if not isinstance(keywords, list) or not keywords:
        keywords = [domain_name]

    default_sub = r["default_sub_score"]
    return OracleValuation(
        current_value=round(current, 2),
        projected_value=round(projected, 2),
        confidence=confidence,
        keywords=[str(k) for k in keywords],
        category=str(ka.get("category") or "generic"),
        brandability=_bounded(ka.get("brandability"), default_sub, 0.0, 100.0),
        memorability=_bounded(ka.get("memorability"), default_sub, 0.0, 100.0),
        commercial_value=_bounded(ka.get("commercialValue"), default_sub, 0.0, 100.0),
        factors=_parse_factors(raw.get("factors")),
        reasoning=str(raw.get("reasoning") or ""),
    )


def extract_json_object(content: str) -> dict[str, Any]:
    """Pull the first {...} block out of an LLM reply and parse it."""
    match = _JSON_OBJECT.search(content)
    if match is None:
        raise OracleError("No JSON object found in oracle reply")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise OracleError(f"Unparsable oracle JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise OracleError("Oracle JSON is not an object")
    return parsed


# ---------------------------------------------------------------------------
# LLM-backed oracle
# ---------------------------------------------------------------------------

def build_valuation_prompt(request: ValuationRequest) -> str:
    full = f"{request.name}.{request.tld}"
    return f"""Please provide a comprehensive valuation for the domain "{full}".

Domain Details:
- Full domain: {full}
- Name part: {request.name}
- TLD: .{request.tld}
- Days until expiry: {request.days_until_expiry}
- Recent offers: {request.offer_count}
- 30-day activity: {request.activity_30d}
- Registrar: {request.registrar}
- Transfer locked: {str(request.transfer_lock).lower()}

Respond with ONLY a JSON object of this shape:
{{
  "currentValue": number (estimated current USD value),
  "projectedValue": number (6-month projected USD value),
  "confidence": number (0-100),
  "keywordAnalysis": {{
    "keywords": ["relevant", "keywords"],
    "category": "tech, finance, generic, brandable, ...",
    "brandability": number (0-100),
    "memorability": number (0-100),
    "commercialValue": number (0-100)
  }},
  "factors": [
    {{"name": "Length Premium", "value": {len(request.name)}, "weight": 0.25,
      "contribution": number, "description": "Impact of length on value"}},
    {{"name": "Keyword Value", "value": number, "weight": 0.35,
      "contribution": number, "description": "Keyword/brandability value"}},
    {{"name": "TLD Premium", "value": number, "weight": 0.20,
      "contribution": number, "description": "Value impact of .{request.tld}"}},
    {{"name": "Market Factors", "value": number, "weight": 0.20,
      "contribution": number, "description": "Market activity and demand"}}
  ],
  "reasoning": "Brief explanation of the valuation"
}}

Weigh length, keyword relevance, brandability, TLD value, comparable
sales, current market activity and risk (expiry, transfer restrictions).
"""


class LLMValuationOracle:
    """Valuation Oracle backed by a chat-completions API.

    One POST per ``evaluate()``; no retries.  Any transport problem,
    non-2xx status or unparsable reply raises ``OracleError`` (httpx
    errors propagate as-is), which the scoring engine turns into the
    algorithmic fallback.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = ORACLE_DEFAULTS["base_url"],
        model: str = ORACLE_DEFAULTS["model"],
        temperature: float = ORACLE_DEFAULTS["temperature"],
        max_tokens: int = ORACLE_DEFAULTS["max_tokens"],
        timeout: float = ORACLE_DEFAULTS["timeout_seconds"],
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client
        if not api_key:
            logger.warning("Valuation oracle API key not found - oracle disabled")

    @classmethod
    def from_config(
        cls, config: OracleConfig, client: httpx.AsyncClient | None = None,
    ) -> "LLMValuationOracle":
        return cls(
            api_key=config.resolve_api_key() if config.enabled else "",
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            client=client,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _payload(self, request: ValuationRequest) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": build_valuation_prompt(request)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": False,
        }

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> httpx.Response:
        return await client.post(
            self.base_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    async def evaluate(self, request: ValuationRequest) -> dict[str, Any]:
        if not self.enabled:
            raise OracleDisabledError("Valuation oracle has no API key")

        payload = self._payload(request)
        if self._client is not None:
            resp = await self._post(self._client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await self._post(client, payload)

        if not resp.is_success:
            raise OracleError(f"Oracle API returned {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise OracleError(f"Malformed oracle envelope: {e}") from e
        if not content:
            raise OracleError("Empty oracle reply")

        logger.debug("Oracle replied for %s.%s", request.name, request.tld)
        return extract_json_object(str(content))
