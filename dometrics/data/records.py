"""Load registry-style domain records from a YAML or JSON file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def load_domain_records(path: str | Path) -> list[dict[str, Any]]:
    """Read a list of name records.

    Accepts a top-level list or a mapping with a ``domains`` (or
    ``names``) list.  JSON is valid YAML, so one parser covers both.
    """
    path = Path(path).expanduser()
    with open(path) as f:
        raw = yaml.safe_load(f)

    if isinstance(raw, dict):
        raw = raw.get("domains", raw.get("names"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of domain records")

    records = [r for r in raw if isinstance(r, dict)]
    if len(records) != len(raw):
        logger.warning("%s: ignored %d non-mapping entries", path, len(raw) - len(records))
    logger.info("Loaded %d domain records from %s", len(records), path)
    return records
