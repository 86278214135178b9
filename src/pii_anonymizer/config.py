"""YAML/dict config loader for pii-anonymizer.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    pii_anonymizer:
      style: french              # french | neutral | labels
      skip_types:
        - phone
      large_input_threshold: 5000
"""

from __future__ import annotations
import random
from pathlib import Path
from typing import Any

import yaml

from .session import DEFAULT_LARGE_INPUT_THRESHOLD, AnonymizationSession
from .types import ENTITY_TYPES, REPLACEMENT_STYLES, check_entity_type


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline).

    Raises ValueError for an unknown style or entity type.
    """
    data = data or {}
    # Support nested under "pii_anonymizer" key or flat
    if "pii_anonymizer" in data:
        data = data["pii_anonymizer"] or {}

    style = data.get("style", "french")
    if style not in REPLACEMENT_STYLES:
        raise ValueError(f"Unknown replacement style: {style!r}")

    skip_types = {check_entity_type(t) for t in data.get("skip_types") or []}
    return {
        "style": style,
        "enabled": {t: t not in skip_types for t in ENTITY_TYPES},
        "large_input_threshold": int(
            data.get("large_input_threshold", DEFAULT_LARGE_INPUT_THRESHOLD)
        ),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    with open(path, encoding="utf-8") as f:
        return load_config(yaml.safe_load(f))


def create_session(
    config: dict[str, Any] | None = None,
    *,
    seed: int | None = None,
) -> AnonymizationSession:
    """Create a session from a raw or already normalized config dict."""
    cfg = config if config is not None and "enabled" in config else load_config(config)
    return AnonymizationSession(
        style=cfg["style"],
        enabled=dict(cfg["enabled"]),
        large_input_threshold=cfg["large_input_threshold"],
        rng=random.Random(seed),
    )
