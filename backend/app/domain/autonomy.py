# backend/app/domain/autonomy.py
from __future__ import annotations

import json
from typing import Any, Optional

# L0 = never act, L4 = act without asking.
AUTONOMY_PRESET_DEFAULTS: dict[str, dict[str, int]] = {
    "cautious": {
        "query": 4, "messages": 1, "financial": 0, "legal": 0,
        "maintenance": 1, "listings": 1, "tenant_finding": 1,
    },
    "balanced": {
        "query": 4, "messages": 3, "financial": 1, "legal": 0,
        "maintenance": 2, "listings": 2, "tenant_finding": 2,
    },
    "hands_off": {
        "query": 4, "messages": 4, "financial": 3, "legal": 1,
        "maintenance": 3, "listings": 3, "tenant_finding": 3,
    },
}

# NOTE: "rent_collection" is absent from every preset; it resolves to
# DEFAULT_LEVEL unless the owner sets an explicit override.
DEFAULT_PRESET = "balanced"
DEFAULT_LEVEL = 2
MIN_LEVEL = 0
MAX_LEVEL = 4

# Minimum level for reminder-style actions the heartbeat may take on its own.
AUTO_EXECUTE_THRESHOLD = 2


def parse_level(raw: Any) -> int:
    """
    "L3" -> 3, 3 -> 3, "3" -> 3. Anything else (missing, malformed, out of
    range) -> DEFAULT_LEVEL.
    """
    if isinstance(raw, bool):
        return DEFAULT_LEVEL
    if isinstance(raw, int):
        return raw if MIN_LEVEL <= raw <= MAX_LEVEL else DEFAULT_LEVEL

    s = str(raw or "").strip()
    if s[:1] in ("L", "l"):
        s = s[1:]
    if len(s) != 1 or not s.isdigit():
        return DEFAULT_LEVEL

    n = int(s)
    return n if MIN_LEVEL <= n <= MAX_LEVEL else DEFAULT_LEVEL


def overrides_of(settings: Any) -> dict[str, Any]:
    if settings is None:
        return {}
    raw = getattr(settings, "category_overrides_json", None)
    if not raw:
        return {}
    try:
        v = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return v if isinstance(v, dict) else {}


def resolve_level(settings: Optional[Any], category: str) -> int:
    """
    Effective autonomy level for one category.

    override (if present) > preset default > DEFAULT_LEVEL.
    `settings` is an AutonomySettings row or None (owner never configured the agent).
    """
    override = overrides_of(settings).get(category)
    if override not in (None, ""):
        return parse_level(override)

    preset = (getattr(settings, "preset", None) or DEFAULT_PRESET) if settings is not None else DEFAULT_PRESET
    table = AUTONOMY_PRESET_DEFAULTS.get(preset) or AUTONOMY_PRESET_DEFAULTS[DEFAULT_PRESET]
    return table.get(category, DEFAULT_LEVEL)


def can_auto_execute(settings: Optional[Any], category: str, threshold: int = AUTO_EXECUTE_THRESHOLD) -> bool:
    return resolve_level(settings, category) >= threshold
