from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from app.domain.autonomy import (
    AUTONOMY_PRESET_DEFAULTS,
    DEFAULT_LEVEL,
    can_auto_execute,
    parse_level,
    resolve_level,
)


def _settings(preset="balanced", overrides=None):
    return SimpleNamespace(preset=preset, category_overrides_json=json.dumps(overrides or {}))


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("L0", 0),
        ("L3", 3),
        ("l4", 4),
        ("2", 2),
        (1, 1),
        ("L9", DEFAULT_LEVEL),
        (7, DEFAULT_LEVEL),
        ("banana", DEFAULT_LEVEL),
        ("", DEFAULT_LEVEL),
        (None, DEFAULT_LEVEL),
        (True, DEFAULT_LEVEL),
    ],
)
def test_parse_level(raw, expected):
    assert parse_level(raw) == expected


def test_no_settings_row_uses_balanced_preset():
    assert resolve_level(None, "messages") == AUTONOMY_PRESET_DEFAULTS["balanced"]["messages"]
    assert resolve_level(None, "legal") == 0


def test_preset_tables_drive_levels():
    assert resolve_level(_settings("cautious"), "messages") == 1
    assert resolve_level(_settings("hands_off"), "financial") == 3


def test_override_beats_preset():
    s = _settings("cautious", {"messages": "L4"})
    assert resolve_level(s, "messages") == 4
    assert resolve_level(s, "maintenance") == 1


def test_malformed_override_falls_back_to_default_level():
    s = _settings("hands_off", {"messages": "Lx"})
    assert resolve_level(s, "messages") == DEFAULT_LEVEL


def test_rent_collection_is_not_in_any_preset():
    for table in AUTONOMY_PRESET_DEFAULTS.values():
        assert "rent_collection" not in table

    assert resolve_level(_settings("cautious"), "rent_collection") == DEFAULT_LEVEL
    assert resolve_level(_settings("hands_off"), "rent_collection") == DEFAULT_LEVEL
    assert resolve_level(_settings("balanced", {"rent_collection": "L1"}), "rent_collection") == 1


def test_unknown_preset_uses_balanced_table():
    assert resolve_level(_settings("custom"), "messages") == AUTONOMY_PRESET_DEFAULTS["balanced"]["messages"]


def test_unparseable_overrides_json_is_ignored():
    s = SimpleNamespace(preset="cautious", category_overrides_json="{not json")
    assert resolve_level(s, "messages") == 1


def test_can_auto_execute_threshold():
    assert can_auto_execute(_settings("balanced", {"rent_collection": "L2"}), "rent_collection")
    assert not can_auto_execute(_settings("balanced", {"rent_collection": "L1"}), "rent_collection")
