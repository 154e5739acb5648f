# backend/app/domain/jurisdiction_defaults.py
from __future__ import annotations

from dataclasses import dataclass

# Average month length used for "months since" arithmetic.
DAYS_PER_MONTH = 30.44

DEFAULT_STATE = "NSW"


@dataclass(frozen=True)
class InspectionRule:
    state: str
    routine_interval_months: int
    notice_days: int = 7


# Keep this table boring + deterministic. States not listed use the default.
_ROUTINE_INSPECTION_RULES: dict[str, InspectionRule] = {
    "QLD": InspectionRule(state="QLD", routine_interval_months=3),
    "WA": InspectionRule(state="WA", routine_interval_months=3),
    "SA": InspectionRule(state="SA", routine_interval_months=4),
}

DEFAULT_ROUTINE_INTERVAL_MONTHS = 6


def normalize_state(state: str | None) -> str:
    s = (state or "").strip().upper()
    return s or DEFAULT_STATE


def inspection_rule_for(state: str | None) -> InspectionRule:
    st = normalize_state(state)
    return _ROUTINE_INSPECTION_RULES.get(st) or InspectionRule(
        state=st, routine_interval_months=DEFAULT_ROUTINE_INTERVAL_MONTHS
    )


def routine_interval_days(state: str | None) -> float:
    return inspection_rule_for(state).routine_interval_months * DAYS_PER_MONTH
