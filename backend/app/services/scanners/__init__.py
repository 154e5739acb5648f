from __future__ import annotations

from .applications import NewApplicationScanner
from .base import (
    AutoAction,
    Candidate,
    ExecutedAction,
    ScanResult,
    ScanScope,
    Scanner,
    run_all,
    run_scanner,
)
from .inspections import OverdueInspectionScanner, RoutineInspectionDueScanner
from .lease_expiry import LeaseExpiryScanner
from .listings import StaleListingScanner
from .overdue_rent import OverdueRentScanner

# Run order matters only for log readability; rules are independent.
DEFAULT_SCANNERS: tuple[Scanner, ...] = (
    LeaseExpiryScanner(),
    OverdueRentScanner(),
    NewApplicationScanner(),
    StaleListingScanner(),
    OverdueInspectionScanner(),
    RoutineInspectionDueScanner(),
)

__all__ = [
    "AutoAction",
    "Candidate",
    "DEFAULT_SCANNERS",
    "ExecutedAction",
    "LeaseExpiryScanner",
    "NewApplicationScanner",
    "OverdueInspectionScanner",
    "OverdueRentScanner",
    "RoutineInspectionDueScanner",
    "ScanResult",
    "ScanScope",
    "Scanner",
    "StaleListingScanner",
    "run_all",
    "run_scanner",
]
