"""Trigger engine, hotel rule set and stored procedures."""

from .engine import TriggerContext, TriggerEngine
from .procedures import PROCEDURES
from .rules import mark_overdue_housekeeping, register_hotel_rules

__all__ = [
    "TriggerContext",
    "TriggerEngine",
    "PROCEDURES",
    "mark_overdue_housekeeping",
    "register_hotel_rules",
]
