"""Event system: bus and conversion lifecycle event types."""

from flowbridge.events.bus import EventBus
from flowbridge.events.types import (
    ConversionBlocked,
    ConversionCompleted,
    PhaseStarted,
    SectionCompleted,
    SectionStarted,
)

__all__ = [
    "ConversionBlocked",
    "ConversionCompleted",
    "EventBus",
    "PhaseStarted",
    "SectionCompleted",
    "SectionStarted",
]
