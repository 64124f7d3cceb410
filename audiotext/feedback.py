from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class ImpactLevel(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SOFT = "soft"
    RIGID = "rigid"


class FeedbackSink(Protocol):
    def tick(self) -> None: ...

    def impact(self, level: ImpactLevel) -> None: ...


class NullFeedbackSink:
    """Desktop builds have no haptics engine."""

    def tick(self) -> None:
        pass

    def impact(self, level: ImpactLevel) -> None:
        pass


class LoggingFeedbackSink:
    def __init__(self):
        self.ticks = 0

    def tick(self) -> None:
        self.ticks += 1
        logger.debug("feedback tick #%d", self.ticks)

    def impact(self, level: ImpactLevel) -> None:
        logger.debug("feedback impact: %s", level.value)


def play_pause_toggle(sink: FeedbackSink) -> None:
    sink.impact(ImpactLevel.SOFT)


def equalizer_adjust(sink: FeedbackSink) -> None:
    sink.impact(ImpactLevel.RIGID)
