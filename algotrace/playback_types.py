"""Playback data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from . import constants


class PlaybackMode(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class LogEntry:
    index: int
    kind: str
    description: str

    def to_dict(self) -> dict:
        return {"index": self.index, "kind": self.kind, "description": self.description}


@dataclass(frozen=True)
class PlaybackConfig:
    """Groups playback timing and log configuration."""

    delay_ms: int = constants.DEFAULT_DELAY_MS
    log_capacity: int = constants.DEFAULT_LOG_CAPACITY

    def __post_init__(self):
        if not constants.MIN_DELAY_MS <= self.delay_ms <= constants.MAX_DELAY_MS:
            raise ValueError(
                f"delay_ms must lie between {constants.MIN_DELAY_MS} and "
                f"{constants.MAX_DELAY_MS}, got {self.delay_ms}"
            )
        if not constants.MIN_LOG_CAPACITY <= self.log_capacity <= constants.MAX_LOG_CAPACITY:
            raise ValueError(
                f"log_capacity must lie between {constants.MIN_LOG_CAPACITY} and "
                f"{constants.MAX_LOG_CAPACITY}, got {self.log_capacity}"
            )

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @classmethod
    def for_builder(cls, builder: Any) -> PlaybackConfig:
        """Defaults declared by a builder (class or instance)."""
        return cls(delay_ms=builder.DELAY_MS, log_capacity=builder.LOG_CAPACITY)


@dataclass(frozen=True)
class PlaybackState:
    """Read-only view of a controller at one moment."""

    mode: PlaybackMode
    cursor: int
    total: int
    watermark: int
    log: tuple[LogEntry, ...] = ()

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "cursor": self.cursor,
            "total": self.total,
            "watermark": self.watermark,
            "log": [entry.to_dict() for entry in self.log],
        }
