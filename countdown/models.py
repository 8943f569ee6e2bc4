"""Pydantic models — single source of truth for all data types."""

from __future__ import annotations

import enum
import math
from typing import Optional

from pydantic import BaseModel, Field


class TimerState(str, enum.Enum):
    """Timer lifecycle states."""

    RUNNING = "Running"
    PAUSED = "Paused"
    IDLE = "Idle"


class TimerConfig(BaseModel):
    """Constructor inputs for a countdown timer."""

    duration: float = Field(ge=0)
    loop: bool = False
    loop_limit: Optional[int] = Field(default=None, ge=0)
    label: str = "Timer"

    @property
    def effective_loop(self) -> bool:
        """Looping with a limit of zero is the same as not looping."""
        return self.loop and self.loop_limit != 0

    @property
    def effective_limit(self) -> float:
        if not self.effective_loop:
            return 0
        if self.loop_limit is None:
            return math.inf
        return self.loop_limit


class TimerSnapshot(BaseModel):
    """Point-in-time view of a timer (status command / display panel)."""

    label: str = "Timer"
    duration: float
    remaining: float
    state: TimerState
    loop: bool = False
    loop_limit: float = 0
    loops_completed: int = Field(default=0, ge=0)

    @property
    def is_unbounded(self) -> bool:
        return self.loop and math.isinf(self.loop_limit)


class AppConfig(BaseModel):
    """Application configuration (persisted to ~/.config/countdown/config.json)."""

    default_seconds: int = Field(default=60, gt=0)
    tick_interval: float = Field(default=0.1, gt=0, le=1)
    bell: bool = True
