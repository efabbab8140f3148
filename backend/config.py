"""
Dashboard Configuration

Layered, frozen configuration with environment overrides.

Config is fixed for the lifetime of a dashboard instance.
Changing it means building a new instance.

ENVIRONMENT OVERRIDES:
======================
DASHBOARD_MIN_YEAR, DASHBOARD_MAX_YEAR
DASHBOARD_MIN_SPEED, DASHBOARD_MAX_SPEED, DASHBOARD_SPEED_STEP
DASHBOARD_LOAD_DELAY_MS, DASHBOARD_SEED
DASHBOARD_FRAME_INTERVAL_MS
DASHBOARD_LOG_LEVEL
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Tuple
import math
import os

from .contracts.base import ConfigurationError, ErrorCode


DEFAULT_MIN_YEAR = 1948
DEFAULT_MAX_YEAR = 2024

DEFAULT_MIN_SPEED = 0.5
DEFAULT_MAX_SPEED = 2.0
DEFAULT_SPEED_STEP = 0.5
DEFAULT_INITIAL_SPEED = 1.0

DEFAULT_LOAD_DELAY_MS = 800
DEFAULT_FRAME_INTERVAL_MS = 16

ENV_PREFIX = "DASHBOARD_"


@dataclass(frozen=True)
class TimelineConfig:
    """Year range and playback speed bounds."""
    min_year: int = DEFAULT_MIN_YEAR
    max_year: int = DEFAULT_MAX_YEAR
    min_speed: float = DEFAULT_MIN_SPEED
    max_speed: float = DEFAULT_MAX_SPEED
    speed_step: float = DEFAULT_SPEED_STEP
    initial_speed: float = DEFAULT_INITIAL_SPEED

    def __post_init__(self):
        for name in ('min_year', 'max_year'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer, got {value!r}",
                    ErrorCode.INVALID_BOUNDS
                )
        if self.min_year > self.max_year:
            raise ConfigurationError(
                f"min_year {self.min_year} is after max_year {self.max_year}",
                ErrorCode.INVALID_BOUNDS
            )
        for name in ('min_speed', 'max_speed', 'speed_step', 'initial_speed'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive finite number, got {value!r}",
                    ErrorCode.INVALID_CONFIG_VALUE
                )
        if self.min_speed > self.max_speed:
            raise ConfigurationError(
                f"min_speed {self.min_speed} exceeds max_speed {self.max_speed}",
                ErrorCode.INVALID_CONFIG_VALUE
            )
        if not self.min_speed <= self.initial_speed <= self.max_speed:
            raise ConfigurationError(
                f"initial_speed {self.initial_speed} outside "
                f"[{self.min_speed}, {self.max_speed}]",
                ErrorCode.INVALID_CONFIG_VALUE
            )


@dataclass(frozen=True)
class DatasetConfig:
    """Default dataset loading."""
    load_delay_ms: float = DEFAULT_LOAD_DELAY_MS
    seed: Optional[int] = None  # None: casualties and jitter vary per run

    def __post_init__(self):
        if not math.isfinite(self.load_delay_ms) or self.load_delay_ms < 0:
            raise ConfigurationError(
                f"load_delay_ms must be >= 0, got {self.load_delay_ms!r}",
                ErrorCode.INVALID_CONFIG_VALUE
            )


@dataclass(frozen=True)
class PlaybackConfig:
    """Frame loop settings for the live clock."""
    frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS

    def __post_init__(self):
        if not math.isfinite(self.frame_interval_ms) or self.frame_interval_ms <= 0:
            raise ConfigurationError(
                f"frame_interval_ms must be > 0, got {self.frame_interval_ms!r}",
                ErrorCode.INVALID_CONFIG_VALUE
            )


@dataclass
class DashboardConfig:
    """Unified configuration for one dashboard instance."""
    timeline: TimelineConfig = None
    dataset: DatasetConfig = None
    playback: PlaybackConfig = None
    party_labels: Tuple[str, str] = ("Party A", "Party B")
    log_level: str = "INFO"

    def __post_init__(self):
        self.timeline = self.timeline or TimelineConfig()
        self.dataset = self.dataset or DatasetConfig()
        self.playback = self.playback or PlaybackConfig()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> DashboardConfig:
        """Build config from DASHBOARD_* environment variables."""
        env = os.environ if environ is None else environ

        def read(name: str, convert: Callable[[str], object], default: object) -> object:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return convert(raw.strip())
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{name}: {raw!r}",
                    ErrorCode.INVALID_CONFIG_VALUE
                ) from None

        timeline = TimelineConfig(
            min_year=read("MIN_YEAR", int, DEFAULT_MIN_YEAR),
            max_year=read("MAX_YEAR", int, DEFAULT_MAX_YEAR),
            min_speed=read("MIN_SPEED", float, DEFAULT_MIN_SPEED),
            max_speed=read("MAX_SPEED", float, DEFAULT_MAX_SPEED),
            speed_step=read("SPEED_STEP", float, DEFAULT_SPEED_STEP),
        )
        dataset = DatasetConfig(
            load_delay_ms=read("LOAD_DELAY_MS", float, DEFAULT_LOAD_DELAY_MS),
            seed=read("SEED", int, None),
        )
        playback = PlaybackConfig(
            frame_interval_ms=read("FRAME_INTERVAL_MS", float, DEFAULT_FRAME_INTERVAL_MS),
        )
        return cls(
            timeline=timeline,
            dataset=dataset,
            playback=playback,
            log_level=read("LOG_LEVEL", str, "INFO"),
        )
