"""
Configuration management using Pydantic models fed from the environment.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from pydantic import BaseModel, field_validator, model_validator

from room_scheduler.domain.timemath import MAX_BOOKING_MINUTES, MIN_BOOKING_MINUTES

ENV_PREFIX = "ROOM_SCHEDULER_"


class Settings(BaseModel):
    """Runtime settings for the scheduler service."""
    log_level: str = "INFO"
    max_search_days: int = 30
    min_booking_minutes: int = MIN_BOOKING_MINUTES
    max_booking_minutes: int = MAX_BOOKING_MINUTES
    seed_sample_data: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept any level name known to the logging module."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("max_search_days", "min_booking_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @model_validator(mode="after")
    def validate_booking_bounds(self) -> "Settings":
        """Ensure the allowed booking length range is not empty."""
        if self.max_booking_minutes < self.min_booking_minutes:
            raise ValueError("max_booking_minutes must not be below min_booking_minutes")
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from ``ROOM_SCHEDULER_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            pydantic.ValidationError: If a value cannot be parsed or is invalid
        """
        source = os.environ if environ is None else environ
        data = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in source:
                data[name] = source[key]
        return cls(**data)
