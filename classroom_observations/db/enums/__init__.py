"""Enum definitions for application constants."""

from classroom_observations.db.enums.observations import (
    DEFAULT_OBSERVATION_STATUS,
    ObservationStatus,
)

__all__ = [
    "DEFAULT_OBSERVATION_STATUS",
    "ObservationStatus",
]
