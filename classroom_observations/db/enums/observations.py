"""Observation-related enums."""

from enum import Enum


class ObservationStatus(str, Enum):
    """
    Observation lifecycle status.

    - DRAFT: session in progress, entries may be appended
    - COMPLETED: recording stopped, end time set
    - REVIEWED: report saved onto the observation (terminal)
    """

    DRAFT = "draft"
    COMPLETED = "completed"
    REVIEWED = "reviewed"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid status."""
        return value in cls._value2member_map_


DEFAULT_OBSERVATION_STATUS = ObservationStatus.DRAFT
