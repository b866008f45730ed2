"""Entry service - append-only behavioral data points on an observation."""

import json
import logging
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from classroom_observations.core.exceptions import InvalidStatusTransition
from classroom_observations.core.structured_logging import build_log_context
from classroom_observations.db.enums import ObservationStatus
from classroom_observations.db.models import ObservationEntry
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.observation import EntryCreate
from classroom_observations.services import observation_service
from classroom_observations.utils.clock import (
    format_entry_timestamp,
    format_time_of_day,
    normalize_time_of_day,
    now_local,
)
from classroom_observations.utils.validation import parse_payload

logger = logging.getLogger(__name__)


def list_entries(
    db: Session, principal: Principal, observation_id: UUID
) -> list[ObservationEntry]:
    """Entries of an owned observation, ordered by time of day."""
    observation_service.get_owned_observation(db, principal, observation_id)
    return (
        db.query(ObservationEntry)
        .filter(ObservationEntry.observation_id == observation_id)
        .order_by(ObservationEntry.time_of_day, ObservationEntry.created_at)
        .all()
    )


def append_entry(
    db: Session, principal: Principal, observation_id: UUID, payload: Any
) -> ObservationEntry:
    """
    Append one entry to a draft observation.

    Missing timestamp/time_of_day are filled from the server clock.

    Raises:
        NotFound, Forbidden: see get_owned_observation
        ValidationError: behavior or context missing, malformed numbers
        InvalidStatusTransition: observation is no longer recording
    """
    observation = observation_service.get_owned_observation(db, principal, observation_id)
    data = parse_payload(EntryCreate, payload)
    if observation.status != ObservationStatus.DRAFT.value:
        raise InvalidStatusTransition(
            f"Entries can only be added while the observation is draft (status: {observation.status})"
        )

    now = None
    if data.timestamp is None or data.time_of_day is None:
        now = now_local()

    entry = ObservationEntry(
        observation_id=observation.id,
        timestamp=data.timestamp or format_entry_timestamp(now),
        time_of_day=normalize_time_of_day(data.time_of_day)
        if data.time_of_day
        else format_time_of_day(now),
        behavior=data.behavior,
        context=data.context,
        antecedent=data.antecedent,
        consequence=data.consequence,
        setting=data.setting,
        peers=data.peers,
        duration=data.duration,
        intensity=data.intensity,
        frequency=data.frequency,
        intervention=data.intervention,
        notes=data.notes,
        tags=json.dumps(data.tags) if data.tags is not None else None,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info(
        "Observation entry added",
        extra=build_log_context(
            user_id=str(principal.user_id), observation_id=str(observation_id)
        ),
    )
    return entry
