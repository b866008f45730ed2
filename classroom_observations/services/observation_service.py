"""
Observation service - session lifecycle for classroom observations.

Every operation is scoped to the observer who owns the observation. Checks
run in a fixed order: existence, ownership, field validity, then status.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from classroom_observations.core.exceptions import (
    Forbidden,
    InvalidStatusTransition,
    NotFound,
    ValidationError,
)
from classroom_observations.core.structured_logging import build_log_context
from classroom_observations.db.enums import ObservationStatus
from classroom_observations.db.models import (
    Classroom,
    Observation,
    Student,
    Teacher,
)
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.observation import (
    ObservationCreate,
    ObservationStop,
    ObservationUpdate,
    ReportDraft,
    ReportSave,
)
from classroom_observations.services.report_service import (
    SECTION_SEPARATOR,
    ReportAssembler,
    ReportText,
    assemble_report,
    format_report_notes,
    parse_report_notes,
)
from classroom_observations.utils.clock import format_time_of_day, now_local
from classroom_observations.utils.validation import parse_payload

logger = logging.getLogger(__name__)

# Status changes permitted from each status. Staying put is always allowed.
ALLOWED_TRANSITIONS: dict[ObservationStatus, set[ObservationStatus]] = {
    ObservationStatus.DRAFT: {ObservationStatus.DRAFT, ObservationStatus.COMPLETED},
    ObservationStatus.COMPLETED: {ObservationStatus.COMPLETED, ObservationStatus.REVIEWED},
    ObservationStatus.REVIEWED: {ObservationStatus.REVIEWED},
}

# Fields that can be cleared (set to None) by an update
CLEARABLE_FIELDS = {"end_time", "notes"}


def _graph_options():
    return (
        selectinload(Observation.student).selectinload(Student.school),
        selectinload(Observation.student).selectinload(Student.primary_idea_category),
        selectinload(Observation.student).selectinload(Student.secondary_idea_category),
        selectinload(Observation.classroom),
        selectinload(Observation.teacher),
        selectinload(Observation.observer),
        selectinload(Observation.entries),
    )


def _log_context(principal: Principal, observation_id: UUID) -> dict:
    return build_log_context(
        user_id=str(principal.user_id), observation_id=str(observation_id)
    )


def can_transition(current: str, target: ObservationStatus) -> bool:
    if not ObservationStatus.has_value(current):
        return False
    return target in ALLOWED_TRANSITIONS[ObservationStatus(current)]


def ensure_transition(observation: Observation, target: ObservationStatus) -> None:
    """
    Raises:
        InvalidStatusTransition: target is not reachable from the current status
    """
    if not can_transition(observation.status, target):
        raise InvalidStatusTransition(
            f"Cannot change observation status from {observation.status} to {target.value}"
        )


# =============================================================================
# Lookup
# =============================================================================

def get_observation(db: Session, observation_id: UUID) -> Observation | None:
    return (
        db.query(Observation)
        .options(*_graph_options())
        .filter(Observation.id == observation_id)
        .first()
    )


def get_owned_observation(
    db: Session, principal: Principal, observation_id: UUID
) -> Observation:
    """
    Load an observation the principal owns.

    Raises:
        NotFound: no observation with this id
        Forbidden: observation belongs to another observer
    """
    observation = get_observation(db, observation_id)
    if not observation:
        raise NotFound("Observation not found")
    if observation.observer_id != principal.user_id:
        logger.warning(
            "Observation access denied", extra=_log_context(principal, observation_id)
        )
        raise Forbidden()
    return observation


def list_observations(
    db: Session,
    principal: Principal,
    student_id: UUID | None = None,
    status: ObservationStatus | None = None,
    q: str | None = None,
) -> list[Observation]:
    """
    List the principal's observations, newest date first.

    q matches student name, classroom name, teacher name or status,
    case-insensitively.
    """
    query = (
        db.query(Observation)
        .options(*_graph_options())
        .filter(Observation.observer_id == principal.user_id)
    )
    if student_id:
        query = query.filter(Observation.student_id == student_id)
    if status:
        query = query.filter(Observation.status == status.value)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = (
            query.join(Observation.student)
            .join(Observation.classroom)
            .join(Observation.teacher)
            .filter(
                or_(
                    Student.first_name.ilike(pattern),
                    Student.last_name.ilike(pattern),
                    (Student.first_name + " " + Student.last_name).ilike(pattern),
                    Classroom.name.ilike(pattern),
                    Teacher.first_name.ilike(pattern),
                    Teacher.last_name.ilike(pattern),
                    (Teacher.first_name + " " + Teacher.last_name).ilike(pattern),
                    Observation.status.ilike(pattern),
                )
            )
        )
    return query.order_by(Observation.date.desc(), Observation.created_at.desc()).all()


# =============================================================================
# Lifecycle
# =============================================================================

def create_observation(
    db: Session, principal: Principal, data: ObservationCreate
) -> Observation:
    """
    Start a new draft observation owned by the principal.

    Raises:
        NotFound: student, classroom or teacher does not exist
        ValidationError: student is inactive
    """
    student = db.get(Student, data.student_id)
    if not student:
        raise NotFound("Student not found")
    if not db.get(Classroom, data.classroom_id):
        raise NotFound("Classroom not found")
    if not db.get(Teacher, data.teacher_id):
        raise NotFound("Teacher not found")
    if not student.is_active:
        raise ValidationError("Cannot observe an inactive student")

    observation = Observation(
        student_id=data.student_id,
        classroom_id=data.classroom_id,
        teacher_id=data.teacher_id,
        observer_id=principal.user_id,
        date=data.date,
        start_time=data.start_time,
        end_time=data.end_time,
        setting=data.setting,
        total_students=data.total_students,
        total_teachers=data.total_teachers,
        purpose=data.purpose,
        notes=data.notes,
        status=ObservationStatus.DRAFT.value,
    )
    db.add(observation)
    db.commit()

    logger.info("Observation created", extra=_log_context(principal, observation.id))
    return get_observation(db, observation.id)


def update_observation(
    db: Session, principal: Principal, observation_id: UUID, payload: Any
) -> Observation:
    """
    Apply a partial update.

    Only fields present in the payload are applied. end_time and notes are
    cleared by null; null is ignored for every other field. A status change
    must follow draft -> completed -> reviewed.
    """
    observation = get_owned_observation(db, principal, observation_id)
    data = parse_payload(ObservationUpdate, payload)
    update_data = data.model_dump(exclude_unset=True)

    status = update_data.pop("status", None)
    if status is not None:
        ensure_transition(observation, status)

    for field, value in update_data.items():
        if value is None and field not in CLEARABLE_FIELDS:
            continue
        setattr(observation, field, value)
    if status is not None:
        observation.status = status.value

    db.commit()
    db.expire_all()
    logger.info("Observation updated", extra=_log_context(principal, observation_id))
    return get_observation(db, observation_id)


def stop_observation(
    db: Session, principal: Principal, observation_id: UUID, payload: Any
) -> Observation:
    """
    Stop recording: set end_time and mark the observation completed.

    end_time defaults to the server clock. Stopping again while completed
    overwrites end_time.
    """
    observation = get_owned_observation(db, principal, observation_id)
    data = parse_payload(ObservationStop, payload)
    ensure_transition(observation, ObservationStatus.COMPLETED)

    observation.end_time = data.end_time or format_time_of_day(now_local())
    observation.status = ObservationStatus.COMPLETED.value
    db.commit()
    db.expire_all()

    logger.info("Observation stopped", extra=_log_context(principal, observation_id))
    return get_observation(db, observation_id)


def _assemble(observation: Observation, assembler: ReportAssembler) -> ReportText:
    return assembler(observation.student.first_name, observation.entries)


def get_report_draft(
    db: Session,
    principal: Principal,
    observation_id: UUID,
    assembler: ReportAssembler = assemble_report,
) -> ReportDraft:
    """
    Report text for the edit form.

    A reviewed observation returns its saved text; otherwise the text is
    assembled from the entries and not persisted.
    """
    observation = get_owned_observation(db, principal, observation_id)
    if observation.status == ObservationStatus.REVIEWED.value:
        saved = parse_report_notes(observation.notes)
        if saved:
            return ReportDraft(
                observation_id=observation.id,
                summary=saved.summary,
                recommendations=saved.recommendations,
                source="saved",
            )
    report = _assemble(observation, assembler)
    return ReportDraft(
        observation_id=observation.id,
        summary=report.summary,
        recommendations=report.recommendations,
        source="generated",
    )


def save_report(
    db: Session,
    principal: Principal,
    observation_id: UUID,
    payload: Any,
    assembler: ReportAssembler = assemble_report,
) -> Observation:
    """
    Save the report onto the observation notes and mark it reviewed.

    Sections missing from the payload fall back to the assembled text.
    A draft observation must be stopped first.
    """
    observation = get_owned_observation(db, principal, observation_id)
    data = parse_payload(ReportSave, payload)
    if data.summary is not None and SECTION_SEPARATOR in data.summary:
        raise ValidationError("Summary cannot contain a RECOMMENDATIONS: section heading")
    ensure_transition(observation, ObservationStatus.REVIEWED)

    summary, recommendations = data.summary, data.recommendations
    if summary is None or recommendations is None:
        generated = _assemble(observation, assembler)
        summary = summary if summary is not None else generated.summary
        recommendations = (
            recommendations if recommendations is not None else generated.recommendations
        )

    observation.notes = format_report_notes(summary, recommendations)
    observation.status = ObservationStatus.REVIEWED.value
    db.commit()
    db.expire_all()

    logger.info("Observation report saved", extra=_log_context(principal, observation_id))
    return get_observation(db, observation_id)


def delete_observation(db: Session, principal: Principal, observation_id: UUID) -> None:
    """Hard delete an observation together with its entries."""
    observation = get_owned_observation(db, principal, observation_id)
    db.delete(observation)
    db.commit()
    logger.info("Observation deleted", extra=_log_context(principal, observation_id))
