"""Student service - roster management with soft delete."""

import logging
from collections import defaultdict
from typing import Any
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from classroom_observations.core.exceptions import NotFound, ValidationError
from classroom_observations.core.structured_logging import build_log_context
from classroom_observations.db.models import (
    IdeaCategory,
    Observation,
    School,
    Student,
)
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.student import (
    StudentCreate,
    StudentDetail,
    StudentListItem,
    StudentObservationRead,
    StudentObservationSummary,
    StudentRead,
    StudentUpdate,
)
from classroom_observations.utils.validation import parse_payload

logger = logging.getLogger(__name__)

RECENT_OBSERVATIONS_LIMIT = 5

# Optional profile fields that can be cleared with null
CLEARABLE_FIELDS = {
    "primary_idea_category_id",
    "secondary_idea_category_id",
    "iep_date",
    "case_manager",
    "accommodations",
}


def _student_options():
    return (
        selectinload(Student.school),
        selectinload(Student.primary_idea_category),
        selectinload(Student.secondary_idea_category),
    )


def _log_context(principal: Principal, student_id: UUID) -> dict:
    return build_log_context(user_id=str(principal.user_id), student_id=str(student_id))


def get_student(db: Session, student_id: UUID) -> Student | None:
    return (
        db.query(Student)
        .options(*_student_options())
        .filter(Student.id == student_id)
        .first()
    )


def _require_student(db: Session, student_id: UUID) -> Student:
    student = get_student(db, student_id)
    if not student:
        raise NotFound("Student not found")
    return student


def _check_references(
    db: Session,
    school_id: UUID | None,
    primary_idea_category_id: UUID | None,
    secondary_idea_category_id: UUID | None,
) -> None:
    """
    Raises:
        NotFound: school or IDEA category does not exist
        ValidationError: primary and secondary category are the same
    """
    if school_id is not None and not db.get(School, school_id):
        raise NotFound("School not found")
    for category_id in (primary_idea_category_id, secondary_idea_category_id):
        if category_id is not None and not db.get(IdeaCategory, category_id):
            raise NotFound("IDEA category not found")
    if (
        primary_idea_category_id is not None
        and primary_idea_category_id == secondary_idea_category_id
    ):
        raise ValidationError("Secondary IDEA category must differ from the primary category")


def _recent_observations_by_student(
    db: Session, principal: Principal, student_ids: list[UUID]
) -> dict[UUID, list[Observation]]:
    if not student_ids:
        return {}
    rows = (
        db.query(Observation)
        .filter(
            Observation.observer_id == principal.user_id,
            Observation.student_id.in_(student_ids),
        )
        .order_by(Observation.date.desc(), Observation.created_at.desc())
        .all()
    )
    grouped: dict[UUID, list[Observation]] = defaultdict(list)
    for observation in rows:
        if len(grouped[observation.student_id]) < RECENT_OBSERVATIONS_LIMIT:
            grouped[observation.student_id].append(observation)
    return grouped


def list_students(
    db: Session,
    principal: Principal,
    include_inactive: bool = False,
    q: str | None = None,
    school_id: UUID | None = None,
) -> list[StudentListItem]:
    """
    List students by last, first name.

    Inactive students are hidden unless include_inactive is set. Each item
    carries the principal's most recent observations of that student.
    """
    query = db.query(Student).options(*_student_options())
    if not include_inactive:
        query = query.filter(Student.is_active.is_(True))
    if school_id:
        query = query.filter(Student.school_id == school_id)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.filter(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                (Student.first_name + " " + Student.last_name).ilike(pattern),
            )
        )
    students = query.order_by(Student.last_name, Student.first_name).all()

    recent = _recent_observations_by_student(db, principal, [s.id for s in students])
    items = []
    for student in students:
        items.append(
            StudentListItem(
                **StudentRead.model_validate(student).model_dump(),
                recent_observations=[
                    StudentObservationSummary.model_validate(o)
                    for o in recent.get(student.id, [])
                ],
            )
        )
    return items


def get_student_detail(
    db: Session, principal: Principal, student_id: UUID
) -> StudentDetail:
    """Student profile with the principal's observations, newest date first."""
    student = _require_student(db, student_id)
    observations = (
        db.query(Observation)
        .options(
            selectinload(Observation.classroom),
            selectinload(Observation.teacher),
            selectinload(Observation.observer),
        )
        .filter(
            Observation.student_id == student_id,
            Observation.observer_id == principal.user_id,
        )
        .order_by(Observation.date.desc(), Observation.created_at.desc())
        .all()
    )
    return StudentDetail(
        **StudentRead.model_validate(student).model_dump(),
        observations=[StudentObservationRead.model_validate(o) for o in observations],
    )


def create_student(db: Session, principal: Principal, data: StudentCreate) -> Student:
    _check_references(
        db,
        data.school_id,
        data.primary_idea_category_id,
        data.secondary_idea_category_id,
    )
    student = Student(**data.model_dump(), is_active=True)
    db.add(student)
    db.commit()

    logger.info("Student created", extra=_log_context(principal, student.id))
    return get_student(db, student.id)


def update_student(
    db: Session, principal: Principal, student_id: UUID, payload: Any
) -> Student:
    """
    Apply a partial update.

    Only fields present in the payload are applied; required fields ignore
    null. The category pair is checked after merging with stored values.
    """
    student = _require_student(db, student_id)
    data = parse_payload(StudentUpdate, payload)
    update_data = data.model_dump(exclude_unset=True)
    update_data = {
        field: value
        for field, value in update_data.items()
        if value is not None or field in CLEARABLE_FIELDS
    }

    _check_references(
        db,
        update_data.get("school_id"),
        update_data.get("primary_idea_category_id", student.primary_idea_category_id),
        update_data.get("secondary_idea_category_id", student.secondary_idea_category_id),
    )

    for field, value in update_data.items():
        setattr(student, field, value)
    db.commit()
    db.expire_all()

    logger.info("Student updated", extra=_log_context(principal, student_id))
    return get_student(db, student_id)


def deactivate_student(db: Session, principal: Principal, student_id: UUID) -> None:
    """Soft delete: hide from default listings, keep observation history."""
    student = _require_student(db, student_id)
    if student.is_active:
        student.is_active = False
        db.commit()
    logger.info("Student deactivated", extra=_log_context(principal, student_id))
