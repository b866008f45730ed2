"""Organization service - schools, teachers and classrooms."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from classroom_observations.core.exceptions import NotFound, ValidationError
from classroom_observations.core.structured_logging import build_log_context
from classroom_observations.db.models import Classroom, School, Teacher
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.organization import (
    ClassroomCreate,
    SchoolCreate,
    TeacherCreate,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Schools
# =============================================================================

def list_schools(db: Session) -> list[School]:
    return db.query(School).order_by(School.name).all()


def get_school(db: Session, school_id: UUID) -> School:
    school = db.get(School, school_id)
    if not school:
        raise NotFound("School not found")
    return school


def create_school(db: Session, principal: Principal, data: SchoolCreate) -> School:
    school = School(**data.model_dump())
    db.add(school)
    db.commit()
    db.refresh(school)
    logger.info(
        "School created", extra=build_log_context(user_id=str(principal.user_id))
    )
    return school


# =============================================================================
# Teachers
# =============================================================================

def _teacher_query(db: Session):
    return db.query(Teacher).options(
        selectinload(Teacher.school), selectinload(Teacher.classrooms)
    )


def list_teachers(db: Session, school_id: UUID | None = None) -> list[Teacher]:
    query = _teacher_query(db)
    if school_id:
        query = query.filter(Teacher.school_id == school_id)
    return query.order_by(Teacher.last_name, Teacher.first_name).all()


def create_teacher(db: Session, principal: Principal, data: TeacherCreate) -> Teacher:
    """
    Raises:
        NotFound: school does not exist
    """
    get_school(db, data.school_id)
    teacher = Teacher(**data.model_dump())
    db.add(teacher)
    db.commit()
    logger.info(
        "Teacher created", extra=build_log_context(user_id=str(principal.user_id))
    )
    return _teacher_query(db).filter(Teacher.id == teacher.id).first()


# =============================================================================
# Classrooms
# =============================================================================

def _classroom_query(db: Session):
    return db.query(Classroom).options(
        selectinload(Classroom.school), selectinload(Classroom.teacher)
    )


def list_classrooms(
    db: Session,
    school_id: UUID | None = None,
    teacher_id: UUID | None = None,
) -> list[Classroom]:
    query = _classroom_query(db)
    if school_id:
        query = query.filter(Classroom.school_id == school_id)
    if teacher_id:
        query = query.filter(Classroom.teacher_id == teacher_id)
    return query.order_by(Classroom.name).all()


def create_classroom(
    db: Session, principal: Principal, data: ClassroomCreate
) -> Classroom:
    """
    Raises:
        NotFound: school or teacher does not exist
        ValidationError: teacher belongs to a different school
    """
    get_school(db, data.school_id)
    teacher = db.get(Teacher, data.teacher_id)
    if not teacher:
        raise NotFound("Teacher not found")
    if teacher.school_id != data.school_id:
        raise ValidationError("Teacher does not belong to this school")

    classroom = Classroom(**data.model_dump())
    db.add(classroom)
    db.commit()
    logger.info(
        "Classroom created", extra=build_log_context(user_id=str(principal.user_id))
    )
    return _classroom_query(db).filter(Classroom.id == classroom.id).first()
