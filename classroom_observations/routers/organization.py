"""Organization router - schools, teachers and classrooms."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from classroom_observations.core.deps import get_current_principal, get_db
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.organization import (
    ClassroomCreate,
    ClassroomRead,
    SchoolCreate,
    SchoolRead,
    TeacherCreate,
    TeacherRead,
)
from classroom_observations.services import school_service

# Every endpoint requires a signed-in observer
router = APIRouter(tags=["organization"], dependencies=[Depends(get_current_principal)])


# =============================================================================
# Schools
# =============================================================================

@router.get("/schools", response_model=list[SchoolRead])
def list_schools(db: Session = Depends(get_db)):
    return school_service.list_schools(db)


@router.post("/schools", response_model=SchoolRead, status_code=201)
def create_school(
    data: SchoolCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return school_service.create_school(db, principal, data)


@router.get("/schools/{school_id}", response_model=SchoolRead)
def get_school(school_id: UUID, db: Session = Depends(get_db)):
    return school_service.get_school(db, school_id)


# =============================================================================
# Teachers
# =============================================================================

@router.get("/teachers", response_model=list[TeacherRead])
def list_teachers(
    school_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
):
    return school_service.list_teachers(db, school_id=school_id)


@router.post("/teachers", response_model=TeacherRead, status_code=201)
def create_teacher(
    data: TeacherCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return school_service.create_teacher(db, principal, data)


# =============================================================================
# Classrooms
# =============================================================================

@router.get("/classrooms", response_model=list[ClassroomRead])
def list_classrooms(
    school_id: UUID | None = Query(None),
    teacher_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
):
    return school_service.list_classrooms(db, school_id=school_id, teacher_id=teacher_id)


@router.post("/classrooms", response_model=ClassroomRead, status_code=201)
def create_classroom(
    data: ClassroomCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return school_service.create_classroom(db, principal, data)
