"""Students router - roster endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from classroom_observations.core.deps import get_current_principal, get_db
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.student import (
    StudentCreate,
    StudentDetail,
    StudentListItem,
    StudentRead,
)
from classroom_observations.services import student_service

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=list[StudentListItem])
def list_students(
    include_inactive: bool = Query(False),
    q: str | None = Query(None, max_length=200),
    school_id: UUID | None = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Active students by name, each with the caller's recent observations."""
    return student_service.list_students(
        db, principal, include_inactive=include_inactive, q=q, school_id=school_id
    )


@router.post("", response_model=StudentRead, status_code=201)
def create_student(
    data: StudentCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return student_service.create_student(db, principal, data)


@router.get("/{student_id}", response_model=StudentDetail)
def get_student(
    student_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Student profile with the caller's observation history."""
    return student_service.get_student_detail(db, principal, student_id)


@router.put("/{student_id}", response_model=StudentRead)
def update_student(
    student_id: UUID,
    payload: Any = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return student_service.update_student(db, principal, student_id, payload)


@router.delete("/{student_id}")
def delete_student(
    student_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Soft delete. Observations of the student stay readable."""
    student_service.deactivate_student(db, principal, student_id)
    return {"message": "Student deactivated successfully"}
