"""Observations router - session lifecycle, entries and reports."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from classroom_observations.core.deps import (
    get_current_principal,
    get_db,
    get_report_assembler,
)
from classroom_observations.db.enums import ObservationStatus
from classroom_observations.schemas.auth import Principal
from classroom_observations.schemas.observation import (
    EntryRead,
    ObservationCreate,
    ObservationRead,
    ReportDraft,
)
from classroom_observations.services import entry_service, observation_service, pdf_service
from classroom_observations.services.report_service import ReportAssembler

router = APIRouter(prefix="/observations", tags=["observations"])


# Mutations on an existing observation take the raw JSON body: ownership is
# checked before the body is validated.


@router.get("", response_model=list[ObservationRead])
def list_observations(
    student_id: UUID | None = Query(None),
    status: ObservationStatus | None = Query(None),
    q: str | None = Query(None, max_length=200),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """List the caller's observations, newest date first."""
    return observation_service.list_observations(
        db, principal, student_id=student_id, status=status, q=q
    )


@router.post("", response_model=ObservationRead, status_code=201)
def create_observation(
    data: ObservationCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Start a draft observation owned by the caller."""
    return observation_service.create_observation(db, principal, data)


@router.get("/{observation_id}", response_model=ObservationRead)
def get_observation(
    observation_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return observation_service.get_owned_observation(db, principal, observation_id)


@router.put("/{observation_id}", response_model=ObservationRead)
def update_observation(
    observation_id: UUID,
    payload: Any = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Partial update; status may only move forward."""
    return observation_service.update_observation(db, principal, observation_id, payload)


@router.delete("/{observation_id}")
def delete_observation(
    observation_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Delete an observation and all of its entries."""
    observation_service.delete_observation(db, principal, observation_id)
    return {"message": "Observation deleted successfully"}


@router.post("/{observation_id}/stop", response_model=ObservationRead)
def stop_observation(
    observation_id: UUID,
    payload: Any = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Stop recording and mark the observation completed."""
    return observation_service.stop_observation(db, principal, observation_id, payload)


# =============================================================================
# Entries
# =============================================================================

@router.get("/{observation_id}/entries", response_model=list[EntryRead])
def list_entries(
    observation_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return entry_service.list_entries(db, principal, observation_id)


@router.post("/{observation_id}/entries", response_model=EntryRead, status_code=201)
def append_entry(
    observation_id: UUID,
    payload: Any = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Append an entry while the observation is recording."""
    return entry_service.append_entry(db, principal, observation_id, payload)


# =============================================================================
# Report
# =============================================================================

@router.get("/{observation_id}/report", response_model=ReportDraft)
def get_report(
    observation_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    assembler: ReportAssembler = Depends(get_report_assembler),
):
    """Saved report text, or a freshly assembled draft."""
    return observation_service.get_report_draft(db, principal, observation_id, assembler)


@router.post("/{observation_id}/report", response_model=ObservationRead)
def save_report(
    observation_id: UUID,
    payload: Any = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    assembler: ReportAssembler = Depends(get_report_assembler),
):
    """Save the report onto the observation and mark it reviewed."""
    return observation_service.save_report(db, principal, observation_id, payload, assembler)


@router.get("/{observation_id}/report.pdf")
def download_report_pdf(
    observation_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    assembler: ReportAssembler = Depends(get_report_assembler),
):
    pdf_bytes = pdf_service.render_report_pdf(db, principal, observation_id, assembler)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="observation-{observation_id}.pdf"'
        },
    )
