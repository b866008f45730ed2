"""Reference data router - read-only vocabularies."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classroom_observations.core.deps import get_current_principal, get_db
from classroom_observations.schemas.reference import BehaviorCategoryRead, IdeaCategoryRead
from classroom_observations.services import reference_service

router = APIRouter(tags=["reference"], dependencies=[Depends(get_current_principal)])


@router.get("/behavior-categories", response_model=list[BehaviorCategoryRead])
def list_behavior_categories(db: Session = Depends(get_db)):
    return reference_service.list_behavior_categories(db)


@router.get("/idea-categories", response_model=list[IdeaCategoryRead])
def list_idea_categories(db: Session = Depends(get_db)):
    return reference_service.list_idea_categories(db)
