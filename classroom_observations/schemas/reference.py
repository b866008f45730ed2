"""Pydantic schemas for read-only reference data."""

from uuid import UUID

from pydantic import BaseModel


class IdeaCategoryRead(BaseModel):
    id: UUID
    code: str
    name: str
    description: str

    model_config = {"from_attributes": True}


class BehaviorCategoryRead(BaseModel):
    id: UUID
    name: str
    domain: str
    description: str | None
    is_positive: bool
    color: str

    model_config = {"from_attributes": True}
