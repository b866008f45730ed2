"""Request payload validation helpers."""

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from classroom_observations.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _field_name(loc: Sequence[Any]) -> str:
    # Drop the "body" prefix FastAPI adds to request-body errors
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) or "body"


def describe_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Summarize pydantic errors as one user-facing message.

    Missing fields are reported together; otherwise the first problem wins.
    """
    missing = [_field_name(e.get("loc", ())) for e in errors if e.get("type") == "missing"]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = _field_name(first.get("loc", ()))
    if field == "body":
        return f"Invalid request body: {first.get('msg', 'invalid value')}"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


def parse_payload(model: type[ModelT], payload: Any) -> ModelT:
    """
    Validate a raw JSON payload against a schema.

    Used where ownership must be checked before field validity, so the body
    can't be validated by FastAPI up front.

    A missing body counts as an empty object.

    Raises:
        ValidationError: payload is not an object or fails the schema
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_validation_errors(e.errors())) from e
