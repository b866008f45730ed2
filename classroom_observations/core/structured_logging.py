"""Structured logging helpers (student-data safe)."""

import logging
from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    observation_id: str | None = None,
    student_id: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict holding identifiers only, never free text."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if observation_id:
        context["observation_id"] = observation_id
    if student_id:
        context["student_id"] = student_id
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
