"""Request body validation + error reporting for curation endpoints."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from core.models import RatingUpdate, TagUpdate, TopPickUpdate

M = TypeVar("M", bound=BaseModel)


class ValidationErrorDetail:
    """Structured validation error for API responses."""

    def __init__(self, field: str, message: str, value: object = None):
        self.field = field
        self.message = message
        self.value = value

    def to_dict(self) -> dict:
        d: dict = {"field": self.field, "message": self.message}
        if self.value is not None:
            d["value"] = repr(self.value)
        return d


class RequestValidationFailed(Exception):
    """Raised when a request body fails validation with actionable error details."""

    def __init__(self, errors: list[ValidationErrorDetail]):
        self.errors = errors
        super().__init__(f"{len(errors)} validation error(s)")

    def to_response_body(self) -> dict:
        return {
            "error": "Validation failed",
            "errors": [e.to_dict() for e in self.errors],
        }


def _pydantic_errors_to_details(exc: ValidationError) -> list[ValidationErrorDetail]:
    details: list[ValidationErrorDetail] = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        details.append(ValidationErrorDetail(
            field=field,
            message=err["msg"],
            value=err.get("input"),
        ))
    return details


def _validate(model: type[M], data: object) -> M:
    if not isinstance(data, dict):
        raise RequestValidationFailed([
            ValidationErrorDetail(field="body", message="Request body must be a JSON object"),
        ])
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationFailed(_pydantic_errors_to_details(exc)) from exc


def validate_tag_update(data: object) -> TagUpdate:
    """Validate a POST /tags/add or /tags/remove body."""
    return _validate(TagUpdate, data)


def validate_rating_update(data: object) -> RatingUpdate:
    """Validate a POST /assets/rating body. Ratings are whole stars, 1 to 5."""
    return _validate(RatingUpdate, data)


def validate_top_pick_update(data: object) -> TopPickUpdate:
    return _validate(TopPickUpdate, data)
