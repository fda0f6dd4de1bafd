"""
Spec Schema Validator

Structural gate for AppSpec documents. A spec must pass this gate before it is
used to validate user data or workflow transitions; a spec that fails it is a
configuration fault, reported through MalformedSpecError and never as a
field-level validation error.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from fastform.config import get_settings
from fastform.core.exceptions import MalformedSpecError
from fastform.models.contracts.appspec import AppSpec

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into 'loc: message' strings."""
    messages = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"])
        msg = item["msg"]
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def _parse(candidate: Any) -> tuple[AppSpec | None, list[str]]:
    if isinstance(candidate, AppSpec):
        # Models are mutable after construction, so re-check the current state
        candidate = candidate.model_dump(by_alias=True)

    if not isinstance(candidate, Mapping):
        return None, [f"AppSpec must be an object, got {type(candidate).__name__}"]

    try:
        return AppSpec.model_validate(dict(candidate)), []
    except ValidationError as e:
        return None, format_validation_error(e)


def check_field_count(spec: AppSpec, max_fields: int) -> list[str]:
    """Problems with the total number of fields declared across all pages."""
    count = sum(len(page.fields or []) for page in spec.pages)
    if count > max_fields:
        return [f"pages: declares {count} fields, more than the limit of {max_fields}"]
    return []


def collect_spec_errors(candidate: Any, *, max_fields: int | None = None) -> list[str]:
    """
    List every structural problem of a candidate AppSpec.

    Args:
        candidate: Arbitrary untyped value (usually decoded JSON)
        max_fields: Upper bound on declared fields (defaults to settings)

    Returns:
        Human-readable problems; empty if and only if the AppSpec is valid
    """
    if max_fields is None:
        max_fields = get_settings().max_fields_per_spec

    spec, errors = _parse(candidate)
    if spec is None:
        return errors
    return check_field_count(spec, max_fields)


def is_valid_app_spec(candidate: Any, *, max_fields: int | None = None) -> bool:
    """
    Total predicate: is the candidate a structurally valid AppSpec?

    Never raises. None, non-objects and empty objects are invalid.
    """
    return not collect_spec_errors(candidate, max_fields=max_fields)


def load_app_spec(candidate: Any, *, max_fields: int | None = None) -> AppSpec:
    """
    Parse a candidate into an AppSpec or raise MalformedSpecError.

    This is the gate used by the submission and transition validators.

    Raises:
        MalformedSpecError: If the candidate fails the structural check
    """
    if max_fields is None:
        max_fields = get_settings().max_fields_per_spec

    spec, errors = _parse(candidate)
    if spec is not None:
        errors = check_field_count(spec, max_fields)

    if errors:
        logger.warning(f"Rejected malformed AppSpec ({len(errors)} problems): {errors[:5]}")
        raise MalformedSpecError("App spec is invalid", errors=errors)

    return spec
