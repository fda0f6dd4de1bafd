"""
Submission Validator

Applies the field validator to every declared field of an AppSpec and
aggregates the failures, so a form can highlight every invalid field in one
round trip.
"""

import logging
from collections.abc import Mapping
from typing import Any

from fastform.config import Settings, get_settings
from fastform.models.contracts.appspec import AppSpec, FieldCondition
from fastform.models.contracts.submissions import ValidationIssue, ValidationResult
from fastform.models.enums import ConditionOperator, ErrorKind
from fastform.services.field_validator import is_empty, validate_field
from fastform.services.spec_validator import load_app_spec

logger = logging.getLogger(__name__)


def evaluate_condition(condition: FieldCondition, data: Mapping[str, Any]) -> bool:
    """Whether a conditionally visible field is shown for this data."""
    field_value = data.get(condition.field)

    if condition.operator == ConditionOperator.EQUALS:
        return field_value == condition.value
    if condition.operator == ConditionOperator.NOT_EQUALS:
        return field_value != condition.value
    if condition.operator == ConditionOperator.EXISTS:
        return not is_empty(field_value)
    return True


def validate_submission(
    data: Any,
    app_spec: AppSpec | Mapping[str, Any],
    *,
    role: str | None = None,
    settings: Settings | None = None,
) -> ValidationResult:
    """
    Validate submitted data against the fields of an AppSpec.

    Args:
        data: Mapping of field id to raw value (untrusted)
        app_spec: The AppSpec, as a model or a raw document
        role: When given, only fields on pages of this role are checked
        settings: Optional settings override

    Returns:
        ValidationResult with every failure, in field declaration order.
        Keys in data that the AppSpec does not declare are ignored.

    Raises:
        MalformedSpecError: If app_spec fails the structural gate
    """
    settings = settings or get_settings()
    spec = load_app_spec(app_spec, max_fields=settings.max_fields_per_spec)

    if not isinstance(data, Mapping):
        return ValidationResult.from_errors([
            ValidationIssue(
                field=None,
                message="Submission data must be an object",
                kind=ErrorKind.TYPE_MISMATCH,
            )
        ])

    errors: list[ValidationIssue] = []
    for field in spec.fields_for_role(role):
        # Conditionally hidden fields are not validated
        if field.condition and not evaluate_condition(field.condition, data):
            continue

        check = validate_field(data.get(field.id), field, settings=settings)
        if not check.valid and check.error is not None:
            errors.append(check.error)

    result = ValidationResult.from_errors(errors)
    logger.debug(
        f"Validated submission for app {spec.id}: "
        f"{len(errors)} errors {[issue.field for issue in errors]}"
    )
    return result
