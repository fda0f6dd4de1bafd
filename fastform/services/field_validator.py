"""
Field Type Validator

Validates one submitted value against one field definition. Validation is
dispatched on the field's declared type through FIELD_VALIDATORS, never on
the runtime shape of the value, since payloads come from untrusted clients.
"""

import logging
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from fastform.config import Settings, get_settings
from fastform.core.exceptions import MalformedSpecError
from fastform.models.contracts.appspec import FormField, ValidationRule
from fastform.models.contracts.submissions import FieldCheck, ValidationIssue
from fastform.models.enums import ErrorKind, FieldType, ValidationRuleType
from fastform.services.spec_validator import format_validation_error

logger = logging.getLogger(__name__)

# Conservative RFC 5322 subset: dot-atom local part, hostname labels, no whitespace
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_TEL_RE = re.compile(r"^[0-9 +\-()]+$")
_ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

CHECKBOX_STRINGS = {"true": True, "false": False}

FieldRule = Callable[[Any, FormField, Settings], ValidationIssue | None]


def is_empty(value: Any) -> bool:
    """None, blank strings and empty lists count as 'not provided'."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def coerce_checkbox(value: Any) -> bool:
    """
    Convert an accepted checkbox value to a bool.

    Raises:
        ValueError: If the value is not one of True, False, "true", "false"
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in CHECKBOX_STRINGS:
        return CHECKBOX_STRINGS[value]
    raise ValueError(f"Not a checkbox value: {value!r}")


def _issue(field: FormField, message: str, kind: ErrorKind) -> ValidationIssue:
    return ValidationIssue(field=field.id, message=message, kind=kind)


# ==================== PER-TYPE RULES ====================


def _check_text(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    if not isinstance(value, str):
        return _issue(field, f"{field.label} must be a text value", ErrorKind.TYPE_MISMATCH)
    return None


def _check_email(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    if not isinstance(value, str) or not _EMAIL_RE.fullmatch(value):
        return _issue(field, f"{field.label} must be a valid email address", ErrorKind.TYPE_MISMATCH)
    return None


def _check_tel(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    if (
        not isinstance(value, str)
        or not _TEL_RE.fullmatch(value)
        or not settings.tel_min_length <= len(value) <= settings.tel_max_length
    ):
        return _issue(field, f"{field.label} must be a valid phone number", ErrorKind.TYPE_MISMATCH)
    return None


def _check_date(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return None
    if isinstance(value, str) and _ISO_DATE_RE.fullmatch(value):
        try:
            date.fromisoformat(value)
            return None
        except ValueError:
            pass
    return _issue(field, f"{field.label} must be a valid date (YYYY-MM-DD)", ErrorKind.TYPE_MISMATCH)


def _check_choice(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    if not isinstance(value, str) or value not in field.option_values():
        return _issue(field, f"{field.label} must be one of the provided options", ErrorKind.INVALID_ENUM_VALUE)
    return None


def _check_checkbox(value: Any, field: FormField, settings: Settings) -> ValidationIssue | None:
    try:
        coerce_checkbox(value)
    except ValueError:
        return _issue(field, f"{field.label} must be a boolean value", ErrorKind.TYPE_MISMATCH)
    return None


FIELD_VALIDATORS: dict[FieldType, FieldRule] = {
    FieldType.TEXT: _check_text,
    FieldType.TEXTAREA: _check_text,
    FieldType.EMAIL: _check_email,
    FieldType.TEL: _check_tel,
    FieldType.DATE: _check_date,
    FieldType.SELECT: _check_choice,
    FieldType.RADIO: _check_choice,
    FieldType.CHECKBOX: _check_checkbox,
}


# ==================== CUSTOM RULES ====================


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _check_rule(value: Any, rule: ValidationRule, field: FormField) -> ValidationIssue | None:
    """Apply one custom rule. Rules that don't apply to the value's shape pass."""
    failed = False

    if rule.type == ValidationRuleType.MIN_LENGTH:
        failed = isinstance(value, str) and len(value) < float(rule.value)
    elif rule.type == ValidationRuleType.MAX_LENGTH:
        failed = isinstance(value, str) and len(value) > float(rule.value)
    elif rule.type == ValidationRuleType.PATTERN:
        if isinstance(value, str):
            try:
                failed = re.search(str(rule.value), value) is None
            except re.error:
                return _issue(field, f"Invalid pattern validation for {field.label}", ErrorKind.RULE_VIOLATION)
    elif rule.type in (ValidationRuleType.MIN, ValidationRuleType.MAX):
        number = _as_number(value)
        if number is not None:
            bound = float(rule.value)
            failed = number < bound if rule.type == ValidationRuleType.MIN else number > bound

    if failed:
        return _issue(field, rule.message, ErrorKind.RULE_VIOLATION)
    return None


# ==================== ENTRY POINT ====================


def _coerce_field(field: Any) -> FormField:
    if isinstance(field, FormField):
        return field
    try:
        return FormField.model_validate(field)
    except ValidationError as e:
        raise MalformedSpecError(
            "Field definition is invalid",
            errors=format_validation_error(e),
        ) from e


def validate_field(value: Any, field: FormField | dict[str, Any], *, settings: Settings | None = None) -> FieldCheck:
    """
    Validate one raw value against one field definition.

    Args:
        value: The submitted value (None when the key is absent)
        field: Field definition, as a model or a raw AppSpec mapping
        settings: Optional settings override (defaults to get_settings())

    Returns:
        FieldCheck with the first issue found, if any

    Raises:
        MalformedSpecError: If the field definition itself is invalid,
            including an unknown field type
    """
    field = _coerce_field(field)
    settings = settings or get_settings()

    try:
        check = FIELD_VALIDATORS[FieldType(field.type)]
    except (KeyError, ValueError):
        raise MalformedSpecError(
            f"Unknown field type {field.type!r} for field '{field.id}'",
            errors=[f"{field.id}.type: unknown field type {field.type!r}"],
        )

    if is_empty(value):
        if field.required:
            return FieldCheck(
                valid=False,
                error=_issue(field, f"{field.label} is required", ErrorKind.MISSING_REQUIRED_FIELD),
            )
        return FieldCheck(valid=True)

    issue = check(value, field, settings)
    if issue is None:
        for rule in field.validation or []:
            issue = _check_rule(value, rule, field)
            if issue is not None:
                break

    if issue is not None:
        logger.debug(f"Field '{field.id}' failed validation: {issue.kind.value}")
        return FieldCheck(valid=False, error=issue)

    return FieldCheck(valid=True)
