"""
Enumeration types used across the engine.

Values match the camelCase / lowercase strings used in AppSpec JSON documents.
"""

from enum import Enum


class FieldType(str, Enum):
    """Form field types supported by the field validator"""
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    DATE = "date"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"


class PageType(str, Enum):
    """Page kinds an AppSpec can declare"""
    WELCOME = "welcome"
    FORM = "form"
    REVIEW = "review"
    SUCCESS = "success"
    LOGIN = "login"
    LIST = "list"
    DETAIL = "detail"


class ActionVariant(str, Enum):
    """Visual variant of a detail-page action button"""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DANGER = "danger"


class ValidationRuleType(str, Enum):
    """Custom per-field validation rule kinds"""
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    MIN = "min"
    MAX = "max"


class ConditionOperator(str, Enum):
    """Operators for conditional field visibility"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    EXISTS = "exists"


class AnalyticsTrigger(str, Enum):
    """When an analytics event fires"""
    PAGEVIEW = "pageview"
    SUBMIT = "submit"
    TRANSITION = "transition"


class ErrorKind(str, Enum):
    """Machine-readable kind of a validation issue"""
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    RULE_VIOLATION = "RuleViolation"
    UNKNOWN_STATE = "UnknownState"
    TRANSITION_NOT_ALLOWED = "TransitionNotAllowed"
    ROLE_NOT_PERMITTED = "RoleNotPermitted"
    NOTE_REQUIRED = "NoteRequired"
    MALFORMED_SPEC = "MalformedSpec"
