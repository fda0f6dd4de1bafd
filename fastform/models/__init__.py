"""
Fastform Models

Pydantic contracts (AppSpec documents, submissions, validation results):
    from fastform.models import AppSpec, Submission, ValidationResult
    from fastform.models.contracts.appspec import AppSpec  # Granular access

Enums:
    from fastform.models import ErrorKind
    from fastform.models.enums import ErrorKind
"""

from fastform.models.contracts.appspec import (
    Action,
    AnalyticsConfig,
    AnalyticsEvent,
    ApiConfig,
    AppMeta,
    AppSpec,
    EnvironmentConfig,
    Environments,
    FieldCondition,
    FieldOption,
    FormField,
    Page,
    Role,
    Theme,
    Transition,
    ValidationRule,
    Workflow,
)
from fastform.models.contracts.submissions import (
    FieldCheck,
    Submission,
    SubmissionHistoryEntry,
    TransitionRequest,
    ValidationIssue,
    ValidationResult,
)
from fastform.models.enums import (
    ActionVariant,
    AnalyticsTrigger,
    ConditionOperator,
    ErrorKind,
    FieldType,
    PageType,
    ValidationRuleType,
)

__all__ = [
    # AppSpec
    "Action",
    "AnalyticsConfig",
    "AnalyticsEvent",
    "ApiConfig",
    "AppMeta",
    "AppSpec",
    "EnvironmentConfig",
    "Environments",
    "FieldCondition",
    "FieldOption",
    "FormField",
    "Page",
    "Role",
    "Theme",
    "Transition",
    "ValidationRule",
    "Workflow",
    # Submissions
    "FieldCheck",
    "Submission",
    "SubmissionHistoryEntry",
    "TransitionRequest",
    "ValidationIssue",
    "ValidationResult",
    # Enums
    "ActionVariant",
    "AnalyticsTrigger",
    "ConditionOperator",
    "ErrorKind",
    "FieldType",
    "PageType",
    "ValidationRuleType",
]
