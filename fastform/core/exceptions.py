"""
Core Exceptions

Custom exceptions for the Fastform engine.

Field-level and transition-level failures are returned as data inside a
ValidationResult. The exceptions below cover the conditions a caller must
handle out of band: misconfigured specs, payloads that exceed resource
limits, and the orchestration errors raised by SubmissionService.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastform.models.contracts.submissions import ValidationResult


class FastformError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str = "Fastform error"):
        self.message = message
        super().__init__(self.message)


class MalformedSpecError(FastformError):
    """
    Raised when an AppSpec fails the structural gate.

    This is a configuration fault ("app misconfigured"), distinct from an
    end-user validation error. Callers should surface it as a 4xx/5xx
    condition rather than as field errors.

    Usage:
        try:
            spec = load_app_spec(app.spec)
        except MalformedSpecError as e:
            logger.error(f"App {app.id} misconfigured: {e.errors}")
    """

    def __init__(self, message: str = "App spec is invalid", errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message)


class SanitizationError(FastformError):
    """Raised when submission data cannot be sanitized without losing its shape."""


class SanitizationDepthError(SanitizationError):
    """Raised when a payload nests deeper than the sanitizer allows (reject mode only)."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Submission data exceeds maximum nesting depth of {max_depth}")


class SanitizationKeyConflictError(SanitizationError):
    """
    Raised when two keys of one mapping sanitize to the same key.

    Overwriting would silently drop one of the values, so the payload is
    rejected instead.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Submission data has several keys that sanitize to {key!r}")


class SubmissionNotFoundError(FastformError):
    """Raised when the store has no submission for the given app and id."""

    def __init__(self, app_id: str, submission_id: str):
        self.app_id = app_id
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} not found for app {app_id}")


class InvalidSubmissionError(FastformError):
    """Raised by SubmissionService when submitted data fails validation."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        messages = ", ".join(issue.message for issue in result.errors)
        super().__init__(f"Validation failed: {messages}")


class TransitionRejectedError(FastformError):
    """Raised by SubmissionService when a status change is not allowed."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        messages = ", ".join(issue.message for issue in result.errors)
        super().__init__(f"Transition not allowed: {messages}")
