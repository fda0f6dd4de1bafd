"""
Submission contract models for Fastform.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fastform.models.enums import ErrorKind


# ==================== SUBMISSION MODELS ====================


class Submission(BaseModel):
    """Data record produced by an end user against one AppSpec"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    app_id: str = Field(..., alias="appId")
    data: dict[str, Any] = Field(default_factory=dict)
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    submitted_by: str | None = Field(default=None, alias="submittedBy")


class SubmissionHistoryEntry(BaseModel):
    """Audit trail row for a status change"""
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str = Field(..., alias="submissionId")
    status: str
    changed_by: str | None = Field(default=None, alias="changedBy")
    notes: str | None = None
    created_at: datetime = Field(..., alias="createdAt")


class TransitionRequest(BaseModel):
    """A caller's request to move a submission to another state"""
    model_config = ConfigDict(populate_by_name=True)

    target_state: str = Field(..., alias="targetState")
    actor_role: str = Field(..., alias="actorRole")
    note: str | None = None
    actor: str | None = Field(default=None, description="Identity recorded in the history entry")


# ==================== VALIDATION RESULT MODELS ====================


class ValidationIssue(BaseModel):
    """A single validation failure"""
    model_config = ConfigDict(frozen=True)

    field: str | None = Field(default=None, description="Field id, or None for record-level issues")
    message: str = Field(..., description="Human-readable error message")
    kind: ErrorKind = Field(..., description="Machine-readable error kind")


class FieldCheck(BaseModel):
    """Outcome of validating one value against one field definition"""
    model_config = ConfigDict(frozen=True)

    valid: bool
    error: ValidationIssue | None = None


class ValidationResult(BaseModel):
    """
    Outcome of a submission or transition validation.

    Errors keep the order they were found in, which for submissions is the
    field declaration order of the AppSpec.
    """
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: tuple[ValidationIssue, ...] = Field(default_factory=tuple)

    @classmethod
    def from_errors(cls, errors: list[ValidationIssue]) -> "ValidationResult":
        return cls(valid=not errors, errors=tuple(errors))

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    def kinds(self) -> list[ErrorKind]:
        return [issue.kind for issue in self.errors]
