"""
Submission Service

Drives the validators for the three things an HTTP layer does with
submissions: create one, move it through the workflow, and resubmit it after
staff asked for more information. Persistence is delegated to a
SubmissionStore supplied by the caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from fastform.config import Settings, get_settings
from fastform.core.exceptions import (
    InvalidSubmissionError,
    SubmissionNotFoundError,
    TransitionRejectedError,
)
from fastform.models.contracts.appspec import AppSpec
from fastform.models.contracts.submissions import (
    Submission,
    SubmissionHistoryEntry,
    TransitionRequest,
    ValidationIssue,
    ValidationResult,
)
from fastform.models.enums import ErrorKind
from fastform.services.sanitizer import sanitize_submission_data
from fastform.services.spec_validator import load_app_spec
from fastform.services.submission_validator import validate_submission
from fastform.services.workflow import WorkflowGraph, initial_status, validate_transition

logger = logging.getLogger(__name__)


class SubmissionStore(ABC):
    """Persistence for submissions and their status history."""

    @abstractmethod
    async def get_submission(self, app_id: str, submission_id: str) -> Submission | None:
        """Fetch a submission owned by the app, or None."""
        ...

    @abstractmethod
    async def create_submission(
        self,
        app_id: str,
        data: dict[str, Any],
        status: str,
        submitted_by: str | None = None,
    ) -> Submission:
        """Insert a new submission."""
        ...

    @abstractmethod
    async def update_submission(
        self,
        submission_id: str,
        *,
        data: dict[str, Any] | None = None,
        status: str | None = None,
    ) -> Submission:
        """Update data and/or status of an existing submission."""
        ...

    @abstractmethod
    async def add_history(self, entry: SubmissionHistoryEntry) -> None:
        """Append a status history entry."""
        ...


class SubmissionService:
    """Validate, sanitize and persist submissions for one store."""

    def __init__(self, store: SubmissionStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    def _sanitize(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return sanitize_submission_data(
            data,
            max_depth=self.settings.sanitizer_max_depth,
            overflow=self.settings.sanitizer_overflow,
        )

    async def _record(self, submission_id: str, status: str, changed_by: str | None, notes: str | None) -> None:
        await self.store.add_history(
            SubmissionHistoryEntry(
                submission_id=submission_id,
                status=status,
                changed_by=changed_by,
                notes=notes,
                created_at=datetime.now(timezone.utc),
            )
        )

    async def _get(self, app_id: str, submission_id: str) -> Submission:
        submission = await self.store.get_submission(app_id, submission_id)
        if submission is None or submission.app_id != app_id:
            raise SubmissionNotFoundError(app_id, submission_id)
        return submission

    async def create(
        self,
        app_spec: AppSpec | Mapping[str, Any],
        data: Any,
        submitted_by: str | None = None,
        role: str | None = None,
    ) -> Submission:
        """
        Validate, sanitize and store a completed form submission.

        The new record starts at the first workflow target out of the initial
        state, since the user has completed the form sequence.

        Raises:
            MalformedSpecError: If the AppSpec fails the structural gate
            InvalidSubmissionError: If the data fails validation
            SanitizationError: If the data cannot be sanitized safely
        """
        spec = load_app_spec(app_spec, max_fields=self.settings.max_fields_per_spec)

        result = validate_submission(data, spec, role=role, settings=self.settings)
        if not result.valid:
            logger.warning(
                f"Submission for app {spec.id} rejected: "
                f"{[(issue.field, issue.kind.value) for issue in result.errors]}"
            )
            raise InvalidSubmissionError(result)

        status = initial_status(spec, advance=True, actor_role=role, settings=self.settings)
        submission = await self.store.create_submission(
            spec.id,
            self._sanitize(data),
            status,
            submitted_by,
        )
        await self._record(submission.id, status, submitted_by, None)

        logger.info(f"Created submission {submission.id} for app {spec.id} with status {status}")
        return submission

    async def check_transition(
        self,
        app_id: str,
        submission_id: str,
        app_spec: AppSpec | Mapping[str, Any],
        request: TransitionRequest,
    ) -> ValidationResult:
        """Dry run of transition(): validate without changing anything."""
        submission = await self._get(app_id, submission_id)
        return validate_transition(
            submission,
            request.target_state,
            app_spec,
            request.actor_role,
            note=request.note,
            settings=self.settings,
        )

    async def transition(
        self,
        app_id: str,
        submission_id: str,
        app_spec: AppSpec | Mapping[str, Any],
        request: TransitionRequest,
    ) -> Submission:
        """
        Move a submission to a new status and record it in the history.

        Raises:
            SubmissionNotFoundError: If the store has no such submission
            MalformedSpecError: If the AppSpec fails the structural gate
            TransitionRejectedError: If the workflow does not allow the change
        """
        submission = await self._get(app_id, submission_id)
        result = validate_transition(
            submission,
            request.target_state,
            app_spec,
            request.actor_role,
            note=request.note,
            settings=self.settings,
        )
        if not result.valid:
            logger.warning(
                f"Transition of submission {submission_id} to {request.target_state} "
                f"rejected: {result.kinds()}"
            )
            raise TransitionRejectedError(result)

        updated = await self.store.update_submission(submission_id, status=request.target_state)
        await self._record(submission_id, request.target_state, request.actor, request.note)

        logger.info(
            f"Submission {submission_id} moved from {submission.status} to {request.target_state} "
            f"by role {request.actor_role}"
        )
        return updated

    async def resubmit(
        self,
        app_id: str,
        submission_id: str,
        app_spec: AppSpec | Mapping[str, Any],
        data: Mapping[str, Any],
        actor_role: str,
        actor: str | None = None,
        note: str | None = None,
    ) -> Submission:
        """
        Merge updated data into a submission and send it back for review.

        The new data is merged over the stored data, the merged record is
        validated and sanitized, and the submission follows the first edge
        out of its current status that the role may take to a non-terminal
        state (NEEDS_INFO -> SUBMITTED in the intake template).

        Raises:
            SubmissionNotFoundError: If the store has no such submission
            MalformedSpecError: If the AppSpec fails the structural gate
            TransitionRejectedError: If no resubmission edge is open to the role
            InvalidSubmissionError: If the merged data fails validation
            SanitizationError: If the merged data cannot be sanitized safely
        """
        spec = load_app_spec(app_spec, max_fields=self.settings.max_fields_per_spec)
        submission = await self._get(app_id, submission_id)

        target = self._resubmission_target(spec, submission.status, actor_role)
        if target is None:
            raise TransitionRejectedError(ValidationResult.from_errors([
                ValidationIssue(
                    field="status",
                    message=f"Submission in status {submission.status} cannot be resubmitted by role {actor_role}",
                    kind=ErrorKind.TRANSITION_NOT_ALLOWED,
                )
            ]))

        transition_result = validate_transition(
            submission, target, spec, actor_role, note=note, settings=self.settings
        )
        if not transition_result.valid:
            raise TransitionRejectedError(transition_result)

        if not isinstance(data, Mapping):
            raise InvalidSubmissionError(validate_submission(data, spec, settings=self.settings))
        merged = {**submission.data, **data}
        result = validate_submission(merged, spec, role=actor_role, settings=self.settings)
        if not result.valid:
            logger.warning(f"Resubmission of {submission_id} rejected: {result.kinds()}")
            raise InvalidSubmissionError(result)

        updated = await self.store.update_submission(
            submission_id,
            data=self._sanitize(merged),
            status=target,
        )
        await self._record(submission_id, target, actor, note)

        logger.info(f"Submission {submission_id} resubmitted, status {submission.status} -> {target}")
        return updated

    @staticmethod
    def _resubmission_target(spec: AppSpec, status: str, actor_role: str) -> str | None:
        graph = WorkflowGraph(spec.workflow)
        for edge in graph.outgoing(status):
            if actor_role in edge.allowed_roles and not graph.is_terminal(edge.to_state):
                return edge.to_state
        return None
