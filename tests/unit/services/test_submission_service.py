"""
Unit tests for SubmissionService.

The store is an AsyncMock built from the SubmissionStore interface.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from fastform.config import Settings, get_settings
from fastform.core.exceptions import (
    InvalidSubmissionError,
    MalformedSpecError,
    SanitizationDepthError,
    SanitizationError,
    SubmissionNotFoundError,
    TransitionRejectedError,
)
from fastform.models import ErrorKind, Submission, SubmissionHistoryEntry, TransitionRequest
from fastform.services.submission_service import SubmissionService, SubmissionStore


def _stored(app_id: str, data: dict, status: str, submitted_by: str | None = None) -> Submission:
    now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
    return Submission(
        id="sub-new",
        app_id=app_id,
        data=data,
        status=status,
        created_at=now,
        updated_at=now,
        submitted_by=submitted_by,
    )


class TestSubmissionService:
    """Tests for SubmissionService methods."""

    @pytest.fixture
    def mock_store(self):
        """Create a mock submission store."""
        store = AsyncMock(spec=SubmissionStore)
        store.create_submission.side_effect = _stored
        return store

    @pytest.fixture
    def service(self, mock_store):
        """Create service with mock store."""
        return SubmissionService(mock_store)

    # ==================== CREATE ====================

    @pytest.mark.asyncio
    async def test_create_stores_sanitized_data(self, service, mock_store, intake_spec, valid_intake_data):
        """Test create validates, sanitizes and stores at the advanced status"""
        valid_intake_data["firstName"] = "<b>Jane</b>"
        valid_intake_data["utm_source"] = "<script>x()</script>ads"

        submission = await service.create(intake_spec, valid_intake_data, submitted_by="patient@example.com")

        assert submission.status == "SUBMITTED"
        app_id, data, status, submitted_by = mock_store.create_submission.await_args.args
        assert app_id == intake_spec.id
        assert data["firstName"] == "Jane"
        assert data["utm_source"] == "ads"
        assert status == "SUBMITTED"
        assert submitted_by == "patient@example.com"

        # Caller's data is left alone
        assert valid_intake_data["firstName"] == "<b>Jane</b>"

    @pytest.mark.asyncio
    async def test_create_records_history(self, service, mock_store, intake_spec, valid_intake_data):
        await service.create(intake_spec, valid_intake_data)

        mock_store.add_history.assert_awaited_once()
        entry = mock_store.add_history.await_args.args[0]
        assert isinstance(entry, SubmissionHistoryEntry)
        assert entry.submission_id == "sub-new"
        assert entry.status == "SUBMITTED"
        assert entry.notes is None

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_data(self, service, mock_store, intake_spec):
        with pytest.raises(InvalidSubmissionError) as exc_info:
            await service.create(intake_spec, {"firstName": "Jane"})

        assert exc_info.value.result.valid is False
        assert ErrorKind.MISSING_REQUIRED_FIELD in exc_info.value.result.kinds()
        assert exc_info.value.message.startswith("Validation failed:")
        mock_store.create_submission.assert_not_awaited()
        mock_store.add_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_with_malformed_spec(self, service, mock_store, intake_spec_doc, valid_intake_data):
        intake_spec_doc["workflow"]["initialState"] = "NOWHERE"

        with pytest.raises(MalformedSpecError):
            await service.create(intake_spec_doc, valid_intake_data)

        mock_store.create_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_rejects_deep_payload_when_configured(self, mock_store, intake_spec, valid_intake_data):
        service = SubmissionService(mock_store, Settings(sanitizer_max_depth=2, sanitizer_overflow="reject"))
        valid_intake_data["extra"] = {"a": {"b": "c"}}

        with pytest.raises(SanitizationDepthError):
            await service.create(intake_spec, valid_intake_data)

        mock_store.create_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_rejects_colliding_keys(self, service, mock_store, intake_spec, valid_intake_data):
        valid_intake_data["note"] = "first"
        valid_intake_data["<b>note</b>"] = "second"

        with pytest.raises(SanitizationError):
            await service.create(intake_spec, valid_intake_data)

        mock_store.create_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_uses_service_field_limit(self, mock_store, intake_spec, valid_intake_data):
        service = SubmissionService(mock_store, Settings(max_fields_per_spec=5))

        with pytest.raises(MalformedSpecError):
            await service.create(intake_spec, valid_intake_data)

    # ==================== TRANSITION ====================

    @pytest.mark.asyncio
    async def test_transition_updates_status(self, service, mock_store, intake_spec, make_submission):
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        mock_store.update_submission.return_value = make_submission("APPROVED")
        request = TransitionRequest(target_state="APPROVED", actor_role="STAFF", actor="staff-1")

        updated = await service.transition("app-1", "sub-1", intake_spec, request)

        assert updated.status == "APPROVED"
        mock_store.update_submission.assert_awaited_once_with("sub-1", status="APPROVED")
        entry = mock_store.add_history.await_args.args[0]
        assert entry.status == "APPROVED"
        assert entry.changed_by == "staff-1"

    @pytest.mark.asyncio
    async def test_transition_records_note(self, service, mock_store, intake_spec, make_submission):
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        mock_store.update_submission.return_value = make_submission("NEEDS_INFO")
        request = TransitionRequest.model_validate(
            {"targetState": "NEEDS_INFO", "actorRole": "STAFF", "note": "Need insurance details"}
        )

        await service.transition("app-1", "sub-1", intake_spec, request)

        entry = mock_store.add_history.await_args.args[0]
        assert entry.notes == "Need insurance details"

    @pytest.mark.asyncio
    async def test_transition_without_required_note(self, service, mock_store, intake_spec, make_submission):
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        request = TransitionRequest(target_state="REJECTED", actor_role="STAFF")

        with pytest.raises(TransitionRejectedError) as exc_info:
            await service.transition("app-1", "sub-1", intake_spec, request)

        assert exc_info.value.result.kinds() == [ErrorKind.NOTE_REQUIRED]
        mock_store.update_submission.assert_not_awaited()
        mock_store.add_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_submission_not_found(self, service, mock_store, intake_spec):
        mock_store.get_submission.return_value = None
        request = TransitionRequest(target_state="APPROVED", actor_role="STAFF")

        with pytest.raises(SubmissionNotFoundError):
            await service.transition("app-1", "missing", intake_spec, request)

    @pytest.mark.asyncio
    async def test_transition_other_apps_submission(self, service, mock_store, intake_spec, make_submission):
        """Test a submission owned by another app is treated as missing"""
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        request = TransitionRequest(target_state="APPROVED", actor_role="STAFF")

        with pytest.raises(SubmissionNotFoundError) as exc_info:
            await service.transition("app-2", "sub-1", intake_spec, request)

        assert exc_info.value.app_id == "app-2"
        mock_store.update_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_check_transition_is_dry_run(self, service, mock_store, intake_spec, make_submission):
        mock_store.get_submission.return_value = make_submission("SUBMITTED")

        allowed = await service.check_transition(
            "app-1", "sub-1", intake_spec, TransitionRequest(target_state="APPROVED", actor_role="STAFF")
        )
        denied = await service.check_transition(
            "app-1", "sub-1", intake_spec, TransitionRequest(target_state="APPROVED", actor_role="PATIENT")
        )

        assert allowed.valid is True
        assert denied.kinds() == [ErrorKind.ROLE_NOT_PERMITTED]
        mock_store.update_submission.assert_not_awaited()
        mock_store.add_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_uses_service_field_limit(self, mock_store, intake_spec, make_submission):
        service = SubmissionService(mock_store, Settings(max_fields_per_spec=5))
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        request = TransitionRequest(target_state="APPROVED", actor_role="STAFF")

        with pytest.raises(MalformedSpecError):
            await service.transition("app-1", "sub-1", intake_spec, request)
        with pytest.raises(MalformedSpecError):
            await service.check_transition("app-1", "sub-1", intake_spec, request)

        mock_store.update_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_service_limit_overrides_environment(
        self, monkeypatch, mock_store, intake_spec, make_submission
    ):
        """Test a service built with its own settings ignores the global field limit"""
        monkeypatch.setenv("FASTFORM_MAX_FIELDS_PER_SPEC", "5")
        get_settings.cache_clear()
        service = SubmissionService(mock_store, Settings(max_fields_per_spec=1000))
        mock_store.get_submission.return_value = make_submission("SUBMITTED")
        mock_store.update_submission.return_value = make_submission("APPROVED")
        request = TransitionRequest(target_state="APPROVED", actor_role="STAFF")

        updated = await service.transition("app-1", "sub-1", intake_spec, request)

        assert updated.status == "APPROVED"

    # ==================== RESUBMIT ====================

    @pytest.mark.asyncio
    async def test_resubmit_merges_and_advances(
        self, service, mock_store, intake_spec, make_submission, valid_intake_data
    ):
        stored = dict(valid_intake_data, state="ZZ")
        mock_store.get_submission.return_value = make_submission("NEEDS_INFO", data=stored)
        mock_store.update_submission.return_value = make_submission("SUBMITTED")

        await service.resubmit(
            "app-1", "sub-1", intake_spec, {"state": "NY", "seekingHelp": " <i>Anxiety</i> "}, "PATIENT"
        )

        mock_store.update_submission.assert_awaited_once()
        call = mock_store.update_submission.await_args
        assert call.args == ("sub-1",)
        assert call.kwargs["status"] == "SUBMITTED"
        assert call.kwargs["data"]["state"] == "NY"
        assert call.kwargs["data"]["seekingHelp"] == "Anxiety"
        assert call.kwargs["data"]["firstName"] == "Jane"
        assert mock_store.add_history.await_args.args[0].status == "SUBMITTED"

    @pytest.mark.asyncio
    async def test_resubmit_from_terminal_state(self, service, mock_store, intake_spec, make_submission):
        mock_store.get_submission.return_value = make_submission("APPROVED")

        with pytest.raises(TransitionRejectedError) as exc_info:
            await service.resubmit("app-1", "sub-1", intake_spec, {}, "PATIENT")

        assert exc_info.value.result.kinds() == [ErrorKind.TRANSITION_NOT_ALLOWED]
        mock_store.update_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resubmit_by_staff_rejected(self, service, mock_store, intake_spec, make_submission):
        """Test staff have no non-terminal edge out of NEEDS_INFO"""
        mock_store.get_submission.return_value = make_submission("NEEDS_INFO")

        with pytest.raises(TransitionRejectedError):
            await service.resubmit("app-1", "sub-1", intake_spec, {}, "STAFF")

    @pytest.mark.asyncio
    async def test_resubmit_invalid_merged_data(
        self, service, mock_store, intake_spec, make_submission, valid_intake_data
    ):
        mock_store.get_submission.return_value = make_submission("NEEDS_INFO", data=valid_intake_data)

        with pytest.raises(InvalidSubmissionError) as exc_info:
            await service.resubmit("app-1", "sub-1", intake_spec, {"email": "not-an-email"}, "PATIENT")

        assert [issue.field for issue in exc_info.value.result.errors] == ["email"]
        mock_store.update_submission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resubmit_non_mapping_data(
        self, service, mock_store, intake_spec, make_submission, valid_intake_data
    ):
        mock_store.get_submission.return_value = make_submission("NEEDS_INFO", data=valid_intake_data)

        with pytest.raises(InvalidSubmissionError) as exc_info:
            await service.resubmit("app-1", "sub-1", intake_spec, ["state", "NY"], "PATIENT")

        assert exc_info.value.result.kinds() == [ErrorKind.TYPE_MISMATCH]
        assert exc_info.value.result.errors[0].field is None
