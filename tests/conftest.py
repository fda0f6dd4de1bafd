"""
Pytest fixtures for the Fastform engine tests.

This module provides:
1. Settings isolation (FASTFORM_* variables cleared, cached settings reset)
2. AppSpec fixtures (the Psych Intake template and a small spec factory)
3. Common submission data fixtures
"""

import copy
import os
from datetime import datetime, timezone
from typing import Any

import pytest

from fastform.config import Settings, get_settings
from fastform.models import AppSpec, Submission
from fastform.templates.psych_intake import psych_intake_spec


# ==================== SETTINGS ====================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test with engine defaults and fresh cached settings."""
    for name in list(os.environ):
        if name.upper().startswith("FASTFORM_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


# ==================== APPSPEC FIXTURES ====================


@pytest.fixture
def intake_spec_doc() -> dict[str, Any]:
    """Raw Psych Intake Lite document (a fresh copy per test)."""
    return psych_intake_spec()


@pytest.fixture
def intake_spec(intake_spec_doc) -> AppSpec:
    """Parsed Psych Intake Lite AppSpec."""
    return AppSpec.model_validate(intake_spec_doc)


def _base_spec(
    transitions: list[dict[str, Any]],
    states: list[str],
    initial_state: str,
    roles: list[str],
    pages: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "id": "app-test",
        "version": "0.3",
        "meta": {
            "name": "Test App",
            "slug": "test-app",
            "description": "Spec used by unit tests",
            "orgId": "org-1",
        },
        "roles": [{"id": role, "authRequired": role != "PATIENT"} for role in roles],
        "pages": pages,
        "workflow": {
            "states": states,
            "initialState": initial_state,
            "transitions": transitions,
        },
        "api": {"baseUrl": "https://api.example.com", "endpoints": {}},
        "analytics": {"events": []},
        "environments": {
            "staging": {"domain": "test-staging.example.com", "apiUrl": "https://api-staging.example.com"},
            "production": {"domain": "test.example.com", "apiUrl": "https://api.example.com"},
        },
    }


@pytest.fixture
def make_spec():
    """
    Factory for small AppSpec documents.

    Usage:
        spec = make_spec(transitions=[{"from": "DRAFT", "to": "SUBMITTED", "allowedRoles": ["PATIENT"]}])
    """
    def _make(
        transitions: list[dict[str, Any]] | None = None,
        states: list[str] | None = None,
        initial_state: str = "DRAFT",
        roles: list[str] | None = None,
        pages: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return _base_spec(
            transitions=copy.deepcopy(transitions or []),
            states=states or ["DRAFT", "SUBMITTED", "NEEDS_INFO", "APPROVED", "REJECTED"],
            initial_state=initial_state,
            roles=roles or ["PATIENT", "STAFF"],
            pages=copy.deepcopy(pages or []),
        )

    return _make


# ==================== SUBMISSION FIXTURES ====================


@pytest.fixture
def valid_intake_data() -> dict[str, Any]:
    """Data that passes every field of the intake template."""
    return {
        "consent": True,
        "firstName": "Jane",
        "lastName": "Doe",
        "dob": "1990-04-12",
        "email": "jane.doe@example.com",
        "phone": "+1 (555) 123-4567",
        "state": "CA",
        "seekingHelp": "Trouble sleeping and anxiety at work",
        "previousTherapy": "no",
        "emergencyContact": "John Doe 555-0100",
    }


@pytest.fixture
def make_submission():
    """Factory for Submission records owned by app-1."""
    def _make(status: str, data: dict[str, Any] | None = None, submission_id: str = "sub-1") -> Submission:
        now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        return Submission(
            id=submission_id,
            app_id="app-1",
            data=data or {},
            status=status,
            created_at=now,
            updated_at=now,
        )

    return _make
