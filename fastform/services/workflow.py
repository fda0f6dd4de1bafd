"""
Transition Validator

Role-gated finite-state machine over an AppSpec workflow. The workflow is
read as a table of (from, to, allowed_roles, requires_note) edges with a
single lookup; terminal states are simply states with no outgoing edge.

Validation never mutates the submission. Callers apply the new status
against their store, and can call these functions as dry runs, for example
to decide which action buttons to display.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastform.config import Settings, get_settings
from fastform.models.contracts.appspec import Action, AppSpec, Workflow
from fastform.models.contracts.submissions import ValidationIssue, ValidationResult
from fastform.models.enums import ErrorKind, PageType
from fastform.services.spec_validator import load_app_spec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    """One flattened workflow edge"""
    from_state: str
    to_state: str
    allowed_roles: frozenset[str]
    requires_note: bool = False


class WorkflowGraph:
    """Lookup table and static analysis over a workflow's transitions."""

    def __init__(self, workflow: Workflow):
        self.states: list[str] = list(workflow.states)
        self.initial_state = workflow.initial_state
        self.edges: list[Edge] = [
            Edge(
                from_state=from_state,
                to_state=transition.to,
                allowed_roles=frozenset(transition.allowed_roles),
                requires_note=transition.requires_note,
            )
            for transition in workflow.transitions
            for from_state in transition.from_states
        ]

    def find(self, from_state: str, to_state: str) -> list[Edge]:
        """All edges leading from one state to another, in declaration order"""
        return [
            edge for edge in self.edges
            if edge.from_state == from_state and edge.to_state == to_state
        ]

    def outgoing(self, state: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.from_state == state]

    def terminal_states(self) -> list[str]:
        """States with no outgoing edge, in declared order"""
        sources = {edge.from_state for edge in self.edges}
        return [state for state in self.states if state not in sources]

    def is_terminal(self, state: str) -> bool:
        return not self.outgoing(state)

    def reachable_states(self, start: str | None = None) -> list[str]:
        """States reachable from start (default: initial state), start included"""
        start = start or self.initial_state
        seen = {start}
        frontier = [start]
        while frontier:
            state = frontier.pop()
            for edge in self.outgoing(state):
                if edge.to_state not in seen:
                    seen.add(edge.to_state)
                    frontier.append(edge.to_state)
        return [state for state in self.states if state in seen]

    def roles_for(self, from_state: str, to_state: str) -> set[str]:
        roles: set[str] = set()
        for edge in self.find(from_state, to_state):
            roles |= edge.allowed_roles
        return roles


def _load(app_spec: AppSpec | Mapping[str, Any], settings: Settings | None) -> AppSpec:
    settings = settings or get_settings()
    return load_app_spec(app_spec, max_fields=settings.max_fields_per_spec)


def _current_status(submission: Any) -> str | None:
    if isinstance(submission, Mapping):
        return submission.get("status")
    return getattr(submission, "status", None)


def _action_requires_note(spec: AppSpec, role: str, target_state: str) -> bool:
    """Whether a detail-page action of this role targeting the state demands a note"""
    for page in spec.pages:
        if page.type != PageType.DETAIL or page.role != role:
            continue
        for action in page.actions or []:
            if action.target_state == target_state and action.requires_note:
                return True
    return False


def validate_transition(
    submission: Any,
    target_state: str,
    app_spec: AppSpec | Mapping[str, Any],
    actor_role: str,
    note: str | None = None,
    *,
    settings: Settings | None = None,
) -> ValidationResult:
    """
    Check whether a submission may move to target_state.

    Checks, in order: the target is a declared state (UnknownState), an edge
    from the current status to the target exists (TransitionNotAllowed), an
    edge lists the actor's role (RoleNotPermitted), and a note is present
    when the edge or the matching detail action requires one (NoteRequired).

    Args:
        submission: Submission model, mapping or object exposing `status`
        target_state: Requested new status
        app_spec: The AppSpec, as a model or a raw document
        actor_role: Role asserted by the caller
        note: Optional note accompanying the request (untrusted; non-strings count
            as missing)
        settings: Optional settings override (defaults to get_settings())

    Returns:
        ValidationResult; the submission is never modified

    Raises:
        MalformedSpecError: If app_spec fails the structural gate
    """
    spec = _load(app_spec, settings)
    graph = WorkflowGraph(spec.workflow)
    current = _current_status(submission)

    def fail(kind: ErrorKind, message: str) -> ValidationResult:
        logger.debug(f"Transition {current} -> {target_state} for role {actor_role} rejected: {kind.value}")
        return ValidationResult.from_errors([ValidationIssue(field="status", message=message, kind=kind)])

    if target_state not in graph.states:
        return fail(ErrorKind.UNKNOWN_STATE, f"Invalid target state: {target_state}")

    edges = graph.find(current, target_state)
    if not edges:
        return fail(
            ErrorKind.TRANSITION_NOT_ALLOWED,
            f"Transition from {current} to {target_state} is not allowed",
        )

    permitted = [edge for edge in edges if actor_role in edge.allowed_roles]
    if not permitted:
        return fail(
            ErrorKind.ROLE_NOT_PERMITTED,
            f"Transition from {current} to {target_state} is not allowed for role {actor_role}",
        )

    # Several edges may match; the request needs a note only if every one does
    needs_note = all(edge.requires_note for edge in permitted) or _action_requires_note(
        spec, actor_role, target_state
    )
    if needs_note and (not isinstance(note, str) or not note.strip()):
        return fail(
            ErrorKind.NOTE_REQUIRED,
            f"A note is required to move from {current} to {target_state}",
        )

    return ValidationResult.ok()


def available_transitions(
    submission: Any,
    app_spec: AppSpec | Mapping[str, Any],
    actor_role: str,
    *,
    settings: Settings | None = None,
) -> list[str]:
    """Target states the role may move the submission to, in declared state order."""
    spec = _load(app_spec, settings)
    graph = WorkflowGraph(spec.workflow)
    current = _current_status(submission)
    targets = {
        edge.to_state for edge in graph.outgoing(current)
        if actor_role in edge.allowed_roles
    }
    return [state for state in graph.states if state in targets]


def available_actions(
    submission: Any,
    app_spec: AppSpec | Mapping[str, Any],
    actor_role: str,
    page_id: str | None = None,
    *,
    settings: Settings | None = None,
) -> list[Action]:
    """
    Detail-page actions the role can currently take on the submission.

    Notes are not considered: an action that requires one is still offered,
    and the note is demanded when the action is submitted.
    """
    spec = _load(app_spec, settings)
    targets = set(available_transitions(submission, spec, actor_role, settings=settings))

    actions: list[Action] = []
    for page in spec.pages:
        if page.type != PageType.DETAIL or page.role != actor_role:
            continue
        if page_id is not None and page.id != page_id:
            continue
        actions.extend(action for action in page.actions or [] if action.target_state in targets)
    return actions


def initial_status(
    app_spec: AppSpec | Mapping[str, Any],
    *,
    advance: bool = False,
    actor_role: str | None = None,
    settings: Settings | None = None,
) -> str:
    """
    Status a new submission is created in.

    With advance=True the submission skips straight to the target of the first
    edge out of the initial state (restricted to edges open to actor_role when
    given), as happens when a user completes the whole form sequence at once.
    """
    spec = _load(app_spec, settings)
    graph = WorkflowGraph(spec.workflow)
    if not advance:
        return graph.initial_state

    for edge in graph.outgoing(graph.initial_state):
        if actor_role is None or actor_role in edge.allowed_roles:
            return edge.to_state
    return graph.initial_state
