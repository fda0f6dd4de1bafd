"""
AppSpec contract models for Fastform.

An AppSpec is the declarative description of a generated app: its roles,
pages and fields, and the workflow state machine its submissions move
through. Documents use camelCase keys; models expose snake_case attributes.
"""

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fastform.models.enums import (
    ActionVariant,
    AnalyticsTrigger,
    ConditionOperator,
    FieldType,
    PageType,
    ValidationRuleType,
)

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$", re.IGNORECASE)

CHOICE_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO})

# Only these pages collect input; fields declared elsewhere are display-only
INPUT_PAGE_TYPES = frozenset({PageType.WELCOME, PageType.FORM})


# ==================== FIELD MODELS ====================


class FieldOption(BaseModel):
    """Option for select/radio fields"""
    value: str
    label: str


class ValidationRule(BaseModel):
    """Custom validation rule attached to a field"""
    type: ValidationRuleType
    value: str | int | float
    message: str = Field(..., min_length=1)

    @model_validator(mode='after')
    def validate_numeric_bounds(self):
        """Length and range rules need a numeric value"""
        if self.type != ValidationRuleType.PATTERN:
            try:
                bound = float(self.value)
            except (TypeError, ValueError, OverflowError):
                raise ValueError(f"{self.type.value} rule requires a numeric value")
            if not math.isfinite(bound):
                raise ValueError(f"{self.type.value} rule requires a finite numeric value")
        return self


class FieldCondition(BaseModel):
    """Conditional visibility: the field is shown only when this holds"""
    field: str = Field(..., min_length=1)
    operator: ConditionOperator
    value: Any | None = None


class FormField(BaseModel):
    """Form field definition"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    type: FieldType
    label: str
    required: bool = Field(default=False)
    placeholder: str | None = None
    help_text: str | None = Field(default=None, alias="helpText")
    options: list[FieldOption] | None = Field(
        default=None, description="Options for radio/select fields")
    validation: list[ValidationRule] | None = None
    condition: FieldCondition | None = None

    @model_validator(mode='after')
    def validate_options(self):
        """select/radio fields need a non-empty option set with unique values"""
        if self.type in CHOICE_FIELD_TYPES:
            if not self.options:
                raise ValueError(f"options are required for {self.type.value} fields")
            values = [option.value for option in self.options]
            if len(values) != len(set(values)):
                raise ValueError(f"option values must be unique for field '{self.id}'")
        return self

    def option_values(self) -> list[str]:
        return [option.value for option in self.options or []]


# ==================== PAGE MODELS ====================


class Action(BaseModel):
    """Detail-page action that moves a submission to another state"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    label: str
    target_state: str = Field(..., alias="targetState")
    requires_note: bool = Field(default=False, alias="requiresNote")
    variant: ActionVariant = ActionVariant.PRIMARY


class Page(BaseModel):
    """Page definition"""
    id: str = Field(..., min_length=1)
    route: str = Field(..., min_length=1)
    role: str
    type: PageType
    title: str | None = None
    description: str | None = None
    fields: list[FormField] | None = None
    actions: list[Action] | None = None

    @field_validator('fields')
    @classmethod
    def validate_unique_field_ids(cls, v):
        """Ensure field ids are unique within the page"""
        if v is None:
            return v
        ids = [field.id for field in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Field ids must be unique within a page")
        return v


class Role(BaseModel):
    """Role that can use the app"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    auth_required: bool = Field(..., alias="authRequired")
    route_prefix: str | None = Field(default=None, alias="routePrefix")


# ==================== WORKFLOW MODELS ====================


class Transition(BaseModel):
    """Workflow edge, valid from one or several states"""
    model_config = ConfigDict(populate_by_name=True)

    from_: str | list[str] = Field(..., alias="from")
    to: str
    allowed_roles: list[str] = Field(..., alias="allowedRoles", min_length=1)
    requires_note: bool = Field(default=False, alias="requiresNote")

    @field_validator('from_')
    @classmethod
    def validate_from_not_empty(cls, v):
        if isinstance(v, list) and not v:
            raise ValueError("from must name at least one state")
        return v

    @property
    def from_states(self) -> list[str]:
        """The source states as a list, whichever form was declared"""
        return [self.from_] if isinstance(self.from_, str) else list(self.from_)


class Workflow(BaseModel):
    """Submission state machine"""
    model_config = ConfigDict(populate_by_name=True)

    states: list[str] = Field(..., min_length=1)
    initial_state: str = Field(..., alias="initialState")
    transitions: list[Transition] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_state_references(self):
        """initialState and every transition endpoint must be declared states"""
        if len(self.states) != len(set(self.states)):
            raise ValueError("workflow states must be unique")
        declared = set(self.states)
        if self.initial_state not in declared:
            raise ValueError(f"initialState '{self.initial_state}' is not a declared state")
        for index, transition in enumerate(self.transitions):
            for state in transition.from_states:
                if state not in declared:
                    raise ValueError(f"transitions[{index}].from '{state}' is not a declared state")
            if transition.to not in declared:
                raise ValueError(f"transitions[{index}].to '{transition.to}' is not a declared state")
        return self


# ==================== APP-LEVEL MODELS ====================


class AppMeta(BaseModel):
    """App identity"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    slug: str
    description: str
    org_id: str = Field(..., alias="orgId")
    org_slug: str | None = Field(default=None, alias="orgSlug")

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        """Slug must be a non-empty URL-safe token"""
        if not _SLUG_RE.fullmatch(v):
            raise ValueError("slug must be a non-empty URL-safe token (letters, digits, single hyphens)")
        return v


class Theme(BaseModel):
    """Presentation preset; not interpreted by the engine"""
    preset: str
    logo: str | None = None


class ApiConfig(BaseModel):
    """Endpoints the generated app talks to"""
    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(..., alias="baseUrl")
    endpoints: dict[str, str] = Field(default_factory=dict)


class AnalyticsEvent(BaseModel):
    name: str = Field(..., min_length=1)
    trigger: AnalyticsTrigger
    page: str | None = None


class AnalyticsConfig(BaseModel):
    events: list[AnalyticsEvent] = Field(default_factory=list)


class EnvironmentConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: str
    api_url: str = Field(..., alias="apiUrl")


class Environments(BaseModel):
    staging: EnvironmentConfig
    production: EnvironmentConfig


class AppSpec(BaseModel):
    """
    Root AppSpec document.

    Construction enforces every cross-reference: page roles, action targets and
    transition roles must resolve against the declared roles and states.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    meta: AppMeta
    theme: Theme | None = None
    roles: list[Role] = Field(..., min_length=1)
    pages: list[Page]
    workflow: Workflow
    api: ApiConfig
    analytics: AnalyticsConfig
    environments: Environments

    @field_validator('roles')
    @classmethod
    def validate_unique_roles(cls, v):
        """Ensure role ids are unique"""
        ids = [role.id for role in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Role ids must be unique")
        return v

    @field_validator('pages')
    @classmethod
    def validate_unique_pages(cls, v):
        """Ensure page ids are unique"""
        ids = [page.id for page in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Page ids must be unique")
        return v

    @model_validator(mode='after')
    def validate_references(self):
        """Resolve page roles, action targets and transition roles"""
        role_ids = set(self.role_ids())
        states = set(self.workflow.states)

        for page in self.pages:
            if page.role not in role_ids:
                raise ValueError(f"page '{page.id}' references undeclared role '{page.role}'")
            for action in page.actions or []:
                if action.target_state not in states:
                    raise ValueError(
                        f"action '{action.id}' on page '{page.id}' targets undeclared state "
                        f"'{action.target_state}'"
                    )

        for index, transition in enumerate(self.workflow.transitions):
            for role in transition.allowed_roles:
                if role not in role_ids:
                    raise ValueError(f"workflow.transitions[{index}] allows undeclared role '{role}'")

        return self

    def role_ids(self) -> list[str]:
        return [role.id for role in self.roles]

    def all_fields(self) -> list[FormField]:
        """
        Every input field in page then field order.

        Only welcome and form pages contribute. A field id repeated on a later
        page keeps its first declaration.
        """
        return self.fields_for_role(None)

    def fields_for_role(self, role: str | None) -> list[FormField]:
        """Fields on the input pages a role completes (every role when None)"""
        seen: set[str] = set()
        fields: list[FormField] = []
        for page in self.pages:
            if page.type not in INPUT_PAGE_TYPES:
                continue
            if role is not None and page.role != role:
                continue
            for field in page.fields or []:
                if field.id in seen:
                    continue
                seen.add(field.id)
                fields.append(field)
        return fields

    def field_by_id(self, field_id: str) -> FormField | None:
        for field in self.all_fields():
            if field.id == field_id:
                return field
        return None

    def page_by_id(self, page_id: str) -> Page | None:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None
