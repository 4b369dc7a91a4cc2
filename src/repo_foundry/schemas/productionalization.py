"""Schemas for repository productionalization.

Field names are snake_case in Python and camelCase on the wire, so action
inputs can be written as ``{"teamSlug": "core", "permission": "push"}`` and
the result report serializes back to camelCase.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic.alias_generators import to_camel

TeamPermission = Literal["pull", "triage", "push", "maintain", "admin"]
ReviewerType = Literal["User", "Team"]
BranchProtectionPreset = Literal["strict", "moderate", "minimal"]

DEFAULT_BRANCH_PROTECTION_TARGET = "master"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class _ResultModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TeamPermissionConfig(_ConfigModel):
    """Permission level to grant one organization team."""

    team_slug: str = Field(..., min_length=1)
    permission: TeamPermission


class EnvironmentReviewer(_ConfigModel):
    """Required reviewer of a deployment environment, by login or team slug."""

    type: ReviewerType
    slug: str = Field(..., min_length=1)


class EnvironmentConfig(_ConfigModel):
    """Deployment environment to create.

    Optional fields left as ``None`` are not sent, so GitHub keeps its own
    defaults for them.
    """

    name: str = Field(..., min_length=1)
    wait_timer: int | None = Field(None, ge=0)
    reviewers: list[EnvironmentReviewer] | None = None
    prevent_self_review: bool | None = None


class EnvironmentVariable(_ConfigModel):
    name: str = Field(..., min_length=1)
    value: str


class EnvironmentVariables(_ConfigModel):
    """Variables to set on one environment."""

    environment_name: str = Field(..., min_length=1)
    variables: list[EnvironmentVariable]


class RepositorySecret(_ConfigModel):
    """Actions secret; the value is only ever sent encrypted."""

    name: str = Field(..., min_length=1)
    value: SecretStr


class ProductionalizationConfig(_ConfigModel):
    """Desired repository state. Any field left unset disables that feature."""

    team_permissions: list[TeamPermissionConfig] | None = None
    topics: list[str] | None = None
    environments: list[EnvironmentConfig] | None = None
    environment_variables: list[EnvironmentVariables] | None = None
    branch_protection_preset: BranchProtectionPreset | None = None
    branch_protection_target_branch: str = DEFAULT_BRANCH_PROTECTION_TARGET
    secrets: list[RepositorySecret] | None = None

    @model_validator(mode="after")
    def _environment_names_unique(self) -> ProductionalizationConfig:
        if self.environments:
            seen: set[str] = set()
            for environment in self.environments:
                if environment.name in seen:
                    raise ValueError(f"Duplicate environment name: {environment.name}")
                seen.add(environment.name)
        return self


class TeamPermissionResult(_ResultModel):
    team_slug: str
    success: bool
    error: str | None = None


class EnvironmentCreationResult(_ResultModel):
    environment: str
    success: bool = False
    error: str | None = None


class EnvironmentVariableResult(_ResultModel):
    environment: str
    variable: str
    success: bool = False
    error: str | None = None


class SecretCreationResult(_ResultModel):
    secret: str
    success: bool
    error: str | None = None


class ProductionalizationResult(BaseModel):
    """Outcome of a productionalization run, one entry per configured item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    team_permissions: list[TeamPermissionResult] = Field(default_factory=list)
    topics_added: bool = False
    topics_error: str | None = None
    environments_created: list[str] = Field(default_factory=list)
    environment_errors: list[EnvironmentCreationResult] = Field(default_factory=list)
    variables_created: int = 0
    variable_errors: list[EnvironmentVariableResult] = Field(default_factory=list)
    branch_protection_created: bool = False
    branch_protection_error: str | None = None
    secrets_created: int = 0
    secret_errors: list[SecretCreationResult] = Field(default_factory=list)
    # Set when no secret could be attempted (public key unavailable)
    secrets_error: str | None = None

    def to_json(self) -> str:
        """Serialize with camelCase keys, omitting unset error fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
