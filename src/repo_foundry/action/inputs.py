"""Reading and validating GitHub Action inputs.

The runner passes each input as an ``INPUT_<NAME>`` environment variable.
Structured inputs are JSON; they are validated with the pydantic schemas so
a bad value fails the step before anything is created.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar, get_args

from pydantic import BaseModel, TypeAdapter, ValidationError

from repo_foundry.schemas.productionalization import (
    DEFAULT_BRANCH_PROTECTION_TARGET,
    BranchProtectionPreset,
    EnvironmentConfig,
    EnvironmentVariables,
    ProductionalizationConfig,
    RepositorySecret,
    TeamPermissionConfig,
)
from repo_foundry.schemas.repository import RepositoryInput

DEFAULT_BRANCH = "main"

ModelT = TypeVar("ModelT", bound=BaseModel)

_PRESETS: tuple[str, ...] = get_args(BranchProtectionPreset)


class InputError(ValueError):
    """An action input is missing or invalid."""

    def __init__(self, input_name: str, reason: str):
        super().__init__(f"Invalid input '{input_name}': {reason}")
        self.input_name = input_name
        self.reason = reason


@dataclass(frozen=True)
class ActionInputs:
    token: str
    repository: RepositoryInput
    productionalization: ProductionalizationConfig | None = None


def get_input(environ: Mapping[str, str], name: str, *, required: bool = False) -> str:
    value = environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    if required and not value:
        raise InputError(name, "input required and not supplied")
    return value


def parse_bool(value: str, default: bool = False) -> bool:
    if not value:
        return default
    return value.strip().lower() == "true"


def parse_model_list(
    input_name: str,
    value: str,
    model: type[ModelT],
) -> list[ModelT] | None:
    """Parse a JSON array of ``model`` items. Blank or ``[]`` means not configured."""
    if not value or value.strip() in ("", "[]"):
        return None
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError as exc:
        raise InputError(input_name, f"not valid JSON ({exc.msg})") from exc
    if not isinstance(parsed, list):
        raise InputError(input_name, "must be a JSON array")
    try:
        return TypeAdapter(list[model]).validate_python(parsed)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise InputError(input_name, _describe(exc)) from exc


def parse_topics(value: str) -> list[str] | None:
    """Topics as a JSON array of strings or as a comma-separated list."""
    if not value:
        return None
    topics: list[str] | None = None
    if value.strip().startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            topics = [topic.strip() for topic in parsed if isinstance(topic, str) and topic.strip()]
    if topics is None:
        topics = [topic.strip() for topic in value.split(",") if topic.strip()]
    return topics or None


def parse_branch_protection_preset(value: str) -> BranchProtectionPreset | None:
    if not value:
        return None
    preset = value.strip()
    if preset not in _PRESETS:
        raise InputError(
            "branch-protection-preset",
            f"{value}. Must be one of: {', '.join(_PRESETS)}",
        )
    return preset  # type: ignore[return-value]


def parse_productionalization_config(environ: Mapping[str, str]) -> ProductionalizationConfig:
    preset = parse_branch_protection_preset(get_input(environ, "branch-protection-preset"))
    fields: dict[str, Any] = {
        "team_permissions": parse_model_list(
            "team-permissions", get_input(environ, "team-permissions"), TeamPermissionConfig
        ),
        "topics": parse_topics(get_input(environ, "repository-topics")),
        "environments": parse_model_list(
            "environments", get_input(environ, "environments"), EnvironmentConfig
        ),
        "environment_variables": parse_model_list(
            "environment-variables",
            get_input(environ, "environment-variables"),
            EnvironmentVariables,
        ),
        "branch_protection_preset": preset,
        "secrets": parse_model_list(
            "repository-secrets", get_input(environ, "repository-secrets"), RepositorySecret
        ),
    }
    if preset:
        fields["branch_protection_target_branch"] = (
            get_input(environ, "branch-protection-target-branch")
            or DEFAULT_BRANCH_PROTECTION_TARGET
        )
    try:
        return ProductionalizationConfig(**fields)
    except ValidationError as exc:
        raise InputError("environments", _describe(exc)) from exc


def read_action_inputs(environ: Mapping[str, str], default_token: str = "") -> ActionInputs:
    token = get_input(environ, "github-token") or default_token
    if not token:
        raise InputError("github-token", "input required and not supplied")

    try:
        repository = RepositoryInput(
            name=get_input(environ, "repository-name", required=True),
            description=get_input(environ, "repository-description"),
            private=parse_bool(get_input(environ, "repository-private")),
            template=get_input(environ, "repository-template") or None,
            organization=get_input(environ, "organization") or None,
            auto_init=parse_bool(get_input(environ, "auto-init"), default=True),
            gitignore_template=get_input(environ, "gitignore-template") or None,
            license_template=get_input(environ, "license-template") or None,
            default_branch=get_input(environ, "default-branch") or DEFAULT_BRANCH,
        )
    except ValidationError as exc:
        raise InputError("repository-name", _describe(exc)) from exc

    productionalization = None
    if parse_bool(get_input(environ, "productionalize")):
        productionalization = parse_productionalization_config(environ)

    return ActionInputs(
        token=token,
        repository=repository,
        productionalization=productionalization,
    )


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(problems)
