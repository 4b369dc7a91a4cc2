"""Environment variables for provisioned environments."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any, Protocol

from repo_foundry.productionalization.case import to_upper_snake_case
from repo_foundry.schemas.productionalization import (
    EnvironmentVariable,
    EnvironmentVariableResult,
    EnvironmentVariables,
)
from repo_foundry.services.github_client import GitHubNotFoundError

logger = logging.getLogger(__name__)


class _VariablesClient(Protocol):
    async def get_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str
    ) -> dict[str, Any]: ...

    async def create_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str, value: str
    ) -> None: ...

    async def update_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str, value: str
    ) -> None: ...


@dataclass
class VariablesOutcome:
    created: int = 0
    errors: list[EnvironmentVariableResult] = field(default_factory=list)


async def _variable_exists(
    client: _VariablesClient,
    owner: str,
    repo: str,
    environment_name: str,
    name: str,
) -> bool:
    # Only a 404 means absent; any other lookup failure propagates.
    try:
        await client.get_environment_variable(owner, repo, environment_name, name)
    except GitHubNotFoundError:
        return False
    return True


async def set_environment_variable(
    client: _VariablesClient,
    owner: str,
    repo: str,
    environment_name: str,
    variable: EnvironmentVariable,
) -> str:
    """Create or update one variable under its UPPER_SNAKE_CASE name."""
    name = to_upper_snake_case(variable.name)
    logger.info(f"Setting variable {name} for environment {environment_name}")

    if await _variable_exists(client, owner, repo, environment_name, name):
        await client.update_environment_variable(owner, repo, environment_name, name, variable.value)
    else:
        await client.create_environment_variable(owner, repo, environment_name, name, variable.value)

    logger.info(f"Successfully set variable {name} for environment {environment_name}")
    return name


async def _try_set_environment_variable(
    client: _VariablesClient,
    owner: str,
    repo: str,
    environment_name: str,
    variable: EnvironmentVariable,
) -> EnvironmentVariableResult | None:
    try:
        await set_environment_variable(client, owner, repo, environment_name, variable)
    except Exception as exc:
        logger.error(
            f"Failed to set variable {variable.name} for environment {environment_name}: {exc}"
        )
        return EnvironmentVariableResult(
            environment=environment_name,
            variable=variable.name,
            success=False,
            error=str(exc),
        )
    return None


async def set_environment_variables(
    client: _VariablesClient,
    owner: str,
    repo: str,
    groups: list[EnvironmentVariables],
    created_environments: Collection[str],
) -> VariablesOutcome:
    """Set variables for every group whose environment was created.

    Groups targeting an environment that does not exist are skipped without
    an error. Groups run in order; variables within a group run concurrently.
    """
    logger.info(f"Setting environment variables for {owner}/{repo}")
    outcome = VariablesOutcome()

    for group in groups:
        environment_name = group.environment_name
        if environment_name not in created_environments:
            logger.info(
                f"Skipping variables for environment {environment_name} (environment not created)"
            )
            continue

        failures = await asyncio.gather(
            *(
                _try_set_environment_variable(client, owner, repo, environment_name, variable)
                for variable in group.variables
            )
        )
        for failure in failures:
            if failure is None:
                outcome.created += 1
            else:
                outcome.errors.append(failure)

    return outcome
