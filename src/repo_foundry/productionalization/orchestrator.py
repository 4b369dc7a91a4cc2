"""Productionalization of a freshly created repository.

Runs the configured features in three phases and reports, per configured
item, what succeeded and what failed:

1. team permissions, topics and branch protection, concurrently
2. environments, then variables for the environments that were created
3. secrets

A failure in one feature never stops the others.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from repo_foundry.core.logging import repository_ctx
from repo_foundry.productionalization.branch_protection import create_branch_protection
from repo_foundry.productionalization.environments import create_environments
from repo_foundry.productionalization.identifiers import IdentifierResolver
from repo_foundry.productionalization.secrets import create_repository_secrets
from repo_foundry.productionalization.team_permissions import add_team_permissions
from repo_foundry.productionalization.topics import merge_topics
from repo_foundry.productionalization.variables import set_environment_variables
from repo_foundry.schemas.productionalization import (
    EnvironmentCreationResult,
    EnvironmentVariableResult,
    ProductionalizationConfig,
    ProductionalizationResult,
    TeamPermissionResult,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_SECONDS = 2.0


class ProductionalizationService:
    """Drives a repository to the state described by a ProductionalizationConfig."""

    def __init__(
        self,
        client: Any,
        settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
    ):
        """
        Args:
            client: GitHub API client (see GitHubClient)
            settle_delay_seconds: Pause before the first call, giving GitHub
                time to make a just-created repository readable everywhere
        """
        self._client = client
        self._resolver = IdentifierResolver(client)
        self._settle_delay_seconds = settle_delay_seconds

    async def productionalize_repository(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
    ) -> ProductionalizationResult:
        token = repository_ctx.set(f"{owner}/{repo}")
        try:
            logger.info(f"Starting productionalization for {owner}/{repo}")
            if self._settle_delay_seconds > 0:
                await asyncio.sleep(self._settle_delay_seconds)

            result = ProductionalizationResult()

            await asyncio.gather(
                self._team_permissions_phase(owner, repo, config, result),
                self._topics_phase(owner, repo, config, result),
                self._branch_protection_phase(owner, repo, config, result),
            )
            await self._environments_phase(owner, repo, config, result)
            await self._secrets_phase(owner, repo, config, result)

            logger.info(f"Productionalization complete for {owner}/{repo}")
            return result
        finally:
            repository_ctx.reset(token)

    async def _team_permissions_phase(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
        result: ProductionalizationResult,
    ) -> None:
        if not config.team_permissions:
            return
        try:
            result.team_permissions = await add_team_permissions(
                self._client, owner, repo, config.team_permissions
            )
        except Exception as exc:
            logger.error(f"Team permissions failed: {exc}")
            result.team_permissions = [
                TeamPermissionResult(team_slug=team.team_slug, success=False, error=str(exc))
                for team in config.team_permissions
            ]

    async def _topics_phase(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
        result: ProductionalizationResult,
    ) -> None:
        if not config.topics:
            return
        try:
            await merge_topics(self._client, owner, repo, config.topics)
        except Exception as exc:
            result.topics_error = str(exc)
            logger.error(f"Topics merge failed: {result.topics_error}")
            return
        result.topics_added = True

    async def _branch_protection_phase(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
        result: ProductionalizationResult,
    ) -> None:
        if not config.branch_protection_preset:
            return
        try:
            await create_branch_protection(
                self._client,
                owner,
                repo,
                config.branch_protection_preset,
                config.branch_protection_target_branch,
            )
        except Exception as exc:
            result.branch_protection_error = str(exc)
            logger.error(f"Branch protection failed: {result.branch_protection_error}")
            return
        result.branch_protection_created = True

    async def _environments_phase(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
        result: ProductionalizationResult,
    ) -> None:
        if not config.environments:
            return
        try:
            environments = await create_environments(
                self._client, self._resolver, owner, repo, config.environments
            )
        except Exception as exc:
            logger.error(f"Environment setup failed: {exc}")
            result.environment_errors = [
                EnvironmentCreationResult(
                    environment=environment.name, success=False, error=str(exc)
                )
                for environment in config.environments
            ]
            return
        result.environments_created = environments.created
        result.environment_errors = environments.errors

        if not config.environment_variables:
            return
        try:
            variables = await set_environment_variables(
                self._client, owner, repo, config.environment_variables, environments.created
            )
        except Exception as exc:
            logger.error(f"Environment variables failed: {exc}")
            result.variable_errors = [
                EnvironmentVariableResult(
                    environment=group.environment_name,
                    variable=variable.name,
                    success=False,
                    error=str(exc),
                )
                for group in config.environment_variables
                if group.environment_name in environments.created
                for variable in group.variables
            ]
            return
        result.variables_created = variables.created
        result.variable_errors = variables.errors

    async def _secrets_phase(
        self,
        owner: str,
        repo: str,
        config: ProductionalizationConfig,
        result: ProductionalizationResult,
    ) -> None:
        if not config.secrets:
            return
        try:
            secrets = await create_repository_secrets(self._client, owner, repo, config.secrets)
        except Exception as exc:
            result.secrets_error = str(exc)
            logger.error(f"Secrets creation failed: {result.secrets_error}")
            return
        result.secrets_created = secrets.created
        result.secret_errors = secrets.errors
