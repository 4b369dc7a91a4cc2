"""Deployment environment provisioning."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from repo_foundry.productionalization.identifiers import IdentifierResolver
from repo_foundry.schemas.productionalization import (
    EnvironmentConfig,
    EnvironmentCreationResult,
    EnvironmentReviewer,
)

logger = logging.getLogger(__name__)


class _EnvironmentClient(Protocol):
    async def create_or_update_environment(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]: ...


@dataclass
class EnvironmentsOutcome:
    created: list[str] = field(default_factory=list)
    errors: list[EnvironmentCreationResult] = field(default_factory=list)


async def resolve_reviewers(
    resolver: IdentifierResolver,
    org: str,
    reviewers: list[EnvironmentReviewer],
) -> list[dict[str, Any]]:
    """Resolve all reviewers concurrently; the first failure is raised."""

    async def _resolve(reviewer: EnvironmentReviewer) -> dict[str, Any]:
        if reviewer.type == "Team":
            reviewer_id = await resolver.resolve_team(org, reviewer.slug)
        else:
            reviewer_id = await resolver.resolve_user(reviewer.slug)
        return {"type": reviewer.type, "id": reviewer_id}

    outcomes = await asyncio.gather(
        *(_resolve(reviewer) for reviewer in reviewers),
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)


def build_environment_payload(
    environment: EnvironmentConfig,
    reviewers: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Request body for creating or updating ``environment``.

    Deployments are never restricted to protected branches. Optional settings
    are only included when configured.
    """
    payload: dict[str, Any] = {
        "deployment_branch_policy": {
            "protected_branches": False,
            "custom_branch_policies": True,
        },
    }
    if environment.wait_timer is not None:
        payload["wait_timer"] = environment.wait_timer
    if reviewers:
        payload["reviewers"] = reviewers
    if environment.prevent_self_review is not None:
        payload["prevent_self_review"] = environment.prevent_self_review
    return payload


async def create_environments(
    client: _EnvironmentClient,
    resolver: IdentifierResolver,
    owner: str,
    repo: str,
    environments: list[EnvironmentConfig],
) -> EnvironmentsOutcome:
    """Create environments one at a time, in order.

    A failing environment is recorded and skipped; the rest still run.
    """
    logger.info(f"Creating environments for {owner}/{repo}")
    outcome = EnvironmentsOutcome()

    for environment in environments:
        try:
            logger.info(f"Creating environment: {environment.name}")
            reviewers = None
            if environment.reviewers:
                reviewers = await resolve_reviewers(resolver, owner, environment.reviewers)

            await client.create_or_update_environment(
                owner,
                repo,
                environment.name,
                build_environment_payload(environment, reviewers),
            )
        except Exception as exc:
            logger.error(f"Failed to create environment {environment.name}: {exc}")
            outcome.errors.append(
                EnvironmentCreationResult(environment=environment.name, success=False, error=str(exc))
            )
            continue

        logger.info(f"Successfully created environment: {environment.name}")
        outcome.created.append(environment.name)

    return outcome
