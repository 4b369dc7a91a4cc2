"""Team access grants for a repository."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from repo_foundry.schemas.productionalization import TeamPermissionConfig, TeamPermissionResult

logger = logging.getLogger(__name__)


class _TeamPermissionClient(Protocol):
    async def add_or_update_team_repo_permission(
        self,
        *,
        org: str,
        team_slug: str,
        owner: str,
        repo: str,
        permission: str,
    ) -> None: ...


async def add_team_permissions(
    client: _TeamPermissionClient,
    owner: str,
    repo: str,
    teams: list[TeamPermissionConfig],
) -> list[TeamPermissionResult]:
    """Grant every configured team its permission, all teams concurrently.

    Never raises for a single team; results are in input order.
    """
    logger.info(f"Adding team permissions for {owner}/{repo}")

    async def _grant(team: TeamPermissionConfig) -> TeamPermissionResult:
        try:
            await client.add_or_update_team_repo_permission(
                org=owner,
                team_slug=team.team_slug,
                owner=owner,
                repo=repo,
                permission=team.permission,
            )
        except Exception as exc:
            logger.error(f"Failed to add permission for team {team.team_slug}: {exc}")
            return TeamPermissionResult(team_slug=team.team_slug, success=False, error=str(exc))

        logger.info(f"Added {team.permission} permission for team: {team.team_slug}")
        return TeamPermissionResult(team_slug=team.team_slug, success=True)

    return list(await asyncio.gather(*(_grant(team) for team in teams)))
