"""Resolution of team slugs and usernames to GitHub numeric ids."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from repo_foundry.productionalization.errors import ResolutionError

logger = logging.getLogger(__name__)


class _LookupClient(Protocol):
    async def get_team_by_slug(self, org: str, team_slug: str) -> dict[str, Any]: ...

    async def get_user(self, username: str) -> dict[str, Any]: ...


class IdentifierResolver:
    """Looks up numeric ids, one remote read per call and no retry."""

    def __init__(self, client: _LookupClient):
        self._client = client

    async def resolve_team(self, org: str, team_slug: str) -> int:
        logger.info(f"Resolving team slug: {team_slug}")
        try:
            team = await self._client.get_team_by_slug(org, team_slug)
            return int(team["id"])
        except Exception as exc:
            raise ResolutionError(
                team_slug,
                f"Failed to resolve team slug '{team_slug}': {exc}",
            ) from exc

    async def resolve_user(self, username: str) -> int:
        logger.info(f"Resolving username: {username}")
        try:
            user = await self._client.get_user(username)
            return int(user["id"])
        except Exception as exc:
            raise ResolutionError(
                username,
                f"Failed to resolve username '{username}': {exc}",
            ) from exc
