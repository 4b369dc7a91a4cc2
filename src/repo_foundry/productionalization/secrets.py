"""Actions secrets for a repository."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from repo_foundry.productionalization.crypto import seal_secret
from repo_foundry.productionalization.errors import PublicKeyError
from repo_foundry.schemas.productionalization import RepositorySecret, SecretCreationResult

logger = logging.getLogger(__name__)


class _SecretsClient(Protocol):
    async def get_repo_public_key(self, owner: str, repo: str) -> dict[str, Any]: ...

    async def create_or_update_repo_secret(
        self,
        owner: str,
        repo: str,
        secret_name: str,
        encrypted_value: str,
        key_id: str,
    ) -> None: ...


@dataclass
class SecretsOutcome:
    created: int = 0
    errors: list[SecretCreationResult] = field(default_factory=list)


async def create_repository_secrets(
    client: _SecretsClient,
    owner: str,
    repo: str,
    secrets: list[RepositorySecret],
) -> SecretsOutcome:
    """Encrypt and upload all secrets concurrently.

    Raises:
        PublicKeyError: If the repository public key is unavailable; no
            secret is attempted in that case
    """
    logger.info(f"Creating repository secrets for {owner}/{repo}")

    try:
        response = await client.get_repo_public_key(owner, repo)
        public_key, key_id = response["key"], response["key_id"]
    except Exception as exc:
        raise PublicKeyError(f"Failed to get repository public key: {exc}") from exc

    async def _create(secret: RepositorySecret) -> SecretCreationResult:
        try:
            encrypted_value = seal_secret(public_key, secret.value.get_secret_value())
            await client.create_or_update_repo_secret(
                owner, repo, secret.name, encrypted_value, key_id
            )
        except Exception as exc:
            logger.error(f"Failed to create secret {secret.name}: {exc}")
            return SecretCreationResult(secret=secret.name, success=False, error=str(exc))

        logger.info(f"Created/updated secret: {secret.name}")
        return SecretCreationResult(secret=secret.name, success=True)

    outcome = SecretsOutcome()
    for result in await asyncio.gather(*(_create(secret) for secret in secrets)):
        if result.success:
            outcome.created += 1
        else:
            outcome.errors.append(result)
    return outcome
