"""Repository creation, either empty or from a template."""

import logging
from typing import Any

from repo_foundry.schemas.repository import RepositoryInput, RepositoryResult
from repo_foundry.services.github_client import GitHubAPIError

logger = logging.getLogger(__name__)


class RepositoryCreationError(Exception):
    """Error while creating a repository."""

    pass


class RepositoryService:
    """Creates repositories for a user or an organization."""

    def __init__(self, client: Any):
        self._client = client

    async def create_repository(self, request: RepositoryInput) -> RepositoryResult:
        if request.template:
            result = await self.create_from_template(request)
        else:
            result = await self.create_new_repository(request)

        if request.default_branch and request.default_branch != result.default_branch:
            if await self.update_default_branch(result.full_name, request.default_branch):
                result = result.model_copy(update={"default_branch": request.default_branch})
        return result

    async def create_from_template(self, request: RepositoryInput) -> RepositoryResult:
        template_owner, _, template_repo = (request.template or "").partition("/")
        if not template_owner or not template_repo or "/" in template_repo:
            raise RepositoryCreationError(
                "Invalid template format. Expected format: owner/repository"
            )

        logger.info(f"Creating repository from template: {template_owner}/{template_repo}")
        fields: dict[str, Any] = {
            "name": request.name,
            "description": request.description,
            "private": request.private,
            "include_all_branches": False,
        }
        if request.organization:
            fields["owner"] = request.organization

        try:
            data = await self._client.create_repository_from_template(
                template_owner, template_repo, **fields
            )
        except GitHubAPIError as exc:
            raise RepositoryCreationError(
                f"Failed to create repository from template: {exc}"
            ) from exc
        return self._to_result(data)

    async def create_new_repository(self, request: RepositoryInput) -> RepositoryResult:
        logger.info("Creating new repository")
        fields: dict[str, Any] = {
            "name": request.name,
            "description": request.description,
            "private": request.private,
            "auto_init": request.auto_init,
        }
        if request.gitignore_template:
            fields["gitignore_template"] = request.gitignore_template
        if request.license_template:
            fields["license_template"] = request.license_template

        try:
            if request.organization:
                data = await self._client.create_repository_in_org(request.organization, **fields)
            else:
                data = await self._client.create_repository_for_user(**fields)
        except GitHubAPIError as exc:
            raise RepositoryCreationError(f"Failed to create new repository: {exc}") from exc
        return self._to_result(data)

    async def update_default_branch(self, full_name: str, default_branch: str) -> bool:
        """Make ``default_branch`` the repository's default branch.

        Renames the current default branch when possible, otherwise points the
        repository setting at ``default_branch``. Failures are logged as
        warnings and reported as ``False``; they never fail the creation.
        """
        owner, _, repo = full_name.partition("/")
        logger.info(f"Updating default branch to: {default_branch}")
        try:
            data = await self._client.get_repository(owner, repo)
            current = data.get("default_branch")
            if current == default_branch:
                logger.info(f"Default branch is already set to {default_branch}")
                return True

            try:
                await self._client.rename_branch(owner, repo, current, default_branch)
                logger.info(f"Renamed branch {current} to {default_branch}")
            except GitHubAPIError as exc:
                logger.warning(
                    f"Could not rename branch {current}: {exc}. "
                    "Updating the default branch setting instead."
                )
                await self._client.update_repository(owner, repo, default_branch=default_branch)
                logger.info(f"Updated default branch setting to {default_branch}")
        except GitHubAPIError as exc:
            logger.warning(f"Failed to update default branch: {exc}")
            return False
        return True

    @staticmethod
    def _to_result(data: dict[str, Any]) -> RepositoryResult:
        return RepositoryResult(
            id=data["id"],
            full_name=data["full_name"],
            html_url=data["html_url"],
            default_branch=data.get("default_branch"),
        )
