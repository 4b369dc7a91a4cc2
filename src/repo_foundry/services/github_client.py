"""Async GitHub API client for repository administration.

Uses GitHub REST API v3 to:
- Create repositories (new or from a template)
- Manage team access, topics, rulesets and deployment environments
- Manage environment variables and Actions secrets
- Look up teams and users

Reference: https://docs.github.com/en/rest
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from repo_foundry.config import get_settings

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubRateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""

    pass


class GitHubNotFoundError(GitHubAPIError):
    """Raised when requested resource is not found."""

    pass


def _segment(value: str) -> str:
    return quote(value, safe="")


class GitHubClient:
    """
    Async GitHub API client for repository administration.

    Handles authentication, rate limiting, and error responses.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (or uses GITHUB_TOKEN env var)
            base_url: GitHub API base URL (default: https://api.github.com)
            transport: Optional httpx transport, mostly for tests
        """
        settings = get_settings()
        self.token = token or settings.github_token
        self.base_url = (base_url or settings.github_api_base_url).rstrip("/")
        self._timeout = httpx.Timeout(
            settings.http_timeout_seconds,
            connect=settings.http_connect_timeout_seconds,
        )
        self._transport = transport

        if not self.token:
            logger.warning("GitHub token not configured - API calls will be rate limited")

        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GitHubClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._build_headers(),
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> dict[str, str]:
        """Build request headers with authentication."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an API request with error handling.

        Raises:
            GitHubRateLimitError: If rate limit exceeded
            GitHubNotFoundError: If resource not found
            GitHubAPIError: For other API errors
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GitHub API request failed: {method} {path}: {exc}") from exc

        if response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining", "")
            if remaining == "0":
                reset_time = response.headers.get("X-RateLimit-Reset", "unknown")
                raise GitHubRateLimitError(
                    f"GitHub API rate limit exceeded. Resets at {reset_time}",
                    status_code=403,
                )

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"Resource not found: {path}",
                status_code=404,
            )

        if response.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        return response

    # Users, teams and repositories

    async def get_user(self, username: str) -> dict[str, Any]:
        """Get a user by login."""
        logger.debug(f"Fetching user {username}")
        response = await self._request("GET", f"/users/{_segment(username)}")
        return response.json()

    async def get_team_by_slug(self, org: str, team_slug: str) -> dict[str, Any]:
        """Get an organization team by slug."""
        logger.debug(f"Fetching team {org}/{team_slug}")
        response = await self._request("GET", f"/orgs/{org}/teams/{_segment(team_slug)}")
        return response.json()

    async def create_repository_for_user(self, **fields: Any) -> dict[str, Any]:
        """Create a repository owned by the authenticated user."""
        response = await self._request("POST", "/user/repos", json=fields)
        return response.json()

    async def create_repository_in_org(self, org: str, **fields: Any) -> dict[str, Any]:
        """Create a repository in an organization."""
        response = await self._request("POST", f"/orgs/{org}/repos", json=fields)
        return response.json()

    async def create_repository_from_template(
        self,
        template_owner: str,
        template_repo: str,
        **fields: Any,
    ) -> dict[str, Any]:
        """Create a repository from a template repository."""
        response = await self._request(
            "POST",
            f"/repos/{template_owner}/{template_repo}/generate",
            json=fields,
        )
        return response.json()

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Get repository details."""
        logger.debug(f"Fetching repository {owner}/{repo}")
        response = await self._request("GET", f"/repos/{owner}/{repo}")
        return response.json()

    async def update_repository(self, owner: str, repo: str, **fields: Any) -> dict[str, Any]:
        """Update repository settings (e.g. ``default_branch``)."""
        response = await self._request("PATCH", f"/repos/{owner}/{repo}", json=fields)
        return response.json()

    async def rename_branch(
        self,
        owner: str,
        repo: str,
        branch: str,
        new_name: str,
    ) -> dict[str, Any]:
        """Rename a branch; renaming the default branch also moves the default."""
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/branches/{_segment(branch)}/rename",
            json={"new_name": new_name},
        )
        return response.json()

    # Productionalization

    async def add_or_update_team_repo_permission(
        self,
        *,
        org: str,
        team_slug: str,
        owner: str,
        repo: str,
        permission: str,
    ) -> None:
        """Grant a team a permission level on a repository (creates or updates)."""
        await self._request(
            "PUT",
            f"/orgs/{org}/teams/{_segment(team_slug)}/repos/{owner}/{repo}",
            json={"permission": permission},
        )

    async def get_topics(self, owner: str, repo: str) -> list[str]:
        """Get all topics of a repository."""
        response = await self._request("GET", f"/repos/{owner}/{repo}/topics")
        return list(response.json().get("names", []))

    async def replace_topics(self, owner: str, repo: str, names: list[str]) -> list[str]:
        """Replace all topics of a repository."""
        response = await self._request(
            "PUT",
            f"/repos/{owner}/{repo}/topics",
            json={"names": names},
        )
        return list(response.json().get("names", []))

    async def create_ruleset(
        self,
        owner: str,
        repo: str,
        ruleset: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a repository ruleset."""
        response = await self._request("POST", f"/repos/{owner}/{repo}/rulesets", json=ruleset)
        return response.json()

    async def create_or_update_environment(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a deployment environment or update its protection rules."""
        response = await self._request(
            "PUT",
            f"/repos/{owner}/{repo}/environments/{_segment(environment_name)}",
            json=payload,
        )
        return response.json()

    async def get_environment_variable(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        name: str,
    ) -> dict[str, Any]:
        """Get a single environment variable."""
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/environments/{_segment(environment_name)}"
            f"/variables/{_segment(name)}",
        )
        return response.json()

    async def create_environment_variable(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        name: str,
        value: str,
    ) -> None:
        """Create an environment variable."""
        await self._request(
            "POST",
            f"/repos/{owner}/{repo}/environments/{_segment(environment_name)}/variables",
            json={"name": name, "value": value},
        )

    async def update_environment_variable(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        name: str,
        value: str,
    ) -> None:
        """Update an existing environment variable."""
        await self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/environments/{_segment(environment_name)}"
            f"/variables/{_segment(name)}",
            json={"name": name, "value": value},
        )

    async def get_repo_public_key(self, owner: str, repo: str) -> dict[str, Any]:
        """Get the public key used to encrypt Actions secrets.

        Returns:
            Dict with ``key_id`` and base64 ``key``
        """
        response = await self._request("GET", f"/repos/{owner}/{repo}/actions/secrets/public-key")
        return response.json()

    async def create_or_update_repo_secret(
        self,
        owner: str,
        repo: str,
        secret_name: str,
        encrypted_value: str,
        key_id: str,
    ) -> None:
        """Create or update an Actions secret with an already encrypted value."""
        await self._request(
            "PUT",
            f"/repos/{owner}/{repo}/actions/secrets/{_segment(secret_name)}",
            json={"encrypted_value": encrypted_value, "key_id": key_id},
        )
