"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from nacl import encoding, public
from repo_foundry.config import get_settings
from repo_foundry.services.github_client import GitHubAPIError, GitHubNotFoundError


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from the runner environment."""
    for name in ("GITHUB_TOKEN", "GITHUB_OUTPUT", "LOG_FORMAT", "SETTLE_DELAY_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient.

    ``failures`` maps ``(method, key)`` to the exception that call raises;
    the key is the team slug, topic call name, environment name, variable
    name or secret name the call is about.
    """

    def __init__(self, private_key: public.PrivateKey):
        self.private_key = private_key
        self.teams: dict[str, int] = {"core": 101, "platform": 102, "release-managers": 103}
        self.users: dict[str, int] = {"octocat": 1, "hubot": 2}
        self.topics: list[str] = ["existing", "infra"]
        self.variables: dict[tuple[str, str], str] = {}
        self.environments: dict[str, dict[str, Any]] = {}
        self.rulesets: list[dict[str, Any]] = []
        self.permissions: dict[str, str] = {}
        self.secrets: dict[str, str] = {}
        self.public_key_available = True
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []

    def _record(self, method: str, key: str) -> None:
        self.calls.append((method, key))
        failure = self.failures.get((method, key))
        if failure is not None:
            raise failure

    async def get_team_by_slug(self, org: str, team_slug: str) -> dict[str, Any]:
        self._record("get_team_by_slug", team_slug)
        if team_slug not in self.teams:
            raise GitHubNotFoundError(f"Resource not found: /orgs/{org}/teams/{team_slug}", 404)
        return {"id": self.teams[team_slug], "slug": team_slug}

    async def get_user(self, username: str) -> dict[str, Any]:
        self._record("get_user", username)
        if username not in self.users:
            raise GitHubNotFoundError(f"Resource not found: /users/{username}", 404)
        return {"id": self.users[username], "login": username}

    async def add_or_update_team_repo_permission(
        self,
        *,
        org: str,
        team_slug: str,
        owner: str,
        repo: str,
        permission: str,
    ) -> None:
        self._record("add_or_update_team_repo_permission", team_slug)
        if team_slug not in self.teams:
            raise GitHubNotFoundError(f"Resource not found: /orgs/{org}/teams/{team_slug}", 404)
        self.permissions[team_slug] = permission

    async def get_topics(self, owner: str, repo: str) -> list[str]:
        self._record("get_topics", "topics")
        return list(self.topics)

    async def replace_topics(self, owner: str, repo: str, names: list[str]) -> list[str]:
        self._record("replace_topics", "topics")
        self.topics = list(names)
        return list(names)

    async def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]:
        self._record("create_ruleset", ruleset["name"])
        self.rulesets.append(ruleset)
        return {"id": len(self.rulesets), **ruleset}

    async def create_or_update_environment(
        self,
        owner: str,
        repo: str,
        environment_name: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        self._record("create_or_update_environment", environment_name)
        self.environments[environment_name] = payload
        return {"name": environment_name}

    async def get_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str
    ) -> dict[str, Any]:
        self._record("get_environment_variable", name)
        if (environment_name, name) not in self.variables:
            raise GitHubNotFoundError(f"Resource not found: variables/{name}", 404)
        return {"name": name, "value": self.variables[(environment_name, name)]}

    async def create_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str, value: str
    ) -> None:
        self._record("create_environment_variable", name)
        if (environment_name, name) in self.variables:
            raise GitHubAPIError("GitHub API error: 409 - Already exists", 409)
        self.variables[(environment_name, name)] = value

    async def update_environment_variable(
        self, owner: str, repo: str, environment_name: str, name: str, value: str
    ) -> None:
        self._record("update_environment_variable", name)
        self.variables[(environment_name, name)] = value

    async def get_repo_public_key(self, owner: str, repo: str) -> dict[str, Any]:
        self._record("get_repo_public_key", "public-key")
        if not self.public_key_available:
            raise GitHubAPIError("GitHub API error: 403 - Resource not accessible", 403)
        key = self.private_key.public_key.encode(encoding.Base64Encoder).decode("utf-8")
        return {"key_id": "568250167242549743", "key": key}

    async def create_or_update_repo_secret(
        self,
        owner: str,
        repo: str,
        secret_name: str,
        encrypted_value: str,
        key_id: str,
    ) -> None:
        self._record("create_or_update_repo_secret", secret_name)
        self.secrets[secret_name] = encrypted_value

    def decrypt_secret(self, name: str) -> str:
        sealed = encoding.Base64Encoder.decode(self.secrets[name].encode("utf-8"))
        return public.SealedBox(self.private_key).decrypt(sealed).decode("utf-8")


@pytest.fixture
def private_key() -> public.PrivateKey:
    return public.PrivateKey.generate()


@pytest.fixture
def fake_client(private_key: public.PrivateKey) -> FakeGitHubClient:
    return FakeGitHubClient(private_key)
