from __future__ import annotations

from typing import Any

import pytest
from repo_foundry.schemas.repository import RepositoryInput, RepositoryResult
from repo_foundry.services.github_client import GitHubAPIError
from repo_foundry.services.repository_service import RepositoryCreationError, RepositoryService

_CREATED = {
    "id": 42,
    "full_name": "acme/widgets",
    "html_url": "https://github.com/acme/widgets",
    "default_branch": "main",
}


class _Client:
    def __init__(
        self,
        error: Exception | None = None,
        rename_error: Exception | None = None,
        update_error: Exception | None = None,
    ):
        self.calls: list[tuple[str, tuple, dict[str, Any]]] = []
        self.error = error
        self.rename_error = rename_error
        self.update_error = update_error

    async def _call(self, kind: str, /, *args: Any, **fields: Any) -> dict[str, Any]:
        self.calls.append((kind, args, fields))
        if self.error:
            raise self.error
        return dict(_CREATED)

    async def create_repository_for_user(self, **fields: Any) -> dict[str, Any]:
        return await self._call("user", **fields)

    async def create_repository_in_org(self, org: str, **fields: Any) -> dict[str, Any]:
        return await self._call("org", org, **fields)

    async def create_repository_from_template(
        self, template_owner: str, template_repo: str, **fields: Any
    ) -> dict[str, Any]:
        return await self._call("template", template_owner, template_repo, **fields)

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        self.calls.append(("get", (owner, repo), {}))
        return dict(_CREATED)

    async def rename_branch(
        self, owner: str, repo: str, branch: str, new_name: str
    ) -> dict[str, Any]:
        self.calls.append(("rename", (owner, repo, branch), {"new_name": new_name}))
        if self.rename_error:
            raise self.rename_error
        return {"name": new_name}

    async def update_repository(self, owner: str, repo: str, **fields: Any) -> dict[str, Any]:
        self.calls.append(("update", (owner, repo), fields))
        if self.update_error:
            raise self.update_error
        return {**_CREATED, **fields}


@pytest.mark.asyncio
async def test_creates_user_repository_without_blank_templates() -> None:
    client = _Client()

    result = await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", description="Widgets", private=True)
    )

    assert result == RepositoryResult(
        id=42,
        full_name="acme/widgets",
        html_url="https://github.com/acme/widgets",
        default_branch="main",
    )
    assert (result.owner, result.name) == ("acme", "widgets")
    assert client.calls == [
        (
            "user",
            (),
            {"name": "widgets", "description": "Widgets", "private": True, "auto_init": True},
        )
    ]


@pytest.mark.asyncio
async def test_creates_org_repository_with_templates() -> None:
    client = _Client()

    await RepositoryService(client).create_repository(
        RepositoryInput(
            name="widgets",
            organization="acme",
            auto_init=False,
            gitignore_template="Python",
            license_template="mit",
        )
    )

    name, args, fields = client.calls[0]
    assert (name, args) == ("org", ("acme",))
    assert fields["auto_init"] is False
    assert fields["gitignore_template"] == "Python"
    assert fields["license_template"] == "mit"


@pytest.mark.asyncio
async def test_creates_from_template() -> None:
    client = _Client()

    await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", template="acme/service-template", organization="acme")
    )

    assert client.calls == [
        (
            "template",
            ("acme", "service-template"),
            {
                "name": "widgets",
                "description": "",
                "private": False,
                "include_all_branches": False,
                "owner": "acme",
            },
        )
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("template", ["no-slash", "/repo", "owner/", "a/b/c"])
async def test_invalid_template_format(template: str) -> None:
    client = _Client()

    with pytest.raises(RepositoryCreationError, match="Invalid template format"):
        await RepositoryService(client).create_repository(
            RepositoryInput(name="widgets", template=template)
        )

    assert client.calls == []


@pytest.mark.asyncio
async def test_api_failure_is_wrapped() -> None:
    client = _Client(error=GitHubAPIError("GitHub API error: 422 - name already exists", 422))

    with pytest.raises(RepositoryCreationError, match="name already exists"):
        await RepositoryService(client).create_repository(RepositoryInput(name="widgets"))


@pytest.mark.asyncio
async def test_matching_default_branch_is_left_alone() -> None:
    client = _Client()

    result = await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", default_branch="main")
    )

    assert result.default_branch == "main"
    assert [call[0] for call in client.calls] == ["user"]


@pytest.mark.asyncio
async def test_default_branch_is_renamed() -> None:
    client = _Client()

    result = await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", organization="acme", default_branch="trunk")
    )

    assert result.default_branch == "trunk"
    assert client.calls[1:] == [
        ("get", ("acme", "widgets"), {}),
        ("rename", ("acme", "widgets", "main"), {"new_name": "trunk"}),
    ]


@pytest.mark.asyncio
async def test_failed_rename_falls_back_to_repository_setting() -> None:
    client = _Client(rename_error=GitHubAPIError("GitHub API error: 422 - Branch not found", 422))

    result = await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", template="acme/service-template", default_branch="trunk")
    )

    assert result.default_branch == "trunk"
    assert client.calls[-1] == ("update", ("acme", "widgets"), {"default_branch": "trunk"})


@pytest.mark.asyncio
async def test_default_branch_failure_does_not_fail_creation() -> None:
    client = _Client(
        rename_error=GitHubAPIError("GitHub API error: 422 - Branch not found", 422),
        update_error=GitHubAPIError("GitHub API error: 403 - Forbidden", 403),
    )

    result = await RepositoryService(client).create_repository(
        RepositoryInput(name="widgets", default_branch="trunk")
    )

    assert result.full_name == "acme/widgets"
    assert result.default_branch == "main"
    assert [call[0] for call in client.calls] == ["user", "get", "rename", "update"]
