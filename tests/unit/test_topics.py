from __future__ import annotations

import pytest
from repo_foundry.productionalization.errors import TopicsError
from repo_foundry.productionalization.topics import merge_topics, union_topics
from repo_foundry.services.github_client import GitHubAPIError


def test_union_keeps_existing_order_and_drops_duplicates() -> None:
    assert union_topics(["infra", "python"], ["python", "ci", "infra", "ci"]) == [
        "infra",
        "python",
        "ci",
    ]


def test_union_is_case_sensitive() -> None:
    assert union_topics(["Infra"], ["infra"]) == ["Infra", "infra"]


@pytest.mark.asyncio
async def test_merge_writes_full_replacement_set(fake_client) -> None:
    merged = await merge_topics(fake_client, "acme", "widgets", ["infra", "terraform"])

    assert merged == ["existing", "infra", "terraform"]
    assert fake_client.topics == ["existing", "infra", "terraform"]
    assert fake_client.calls == [("get_topics", "topics"), ("replace_topics", "topics")]


@pytest.mark.asyncio
async def test_merge_twice_is_idempotent(fake_client) -> None:
    await merge_topics(fake_client, "acme", "widgets", ["terraform", "ci"])
    first = list(fake_client.topics)
    await merge_topics(fake_client, "acme", "widgets", ["terraform", "ci"])

    assert fake_client.topics == first


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get_topics", "replace_topics"])
async def test_read_or_write_failure_raises_topics_error(fake_client, method: str) -> None:
    fake_client.failures[(method, "topics")] = GitHubAPIError("boom", status_code=500)
    before = list(fake_client.topics)

    with pytest.raises(TopicsError, match="boom"):
        await merge_topics(fake_client, "acme", "widgets", ["new-topic"])

    assert fake_client.topics == before
