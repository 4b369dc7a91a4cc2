"""Topic merging for a repository."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from repo_foundry.productionalization.errors import TopicsError

logger = logging.getLogger(__name__)


class _TopicsClient(Protocol):
    async def get_topics(self, owner: str, repo: str) -> list[str]: ...

    async def replace_topics(self, owner: str, repo: str, names: list[str]) -> list[str]: ...


def union_topics(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Existing topics first, then new ones, each topic once."""
    return list(dict.fromkeys([*existing, *new]))


async def merge_topics(client: _TopicsClient, owner: str, repo: str, topics: list[str]) -> list[str]:
    """Add ``topics`` to the repository, keeping the topics it already has.

    GitHub only offers a full replacement, so a topic change made by someone
    else between the read and the write is lost.

    Returns:
        The topic list that was written
    """
    logger.info(f"Merging topics for repository {owner}/{repo}")
    try:
        existing = await client.get_topics(owner, repo)
        merged = union_topics(existing, topics)
        logger.info(f"Merged topics: {', '.join(merged)}")
        await client.replace_topics(owner, repo, merged)
    except Exception as exc:
        raise TopicsError(f"Failed to merge topics: {exc}") from exc
    return merged
