"""Branch protection rulesets built from named presets.

Every preset blocks force pushes and requires pull requests; they differ
in how strict the review requirements are:

    preset     approvals  dismiss stale  last-push approval  thread resolution
    strict     2          yes            yes                 yes
    moderate   1          yes            yes                 yes
    minimal    1          no             no                  no
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from repo_foundry.productionalization.errors import BranchProtectionError
from repo_foundry.schemas.productionalization import (
    DEFAULT_BRANCH_PROTECTION_TARGET,
    BranchProtectionPreset,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequestRules:
    required_approving_review_count: int
    dismiss_stale_reviews_on_push: bool
    require_last_push_approval: bool
    required_review_thread_resolution: bool


PRESETS: dict[str, PullRequestRules] = {
    "strict": PullRequestRules(
        required_approving_review_count=2,
        dismiss_stale_reviews_on_push=True,
        require_last_push_approval=True,
        required_review_thread_resolution=True,
    ),
    "moderate": PullRequestRules(
        required_approving_review_count=1,
        dismiss_stale_reviews_on_push=True,
        require_last_push_approval=True,
        required_review_thread_resolution=True,
    ),
    "minimal": PullRequestRules(
        required_approving_review_count=1,
        dismiss_stale_reviews_on_push=False,
        require_last_push_approval=False,
        required_review_thread_resolution=False,
    ),
}


class _RulesetClient(Protocol):
    async def create_ruleset(
        self, owner: str, repo: str, ruleset: dict[str, Any]
    ) -> dict[str, Any]: ...


def build_ruleset(
    preset: BranchProtectionPreset,
    target_branch: str = DEFAULT_BRANCH_PROTECTION_TARGET,
) -> dict[str, Any]:
    """Build the ruleset request body for ``preset`` on ``target_branch``."""
    try:
        rules = PRESETS[preset]
    except KeyError:
        raise ValueError(
            f"Unknown branch protection preset: {preset}. Must be one of: {', '.join(PRESETS)}"
        ) from None

    return {
        "name": f"Branch protection rules ({preset})",
        "target": "branch",
        "enforcement": "active",
        "conditions": {
            "ref_name": {
                "include": [f"refs/heads/{target_branch}"],
                "exclude": [],
            },
        },
        "rules": [
            {
                "type": "pull_request",
                "parameters": {
                    "dismiss_stale_reviews_on_push": rules.dismiss_stale_reviews_on_push,
                    "require_code_owner_review": False,
                    "require_last_push_approval": rules.require_last_push_approval,
                    "required_approving_review_count": rules.required_approving_review_count,
                    "required_review_thread_resolution": rules.required_review_thread_resolution,
                },
            },
            {"type": "non_fast_forward"},
        ],
    }


async def create_branch_protection(
    client: _RulesetClient,
    owner: str,
    repo: str,
    preset: BranchProtectionPreset,
    target_branch: str = DEFAULT_BRANCH_PROTECTION_TARGET,
) -> None:
    logger.info(f"Creating {preset} branch protection for {owner}/{repo}/{target_branch}")
    ruleset = build_ruleset(preset, target_branch)
    try:
        await client.create_ruleset(owner, repo, ruleset)
    except Exception as exc:
        raise BranchProtectionError(f"Failed to create branch protection: {exc}") from exc
    logger.info(f"Successfully created branch protection: {ruleset['name']}")
