"""Step outputs and the run summary."""

from __future__ import annotations

import logging
import sys
import uuid
from pathlib import Path

from repo_foundry.schemas.productionalization import ProductionalizationResult
from repo_foundry.schemas.repository import RepositoryResult

logger = logging.getLogger(__name__)


class StepOutputs:
    """Writes step outputs to the runner's ``GITHUB_OUTPUT`` file.

    Without an output file (local runs) outputs are only logged.
    """

    def __init__(self, output_path: str | None = None):
        self._path = Path(output_path) if output_path else None

    def set(self, name: str, value: str) -> None:
        logger.debug(f"Setting output {name}")
        if self._path is None:
            logger.info(f"Output {name}={value}")
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def set_repository(self, repository: RepositoryResult) -> None:
        self.set("repository-url", repository.html_url)
        self.set("repository-name", repository.full_name)
        self.set("repository-id", str(repository.id))

    def set_productionalization(self, result: ProductionalizationResult) -> None:
        self.set("productionalization-status", result.to_json())


def summarize(result: ProductionalizationResult) -> list[str]:
    """Human-readable summary lines for a productionalization result."""
    teams_ok = sum(1 for team in result.team_permissions if team.success)
    lines = [
        f"Team permissions: {teams_ok}/{len(result.team_permissions)} successful",
        f"Topics added: {result.topics_added}",
        f"Environments created: {len(result.environments_created)}",
        f"Variables created: {result.variables_created}",
        f"Branch protection created: {result.branch_protection_created}",
        f"Secrets created: {result.secrets_created}",
    ]
    failures = (
        len(result.team_permissions)
        - teams_ok
        + len(result.environment_errors)
        + len(result.variable_errors)
        + len(result.secret_errors)
        + sum(
            1
            for error in (result.topics_error, result.branch_protection_error, result.secrets_error)
            if error
        )
    )
    if failures:
        lines.append(f"Failures: {failures} (see productionalization-status output)")
    return lines


def report_failure(message: str) -> None:
    """Mark the step as failed via the ``::error::`` workflow command."""
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    sys.stdout.write(f"::error::{escaped}\n")
    sys.stdout.flush()
