"""GitHub Action entry point.

Creates the repository described by the action inputs and, when requested,
productionalizes it. Settings, logging, inputs and the API client are built
explicitly in ``main`` so every startup failure surfaces in one place.
"""

import asyncio
import logging
import os
import sys

from repo_foundry import __version__
from repo_foundry.action.inputs import ActionInputs, read_action_inputs
from repo_foundry.action.outputs import StepOutputs, report_failure, summarize
from repo_foundry.config import Settings, get_settings
from repo_foundry.core.logging import setup_logging
from repo_foundry.productionalization import ProductionalizationService
from repo_foundry.services.github_client import GitHubClient
from repo_foundry.services.repository_service import RepositoryService

logger = logging.getLogger(__name__)


async def run(inputs: ActionInputs, settings: Settings, outputs: StepOutputs) -> None:
    async with GitHubClient(token=inputs.token, base_url=settings.github_api_base_url) as client:
        logger.info(f"Creating repository: {inputs.repository.name}")
        repository = await RepositoryService(client).create_repository(inputs.repository)
        outputs.set_repository(repository)
        logger.info(f"Repository created successfully: {repository.html_url}")

        if inputs.productionalization is None:
            return

        logger.info("Starting repository productionalization...")
        service = ProductionalizationService(
            client,
            settle_delay_seconds=settings.settle_delay_seconds,
        )
        result = await service.productionalize_repository(
            repository.owner,
            repository.name,
            inputs.productionalization,
        )
        outputs.set_productionalization(result)

        logger.info("Productionalization complete")
        for line in summarize(result):
            logger.info(f"- {line}")


def main() -> int:
    settings = get_settings()
    setup_logging(settings)
    logger.info(f"Repository foundry {__version__}")

    try:
        inputs = read_action_inputs(os.environ, default_token=settings.github_token)
        asyncio.run(run(inputs, settings, StepOutputs(settings.github_output)))
    except Exception as exc:
        logger.error(f"Run failed: {exc}")
        report_failure(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
