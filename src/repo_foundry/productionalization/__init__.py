"""Productionalization of repositories: access, topics, rulesets, environments, secrets."""

from repo_foundry.productionalization.orchestrator import ProductionalizationService

__all__ = ["ProductionalizationService"]
