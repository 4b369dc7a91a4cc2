"""Errors raised while productionalizing a repository."""


class ProductionalizationError(Exception):
    """Base exception for productionalization failures."""

    pass


class ResolutionError(ProductionalizationError):
    """A team slug or username could not be turned into a numeric id."""

    def __init__(self, identifier: str, message: str):
        super().__init__(message)
        self.identifier = identifier


class EncryptionError(ProductionalizationError):
    """A secret value could not be sealed against the repository key."""

    pass


class TopicsError(ProductionalizationError):
    """Reading or replacing repository topics failed."""

    pass


class BranchProtectionError(ProductionalizationError):
    """The branch protection ruleset could not be installed."""

    pass


class PublicKeyError(ProductionalizationError):
    """The repository public key could not be fetched; no secret can be sent."""

    pass
