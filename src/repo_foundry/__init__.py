"""Repository creation and productionalization for GitHub."""

__version__ = "0.1.0"
