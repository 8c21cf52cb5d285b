"""API endpoints package."""

from backoffice.api.endpoints import documents, health, records

__all__ = ["documents", "health", "records"]
