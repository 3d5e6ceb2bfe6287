"""Core services."""

from omd.core.services.routing import DataRouter

__all__ = ["DataRouter"]
