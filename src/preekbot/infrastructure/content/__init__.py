"""Content service integration."""

from preekbot.infrastructure.content.client import ContentServiceClient

__all__ = ["ContentServiceClient"]
