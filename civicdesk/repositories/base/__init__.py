"""
Base repositories package.
"""

from civicdesk.repositories.base.base_repository import BaseRepository, ModelType

__all__ = ["BaseRepository", "ModelType"]
