"""SQLAlchemy models for the mobile shop back office."""

from mobileshop.models.document import Document

__all__ = ["Document"]
