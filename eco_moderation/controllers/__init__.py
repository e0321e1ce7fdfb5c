"""FastAPI routers acting as controllers in the MVC architecture."""

from . import moderation

__all__ = ["moderation"]
