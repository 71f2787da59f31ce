"""FastAPI routers acting as controllers in the MVC architecture."""

from . import apps, feedback

__all__ = ["apps", "feedback"]
