"""Demo models served by the bundled application (restmount.main)."""

from restmount.models.category import Category
from restmount.models.note import Note

__all__ = ["Category", "Note"]
