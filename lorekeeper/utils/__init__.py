"""
Utilities package for Lorekeeper.

- slugify: URL-safe identifiers for worlds
"""
from .slugify import slugify

__all__ = ["slugify"]
