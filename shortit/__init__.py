"""
shortit package initializer.
"""

from . import allocator
from . import storage

__all__ = ["allocator", "storage"]
