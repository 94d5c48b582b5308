"""
Automatic on-save injection.
"""

from .guard import EditGuard, GuardState
from .monitor import SaveHandler, watch

__all__ = ["EditGuard", "GuardState", "SaveHandler", "watch"]
