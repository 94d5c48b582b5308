"""
Commentary: a one-line taunt describing (vaguely) what was broken.
"""

from .roaster import DuckRoaster, get_duck_roast

__all__ = ["DuckRoaster", "get_duck_roast"]
