"""
Selection Layer.

Caller selections (sparse fieldsets, include paths) and their resolution
into an EffectiveSelection plan.
"""

from .resolver import EffectiveSelection, IncludeNode, SelectionResolver
from .spec import SelectionSpec

__all__ = [
    "EffectiveSelection",
    "IncludeNode",
    "SelectionResolver",
    "SelectionSpec",
]
