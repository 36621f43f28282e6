from .base import WeakCollection
from .mappings import WeakMap
from .sets import WeakSet

__all__ = (
    "WeakCollection",
    "WeakMap",
    "WeakSet",
)
