from ._version import __version__, __version_tuple__
from .collections import WeakMap, WeakSet
from .config import Config
from .errors import ConfigurationError, KeyNotFoundError
from .types import MISSING

__all__ = [
    "__version__",
    "__version_tuple__",
    "WeakMap",
    "WeakSet",
    "Config",
    "ConfigurationError",
    "KeyNotFoundError",
    "MISSING",
]
