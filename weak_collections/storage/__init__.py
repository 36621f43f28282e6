from . import mappings, sets
from .base import Capabilities, Lookup, MapStorage, SetStorage, WeakStorage
from .primitive import WeakTable
from .pruning import AutoPrunePolicy
from .selection import StrategySelector, probe_capabilities, select_strategy

MAP_STRATEGIES = StrategySelector(mappings.MAP_STRATEGIES)
SET_STRATEGIES = StrategySelector(sets.SET_STRATEGIES)

__all__ = (
    "AutoPrunePolicy",
    "Capabilities",
    "Lookup",
    "MapStorage",
    "SetStorage",
    "StrategySelector",
    "WeakStorage",
    "WeakTable",
    "MAP_STRATEGIES",
    "SET_STRATEGIES",
    "mappings",
    "probe_capabilities",
    "select_strategy",
    "sets",
)
