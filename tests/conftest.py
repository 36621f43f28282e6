import gc

import pytest

from weak_collections import WeakMap, WeakSet
from weak_collections.storage import mappings, sets


class Obj:
    """
    A weakly referenceable object compared by identity.
    """

    def __init__(self, name=None):
        self.name = name

    def __repr__(self):
        return f"Obj({self.name!r})"


class Value(Obj):
    """
    A weakly referenceable object compared by value.
    """

    def __eq__(self, other):
        return isinstance(other, Value) and other.name == self.name

    def __hash__(self):
        return hash(self.name)


def collect():
    for _ in range(3):
        gc.collect()


def strategy_id(strategy):
    return strategy.NAME


@pytest.fixture(params=sets.SET_STRATEGIES, ids=strategy_id)
def set_strategy(request):
    return request.param


@pytest.fixture(params=mappings.MAP_STRATEGIES, ids=strategy_id)
def map_strategy(request):
    return request.param


@pytest.fixture
def set_cls(set_strategy):
    return type(f"WeakSet_{set_strategy.NAME}", (WeakSet,), {"STRATEGY": set_strategy})


@pytest.fixture
def map_cls(map_strategy):
    return type(f"WeakMap_{map_strategy.NAME}", (WeakMap,), {"STRATEGY": map_strategy})
