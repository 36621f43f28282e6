"""
Storage strategies for `WeakSet`.

Which strategy is used depends on the capabilities of the weak tables
available (see `weak_collections.storage.selection`):

- `WeakKeysWithDelete`: weak keys, weak values and explicit deletion allow the
  table to be used directly.
- `WeakKeys`: weak keys and weak values, but deletion has to be emulated with
  tombstones.
- `StrongKeys`: only values are weak, so elements are stored under their
  identity token.
- `StrongSecondaryKeys`: only values are weak and identity tokens cannot be
  used as table keys, so elements are stored under surrogate keys looked up
  in a secondary identity index.
"""
import logging
from typing import List, Tuple, Type

from weak_collections.types import MISSING

from .base import Capabilities, SetStorage
from .indirection import IdentityIndex, identity
from .primitive import WeakTable
from .pruning import AutoPruning
from .tombstone import bury, have, is_tombstone

logger = logging.getLogger(__name__)


class WeakKeysWithDelete(SetStorage):
    """
    Elements are stored as keys of a weak-keyed table. The value of each slot
    is an immortal marker, so the slot lives exactly as long as the element.
    """

    NAME = "weak_keys_with_delete"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(
            capabilities.weak_keys
            and capabilities.weak_values
            and capabilities.supports_delete
        )

    def add(self, obj):
        self._table[obj] = True
        return self

    def clear(self):
        self._table = WeakTable(weak_keys=True, deletable=True)
        return self

    def delete(self, obj):
        return self._table.delete(obj) is not MISSING

    def include(self, obj):
        return obj in self._table

    def size(self):
        return len(self._table)

    def to_list(self):
        return self._table.keys()


class WeakKeys(SetStorage):
    """
    Elements are stored as both key and value of a weak-keyed table that cannot
    delete slots. Deleted elements have their value replaced by a tombstone,
    which causes the slot to vanish once the tombstone is collected.
    """

    NAME = "weak_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(capabilities.weak_keys and capabilities.weak_values)

    def add(self, obj):
        self._table[obj] = obj
        return self

    def clear(self):
        self._table = WeakTable(weak_keys=True, deletable=False)
        return self

    def delete(self, obj):
        if not self.include(obj):
            return False
        bury(self._table, obj)
        return True

    def include(self, obj):
        return self._table.get(obj) is obj

    def to_list(self):
        return [obj for obj in self._table.values() if not is_tombstone(obj)]


class StrongKeys(SetStorage):
    """
    Elements are stored as weak values under their identity token in a table
    with strong keys. Since tokens may be reused after an element is collected,
    a slot only matches if it holds the very object being looked up.
    """

    NAME = "strong_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(capabilities.weak_values and capabilities.stable_identity)

    def add(self, obj):
        self._table[identity(obj)] = obj
        return self

    def clear(self):
        self._table = WeakTable(weak_keys=False, deletable=False)
        return self

    def delete(self, obj):
        token = identity(obj)
        if self._table.get(token) is not obj:
            return False
        bury(self._table, token)
        return True

    def include(self, obj):
        return self._table.get(identity(obj)) is obj

    def to_list(self):
        return [obj for obj in self._table.values() if not is_tombstone(obj)]


class StrongSecondaryKeys(AutoPruning, SetStorage):
    """
    Elements are stored as weak values under a `Surrogate` key, which is looked
    up from the element's identity token in a strongly referenced
    `IdentityIndex`.

    The identity index does not shrink when elements are collected. Deleting
    an element keeps its index entry (so that re-adding it is cheap), and
    stale entries are removed by `prune`, which runs automatically from
    `include` once enough of them have accumulated.

    As this strategy makes the fewest demands of the weak table, it is the
    fallback when no other strategy is usable.
    """

    NAME = "strong_secondary_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return True

    def add(self, obj):
        self._table[self._index.surrogate_for(obj)] = obj
        return self

    def clear(self):
        self._table = WeakTable(weak_keys=False, deletable=False)
        self._index = IdentityIndex()
        return self

    def delete(self, obj):
        surrogate = self._index.get(obj)
        if surrogate is None or self._table.get(surrogate) is not obj:
            return False
        bury(self._table, surrogate)
        return True

    def include(self, obj):
        surrogate = self._index.get(obj)
        found = surrogate is not None and self._table.get(surrogate) is obj
        self.auto_prune()
        return found

    def prune(self):
        dropped = self._index.retain(lambda surrogate: have(self._table.get(surrogate)))
        logger.debug("Pruned %d stale identity index entries.", dropped)
        return self

    def to_list(self):
        return [obj for obj in self._table.values() if not is_tombstone(obj)]

    def _bookkeeping_sizes(self) -> Tuple[int, int]:
        return len(self._index), len(self._table)


SET_STRATEGIES: List[Type[SetStorage]] = [
    WeakKeysWithDelete,
    WeakKeys,
    StrongKeys,
    StrongSecondaryKeys,
]
