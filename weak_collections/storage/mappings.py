"""
Storage strategies for `WeakMap`.

These mirror the strategies in `weak_collections.storage.sets`. Strategies
backed by weak tables with strong keys (`StrongKeys` and
`StrongSecondaryKeys`) keep keys and values in two separate tables so that
either can be collected independently; a pair is only live while both its key
and its value are present.
"""
import logging
from abc import abstractmethod
from typing import Any, List, Optional, Set, Tuple, Type

from weak_collections.types import MISSING

from .base import Capabilities, MapStorage
from .indirection import IdentityIndex, identity
from .primitive import WeakTable
from .pruning import AutoPruning
from .tombstone import bury, have, missing

logger = logging.getLogger(__name__)


class WeakKeysWithDelete(MapStorage):
    """
    Pairs are stored directly in a weak-keyed, deletable table.
    """

    NAME = "weak_keys_with_delete"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(
            capabilities.weak_keys
            and capabilities.weak_values
            and capabilities.supports_delete
        )

    def set(self, key, value):
        self._table[key] = value
        return value

    def get(self, key):
        return self._table.get(key)

    def clear(self):
        self._table = WeakTable(weak_keys=True, deletable=True)
        return self

    def delete(self, key):
        return self._table.delete(key)

    def each_pair(self):
        for key in self._table.keys():
            value = self._table.get(key)
            if value is not MISSING:
                yield key, value

    def keys(self):
        return self._table.keys()

    def values(self):
        return self._table.values()

    def size(self):
        return len(self._table)


class WeakKeys(MapStorage):
    """
    Pairs are stored in a weak-keyed table which cannot delete slots; deleted
    pairs have their value replaced by a tombstone.
    """

    NAME = "weak_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(capabilities.weak_keys and capabilities.weak_values)

    def set(self, key, value):
        self._table[key] = value
        return value

    def get(self, key):
        raw_value = self._table.get(key)
        return MISSING if missing(raw_value) else raw_value

    def clear(self):
        self._table = WeakTable(weak_keys=True, deletable=False)
        return self

    def delete(self, key):
        raw_value = self._table.get(key)
        if missing(raw_value):
            return MISSING
        bury(self._table, key)
        return raw_value

    def each_pair(self):
        for key in self._table.keys():
            raw_value = self._table.get(key)
            if have(raw_value):
                yield key, raw_value


class AbstractStrongKeys(AutoPruning, MapStorage):
    """
    Shared implementation for strategies that store keys and values in two
    weak tables with strong keys, indexed by a common slot token.

    Subclasses decide how slot tokens are derived from keys by implementing
    `_token_for` (for lookups) and `_set_token_for` (for writes).
    """

    def clear(self):
        self._keys = WeakTable(weak_keys=False, deletable=False)
        self._values = WeakTable(weak_keys=False, deletable=False)
        return self

    @abstractmethod
    def _token_for(self, key: Any) -> Optional[Any]:
        """
        The slot token for an existing `key`, or `None` if it has none.
        """

    @abstractmethod
    def _set_token_for(self, key: Any) -> Any:
        """
        The slot token for `key`, allocating one if necessary.
        """

    def set(self, key, value):
        token = self._set_token_for(key)
        self._keys[token] = key
        self._values[token] = value
        return value

    def get(self, key):
        token = self._token_for(key)
        if token is None:
            self.auto_prune()
            return MISSING
        return self._get(token, key)

    def delete(self, key):
        token = self._token_for(key)
        if token is None:
            return MISSING
        return self._delete(token)

    def each_pair(self):
        for token, raw_key in self._keys.items():
            if self._keys.get(token) is not raw_key:
                continue
            raw_value = self._values.get(token)
            if missing(raw_value):
                bury(self._keys, token)
            else:
                yield raw_key, raw_value

    def prune(self):
        orphaned = {token for token, raw_value in self._values.items() if have(raw_value)}
        paired = set()
        for token, raw_key in self._keys.items():
            if missing(raw_key):
                continue
            if token in orphaned:
                orphaned.discard(token)
                paired.add(token)
            else:
                bury(self._keys, token)
        for token in orphaned:
            bury(self._values, token)
        logger.debug(
            "Pruned %s: %d live pairs, %d orphaned values.",
            type(self).__name__,
            len(paired),
            len(orphaned),
        )
        self._pruned(paired)
        return self

    def _pruned(self, paired: Set[Any]):
        """
        Hook called at the end of `prune` with the tokens of all live pairs.
        """

    def _get(self, token, key):
        raw_value = self._values.get(token)
        raw_key = self._keys.get(token)
        has_key = have(raw_key) and raw_key is key

        self.auto_prune()
        if have(raw_value):
            if has_key:
                return raw_value
            # The key was collected (or never stored): the value is orphaned.
            bury(self._values, token)
            return MISSING
        if has_key:
            # The value was collected: the key is orphaned.
            bury(self._keys, token)
        return MISSING

    def _delete(self, token):
        has_key = False
        if have(self._keys.get(token)):
            bury(self._keys, token)
            has_key = True

        raw_value = self._values.get(token)
        if have(raw_value):
            bury(self._values, token)
            if has_key:
                return raw_value
        return MISSING


class StrongKeys(AbstractStrongKeys):
    """
    Keys and values are stored under the key's identity token, and the two
    tables are reconciled by `prune` whenever they drift apart by more than
    the auto-prune cutoff.
    """

    NAME = "strong_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return bool(capabilities.weak_values and capabilities.stable_identity)

    def _token_for(self, key):
        return identity(key)

    def _set_token_for(self, key):
        return identity(key)

    def _bookkeeping_sizes(self) -> Tuple[int, int]:
        sizes = sorted((len(self._keys), len(self._values)))
        return sizes[1], sizes[0]


class StrongSecondaryKeys(AbstractStrongKeys):
    """
    Keys and values are stored under a `Surrogate` which is looked up from the
    key's identity token in a strongly referenced `IdentityIndex`. Index
    entries survive deletion and are only dropped by `prune`, which runs
    automatically from lookups once enough stale entries have accumulated.

    As this strategy makes the fewest demands of the weak tables, it is the
    fallback when no other strategy is usable.
    """

    NAME = "strong_secondary_keys"

    @classmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        return True

    def clear(self):
        super().clear()
        self._index = IdentityIndex()
        return self

    def _token_for(self, key):
        return self._index.get(key)

    def _set_token_for(self, key):
        return self._index.surrogate_for(key)

    def _pruned(self, paired):
        dropped = self._index.retain(lambda surrogate: surrogate in paired)
        logger.debug("Pruned %d stale identity index entries.", dropped)

    def _bookkeeping_sizes(self) -> Tuple[int, int]:
        return len(self._index), min(len(self._keys), len(self._values))


MAP_STRATEGIES: List[Type[MapStorage]] = [
    WeakKeysWithDelete,
    WeakKeys,
    StrongKeys,
    StrongSecondaryKeys,
]
