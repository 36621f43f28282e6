from abc import ABCMeta, abstractmethod
from collections import namedtuple
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from weak_collections.types import MISSING

from .pruning import AutoPrunePolicy

Capabilities = namedtuple(
    "Capabilities",
    ("weak_keys", "weak_values", "supports_delete", "stable_identity"),
)
Lookup = namedtuple("Lookup", ("value", "found"))


class WeakStorage(metaclass=ABCMeta):
    """
    The storage engine underneath a weak collection.

    Each concrete strategy emulates the complete weak-collection contract on
    top of a `WeakTable` with a particular set of capabilities. Exactly one
    strategy is used per collection type, and all strategies behave identically
    as far as callers can observe.

    Class Attributes:
        NAME: The name by which the strategy can be selected in `Config`.

    Attributes:
        prune_policy: The policy deciding when bookkeeping tables are
            automatically pruned (only consulted by strategies that maintain
            such tables).
    """

    NAME: str = None

    def __init__(self, prune_policy: Optional[AutoPrunePolicy] = None):
        self.prune_policy = prune_policy or AutoPrunePolicy.from_config()
        self.clear()

    @classmethod
    @abstractmethod
    def usable(cls, capabilities: Capabilities) -> bool:
        """
        Whether this strategy can be used given the capabilities of the weak
        tables in the running interpreter.
        """

    @abstractmethod
    def clear(self) -> "WeakStorage":
        """
        Discard all entries and reset all bookkeeping.
        """

    @abstractmethod
    def size(self) -> int:
        """
        The number of live entries.
        """

    def prune(self) -> "WeakStorage":
        """
        Remove bookkeeping data associated with deleted or garbage collected
        entries. Never affects live entries.
        """
        return self

    @contextmanager
    def _rebuilding(self):
        """
        Clear this storage for the duration of the context, restoring the
        original contents if the context exits with an exception.
        """
        original = dict(self.__dict__)
        self.clear()
        try:
            yield
        except BaseException:
            self.__dict__.clear()
            self.__dict__.update(original)
            raise

    def __repr__(self):
        return f"<{type(self).__name__}: {self.size()} entries>"


class SetStorage(WeakStorage):
    """
    Storage strategy interface for `WeakSet`.
    """

    @abstractmethod
    def add(self, obj: Any) -> "SetStorage":
        ...  # pragma: no cover

    @abstractmethod
    def delete(self, obj: Any) -> bool:
        """
        Delete `obj`, returning whether it was present.
        """

    @abstractmethod
    def include(self, obj: Any) -> bool:
        ...  # pragma: no cover

    @abstractmethod
    def to_list(self) -> List[Any]:
        """
        A snapshot of all live elements, in no particular order.
        """

    def lookup(self, obj: Any) -> Lookup:
        found = self.include(obj)
        return Lookup(obj if found else None, found)

    def each(self) -> Iterator[Any]:
        """
        Iterate over all live elements. The candidate elements are snapshotted
        up front, and each is checked again before it is yielded, so elements
        may be deleted while iterating.
        """
        for obj in self.to_list():
            if self.include(obj):
                yield obj

    def size(self) -> int:
        return len(self.to_list())

    def replace(self, objs: Iterable[Any]) -> "SetStorage":
        with self._rebuilding():
            for obj in objs:
                self.add(obj)
        return self


class MapStorage(WeakStorage):
    """
    Storage strategy interface for `WeakMap`. Missing values are reported as
    `MISSING`, so any object (including `None`) can be stored.
    """

    @abstractmethod
    def set(self, key: Any, value: Any) -> Any:
        ...  # pragma: no cover

    @abstractmethod
    def get(self, key: Any) -> Any:
        """
        The value stored for `key`, or `MISSING`.
        """

    @abstractmethod
    def delete(self, key: Any) -> Any:
        """
        Delete `key`, returning the value it was associated with, or `MISSING`.
        """

    @abstractmethod
    def each_pair(self) -> Iterator[Tuple[Any, Any]]:
        """
        Iterate over all live `(key, value)` pairs. The candidate keys are
        snapshotted up front, and each pair is read again before it is yielded,
        so pairs may be deleted while iterating.
        """

    def lookup(self, key: Any) -> Lookup:
        value = self.get(key)
        return Lookup(value, value is not MISSING)

    def include(self, key: Any) -> bool:
        return self.get(key) is not MISSING

    def each_key(self) -> Iterator[Any]:
        for key, _ in self.each_pair():
            yield key

    def each_value(self) -> Iterator[Any]:
        for _, value in self.each_pair():
            yield value

    def keys(self) -> List[Any]:
        return list(self.each_key())

    def values(self) -> List[Any]:
        return list(self.each_value())

    def to_list(self) -> List[Tuple[Any, Any]]:
        return list(self.each_pair())

    def size(self) -> int:
        return sum(1 for _ in self.each_pair())

    def replace(self, pairs: Iterable[Tuple[Any, Any]]) -> "MapStorage":
        with self._rebuilding():
            for key, value in pairs:
                self.set(key, value)
        return self
