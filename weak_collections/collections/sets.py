from collections.abc import Iterable, MutableSet
from typing import Any, Callable, Iterator, List, Optional

from weak_collections.storage import SET_STRATEGIES
from weak_collections.utils.iteration import iterate
from weak_collections.utils.rendering import by_identity

from .base import WeakCollection


class WeakSet(WeakCollection, MutableSet):  # pylint: disable=too-many-ancestors
    """
    A set that only weakly references its elements. Elements which are no
    longer referenced anywhere else are garbage collected and silently vanish
    from the set.

    Note that:
    - Membership is determined by object identity (`is`) rather than by
      `__eq__`/`__hash__`, so two distinct but equal objects are distinct
      elements, and unhashable objects can be elements.
    - Elements can be freely mutated without affecting the set.
    - The iteration order is non-deterministic.
    - Objects which do not support weak references (such as `int`, `str` or
      `tuple` instances) are held strongly for as long as they are elements.
    - Weak sets are not thread-safe; concurrent access must be serialized by
      the caller.

    Args:
        iterable: An optional iterable of initial elements.
        transform: An optional callable applied to each element of `iterable`
            before it is added. Make sure to only return objects that are
            referenced elsewhere, lest they be collected right away.
    """

    STRATEGIES = SET_STRATEGIES

    def __init__(
        self,
        iterable: Optional[Iterable] = None,
        transform: Optional[Callable[[Any], Any]] = None,
    ):
        super().__init__()
        if iterable is None:
            return
        for obj in iterate(iterable):
            self.add(transform(obj) if transform else obj)

    @classmethod
    def of(cls, *objs) -> "WeakSet":
        """
        Build a weak set containing the given objects.
        """
        return cls(objs)

    @classmethod
    def _from_iterable(cls, it):
        return cls(it)

    # MutableSet implementation

    def __contains__(self, obj):
        return self._storage.include(obj)

    def __iter__(self) -> Iterator[Any]:
        return self._storage.each()

    def __len__(self):
        return self._storage.size()

    def add(self, obj) -> "WeakSet":
        """
        Add `obj` to the set. No strong reference to `obj` is retained.

        Returns:
            This set.
        """
        self._storage.add(obj)
        return self

    def discard(self, obj):
        self._storage.delete(obj)

    def remove(self, obj):
        if not self._storage.delete(obj):
            raise KeyError(obj)

    # Membership helpers

    def include(self, obj) -> bool:
        return self._storage.include(obj)

    def get(self, obj) -> Any:
        """
        Returns:
            `obj` if it is an element of this set, and `None` otherwise.
        """
        return self._storage.lookup(obj).value

    def add_if_absent(self, obj) -> Optional["WeakSet"]:
        """
        Add `obj` unless it is already an element.

        Returns:
            This set if `obj` was added, and `None` if it was already present.
        """
        if obj in self:
            return None
        return self.add(obj)

    def delete(self, obj) -> "WeakSet":
        """
        Delete `obj` (if present).

        Returns:
            This set.
        """
        self._storage.delete(obj)
        return self

    def delete_if_present(self, obj) -> Optional["WeakSet"]:
        """
        Returns:
            This set if `obj` was present and has been deleted, and `None`
            otherwise.
        """
        return self if self._storage.delete(obj) else None

    def to_list(self) -> List[Any]:
        return self._storage.to_list()

    # Bulk mutation

    def update(self, *iterables) -> "WeakSet":
        """
        Add all elements of each of the given iterables.

        Returns:
            This set.
        """
        for iterable in iterables:
            for obj in iterate(iterable):
                self.add(obj)
        return self

    merge = update

    def subtract(self, iterable) -> "WeakSet":
        """
        Delete every element of `iterable` from this set.

        Returns:
            This set.
        """
        for obj in iterate(iterable):
            self._storage.delete(obj)
        return self

    def replace(self, iterable) -> "WeakSet":
        """
        Replace the contents of this set with the elements of `iterable`. If
        iterating fails part-way, the original contents are left untouched.

        Returns:
            This set.
        """
        self._storage.replace(iterate(iterable))
        return self

    def keep_if(self, predicate: Callable[[Any], bool]) -> "WeakSet":
        """
        Delete every element for which `predicate` returns a falsey value.

        Returns:
            This set.
        """
        for obj in self:
            if not predicate(obj):
                self._storage.delete(obj)
        return self

    def delete_if(self, predicate: Callable[[Any], bool]) -> "WeakSet":
        """
        Delete every element for which `predicate` returns a truthy value.

        Returns:
            This set.
        """
        for obj in self:
            if predicate(obj):
                self._storage.delete(obj)
        return self

    def select(self, predicate: Callable[[Any], bool]) -> Optional["WeakSet"]:
        """
        Like `keep_if`, but returns `None` if no element was deleted.
        """
        changed = False
        for obj in self:
            if not predicate(obj) and self._storage.delete(obj):
                changed = True
        return self if changed else None

    def reject(self, predicate: Callable[[Any], bool]) -> Optional["WeakSet"]:
        """
        Like `delete_if`, but returns `None` if no element was deleted.
        """
        changed = False
        for obj in self:
            if predicate(obj) and self._storage.delete(obj):
                changed = True
        return self if changed else None

    # Set algebra

    def union(self, *iterables) -> "WeakSet":
        """
        Returns:
            A new weak set with the elements of this set and of all `iterables`.
        """
        return self.copy().update(*iterables)

    def intersection(self, iterable) -> "WeakSet":
        """
        Returns:
            A new weak set with the elements of `iterable` that are also
            elements of this set.
        """
        result = type(self)()
        for obj in iterate(iterable):
            if obj in self:
                result.add(obj)
        return result

    def difference(self, iterable) -> "WeakSet":
        """
        Returns:
            A new weak set with the elements of this set that are not elements
            of `iterable`.
        """
        return self.copy().subtract(iterable)

    def symmetric_difference(self, iterable) -> "WeakSet":
        """
        Returns:
            A new weak set with the elements that are in either this set or
            `iterable`, but not in both.
        """
        result = type(self)(iterable)
        for obj in self:
            if result.delete_if_present(obj) is None:
                result.add(obj)
        return result

    def __or__(self, other):
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.union(other)

    def __and__(self, other):
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.intersection(other)

    def __sub__(self, other):
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.difference(other)

    def __xor__(self, other):
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.symmetric_difference(other)

    __ror__ = __or__
    __rand__ = __and__
    __rxor__ = __xor__

    def __rsub__(self, other):
        if not isinstance(other, Iterable):
            return NotImplemented
        return type(self)(other).subtract(self)

    # Comparisons

    def _check_weak_set(self, other):
        if not isinstance(other, WeakSet):
            raise TypeError("value must be a weak set")

    def issubset(self, other) -> bool:
        self._check_weak_set(other)
        own = self.to_list()
        return len(own) <= len(other) and all(obj in other for obj in own)

    def issuperset(self, other) -> bool:
        self._check_weak_set(other)
        theirs = other.to_list()
        return len(self) >= len(theirs) and all(obj in self for obj in theirs)

    def is_proper_subset(self, other) -> bool:
        self._check_weak_set(other)
        own = self.to_list()
        return len(own) < len(other) and all(obj in other for obj in own)

    def is_proper_superset(self, other) -> bool:
        self._check_weak_set(other)
        theirs = other.to_list()
        return len(self) > len(theirs) and all(obj in self for obj in theirs)

    def compare(self, other) -> Optional[int]:
        """
        Returns:
            `0` if this set and `other` have the same elements, `-1`/`1` if this
            set is a proper subset/superset of `other`, and `None` if both have
            unique elements or `other` is not a weak set.
        """
        if not isinstance(other, WeakSet):
            return None
        if other is self:
            return 0
        own, theirs = self.to_list(), other.to_list()
        if len(own) < len(theirs):
            return -1 if all(obj in other for obj in own) else None
        if len(own) > len(theirs):
            return 1 if all(obj in self for obj in theirs) else None
        return 0 if all(obj in other for obj in own) else None

    def __le__(self, other):
        if not isinstance(other, WeakSet):
            return NotImplemented
        return self.issubset(other)

    def __lt__(self, other):
        if not isinstance(other, WeakSet):
            return NotImplemented
        return self.is_proper_subset(other)

    def __ge__(self, other):
        if not isinstance(other, WeakSet):
            return NotImplemented
        return self.issuperset(other)

    def __gt__(self, other):
        if not isinstance(other, WeakSet):
            return NotImplemented
        return self.is_proper_superset(other)

    def __eq__(self, other):
        if other is self:
            return True
        if not isinstance(other, WeakSet):
            return NotImplemented
        own = self.to_list()
        return len(own) == len(other) and all(obj in other for obj in own)

    __hash__ = None

    def intersects(self, iterable) -> bool:
        """
        Whether this set and `iterable` have at least one element in common.
        """
        if isinstance(iterable, WeakSet) and len(iterable) > len(self):
            return any(obj in iterable for obj in self)
        return any(obj in self for obj in iterate(iterable))

    def isdisjoint(self, other) -> bool:
        return not self.intersects(other)

    # Magic methods

    def __copy__(self):
        return type(self)(self)

    def _render_entries(self) -> str:
        return ", ".join(repr(obj) for obj in by_identity(self.to_list()))
