import weakref
from contextlib import contextmanager
from typing import Any, Callable, Hashable, List, Tuple

from weak_collections.types import MISSING


class _SlotRef(weakref.ref):
    """
    A weak reference that remembers the token of the table slot it belongs to,
    so that its death callback can find (and remove) that slot.
    """

    __slots__ = ("token",)

    def __new__(cls, obj, callback, token):
        self = super().__new__(cls, obj, callback)
        self.token = token
        return self

    def __init__(self, obj, callback, token):  # pylint: disable=unused-argument
        super().__init__(obj, callback)

    def get(self) -> Any:
        obj = self()
        return MISSING if obj is None else obj


class _StrongRef:
    """
    Stand-in for `_SlotRef` for objects that do not support weak references
    (`int`, `str`, `tuple`, `None`, ...). Such objects are held strongly for as
    long as they are stored.
    """

    __slots__ = ("obj",)

    def __init__(self, obj):
        self.obj = obj

    def get(self) -> Any:
        return self.obj


class _Slot:
    __slots__ = ("key_ref", "value_ref")

    def __init__(self, key_ref, value_ref):
        self.key_ref = key_ref
        self.value_ref = value_ref

    def refers_to(self, ref) -> bool:
        return self.key_ref is ref or self.value_ref is ref


def make_ref(obj: Any, token: Hashable, callback: Callable):
    """
    Reference `obj` weakly where possible (and strongly otherwise). `callback`
    is invoked with the dead reference once `obj` is garbage collected.
    """
    try:
        return _SlotRef(obj, callback, token)
    except TypeError:
        return _StrongRef(obj)


class WeakTable:
    """
    The weak-reference table that all storage strategies are built upon.

    Values are always referenced weakly. Keys are referenced weakly and
    compared by identity if `weak_keys` is `True`; otherwise they are held
    strongly and compared as ordinary dictionary keys (which is how identity
    tokens and surrogate keys are stored). A slot vanishes as soon as any of its
    weakly referenced objects is garbage collected.

    Slot reads return `MISSING` for absent slots, so any caller object
    (including `None`) can be stored as a value.

    Args:
        weak_keys: Whether keys should be weakly referenced.
        deletable: Whether slots may be removed explicitly via `delete`.
            Tables which are not deletable can only lose slots through garbage
            collection.
    """

    WEAK_VALUES = True

    def __init__(self, weak_keys: bool = True, deletable: bool = True):
        self.weak_keys = weak_keys
        self.deletable = deletable
        self._data = {}
        self._pending_removals = []
        self._iterating = 0

        def remove(ref, selfref=weakref.ref(self)):
            self = selfref()  # pylint: disable=redefined-outer-name
            if self is None:
                return
            if self._iterating:
                self._pending_removals.append(ref)
            else:
                self._discard(ref)

        self._remove = remove

    # Slot management

    def _token(self, key: Any) -> Hashable:
        return id(key) if self.weak_keys else key

    def _discard(self, ref):
        slot = self._data.get(ref.token)
        if slot is not None and slot.refers_to(ref):
            del self._data[ref.token]

    def _commit_removals(self):
        pending, self._pending_removals = self._pending_removals, []
        for ref in pending:
            self._discard(ref)

    @contextmanager
    def _iteration_guard(self):
        self._iterating += 1
        try:
            yield
        finally:
            self._iterating -= 1
            if not self._iterating and self._pending_removals:
                self._commit_removals()

    def _live_slot(self, key: Any):
        """
        Look up the slot for `key`, returning `None` if there is no slot or if
        the slot belongs to a different (since collected) object that happened
        to share the same identity token.
        """
        slot = self._data.get(self._token(key))
        if slot is None:
            return None
        if self.weak_keys and slot.key_ref.get() is not key:
            return None
        return slot

    # Table API

    def get(self, key: Any, default: Any = MISSING) -> Any:
        slot = self._live_slot(key)
        if slot is None:
            return default
        value = slot.value_ref.get()
        return default if value is MISSING else value

    def __getitem__(self, key):
        value = self.get(key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key, value):
        token = self._token(key)
        slot = self._live_slot(key)
        if slot is not None:
            key_ref = slot.key_ref
        elif self.weak_keys:
            key_ref = make_ref(key, token, self._remove)
        else:
            key_ref = None
        self._data[token] = _Slot(key_ref, make_ref(value, token, self._remove))

    def __contains__(self, key):
        return self.get(key) is not MISSING

    def delete(self, key: Any) -> Any:
        """
        Remove the slot for `key`, returning the value it held (or `MISSING` if
        there was no such slot).

        Raises:
            TypeError: If this table does not support deleting slots.
        """
        if not self.deletable:
            raise TypeError(
                f"This `{type(self).__name__}` does not support deleting slots."
            )
        value = self.get(key)
        if value is not MISSING:
            del self._data[self._token(key)]
        return value

    def items(self) -> List[Tuple[Any, Any]]:
        """
        A snapshot of all live `(key, value)` pairs.
        """
        items = []
        with self._iteration_guard():
            for token, slot in list(self._data.items()):
                key = slot.key_ref.get() if self.weak_keys else token
                value = slot.value_ref.get()
                if key is not MISSING and value is not MISSING:
                    items.append((key, value))
        return items

    def keys(self) -> List[Any]:
        return [key for key, _ in self.items()]

    def values(self) -> List[Any]:
        return [value for _, value in self.items()]

    def __iter__(self):
        return iter(self.keys())

    def __len__(self):
        if self._pending_removals and not self._iterating:
            self._commit_removals()
        return len(self._data)

    def __repr__(self):
        return f"<{type(self).__name__} weak_keys={self.weak_keys} deletable={self.deletable} size={len(self)}>"
