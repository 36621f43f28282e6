import inspect
import warnings
from collections.abc import MutableMapping
from typing import Any, Callable, Iterator, List, Optional, Tuple

from weak_collections.errors import KeyNotFoundError
from weak_collections.storage import MAP_STRATEGIES
from weak_collections.types import MISSING
from weak_collections.utils.iteration import iterate_pairs
from weak_collections.utils.rendering import by_identity

from .base import WeakCollection

DefaultFactory = Callable[["WeakMap", Any], Any]


class WeakMap(WeakCollection, MutableMapping):  # pylint: disable=too-many-ancestors,too-many-public-methods
    """
    A mapping that only weakly references both its keys and its values. Once
    either the key or the value of a pair is no longer referenced anywhere
    else, it is garbage collected and the pair silently vanishes from the map.

    Note that:
    - Keys are compared by object identity (`is`) rather than by
      `__eq__`/`__hash__`, so two distinct but equal objects are distinct keys,
      and unhashable objects can be keys.
    - Looking up a missing key with `map[key]` returns the default value (or
      the result of the default factory) rather than raising. Use `fetch` for
      a lookup that raises on missing keys.
    - The iteration order is non-deterministic.
    - Objects which do not support weak references (such as `int`, `str` or
      `tuple` instances) are held strongly for as long as they are stored.
    - Weak maps are not thread-safe; concurrent access must be serialized by
      the caller.

    Args:
        default: The value returned when looking up missing keys.
        default_factory: A callable invoked with the map and the missing key
            whose result is returned when looking up missing keys. Only one of
            `default` and `default_factory` may be specified.
    """

    STRATEGIES = MAP_STRATEGIES

    def __init__(self, default: Any = MISSING, default_factory: Optional[DefaultFactory] = None):
        if default is not MISSING and default_factory is not None:
            raise ValueError("Only one of `default` and `default_factory` may be specified.")
        super().__init__()
        self._default = None
        self._default_factory = None
        if default_factory is not None:
            self.default_factory = default_factory
        elif default is not MISSING:
            self._default = default

    @classmethod
    def of(cls, *maps) -> "WeakMap":
        """
        Build a weak map with the pairs of all given mappings (later mappings
        taking precedence).
        """
        return cls().update(*maps)

    # MutableMapping implementation

    def __getitem__(self, key):
        value = self._storage.get(key)
        if value is MISSING:
            return self.default_for(key)
        return value

    def __setitem__(self, key, value):
        self._storage.set(key, value)

    def __delitem__(self, key):
        if self._storage.delete(key) is MISSING:
            raise KeyError(key)

    def __contains__(self, key):
        return self._storage.include(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._storage.keys())

    def __len__(self):
        return self._storage.size()

    def get(self, key, default=None):
        value = self._storage.get(key)
        return default if value is MISSING else value

    def pop(self, key, default=MISSING):
        value = self._storage.delete(key)
        if value is not MISSING:
            return value
        if default is MISSING:
            raise KeyError(key)
        return default

    def popitem(self) -> Tuple[Any, Any]:
        for key, value in self._storage.each_pair():
            self._storage.delete(key)
            return key, value
        raise KeyError("popitem(): weak map is empty")

    def setdefault(self, key, default=None):
        value = self._storage.get(key)
        if value is MISSING:
            return self._storage.set(key, default)
        return value

    def keys(self) -> List[Any]:
        """
        A snapshot of all live keys.
        """
        return self._storage.keys()

    def values(self) -> List[Any]:
        """
        A snapshot of all live values.
        """
        return self._storage.values()

    def items(self) -> List[Tuple[Any, Any]]:
        """
        A snapshot of all live `(key, value)` pairs.
        """
        return self._storage.to_list()

    # Lookups

    def include(self, key) -> bool:
        return self._storage.include(key)

    def lookup(self, key) -> Tuple[Any, bool]:
        """
        Returns:
            A `(value, found)` tuple, where `value` is `None` if `key` was not
            found.
        """
        value, found = self._storage.lookup(key)
        return (value if found else None), found

    def fetch(self, key, default: Any = MISSING, factory: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        Look up the value for `key`, which must be present unless a fallback is
        provided.

        Args:
            key: The key to look up.
            default: The value to return if `key` is missing.
            factory: A callable invoked with `key` if it is missing, whose
                result is returned instead. Supersedes `default`.

        Raises:
            KeyNotFoundError: If `key` is missing and neither `default` nor
                `factory` was given. The map's own default is not consulted.
        """
        value = self._storage.get(key)
        if value is not MISSING:
            return value
        if factory is not None:
            if default is not MISSING:
                warnings.warn("`factory` supersedes the `default` argument.", stacklevel=2)
            return factory(key)
        if default is not MISSING:
            return default
        raise KeyNotFoundError(key, receiver=self)

    def values_at(self, *keys) -> List[Any]:
        """
        Returns:
            The values for each of `keys`, falling back to the map default for
            missing keys.
        """
        return [self[key] for key in keys]

    def has_value(self, value) -> bool:
        """
        Whether `value` (by identity) is stored for any key.
        """
        return any(stored is value for stored in self._storage.each_value())

    def each_key(self) -> Iterator[Any]:
        return self._storage.each_key()

    def each_value(self) -> Iterator[Any]:
        return self._storage.each_value()

    def each_pair(self) -> Iterator[Tuple[Any, Any]]:
        return self._storage.each_pair()

    def to_list(self) -> List[Tuple[Any, Any]]:
        return self._storage.to_list()

    # Defaults

    @property
    def default(self) -> Any:
        """
        The value returned for missing keys. Setting it clears any
        `default_factory`.
        """
        return self._default

    @default.setter
    def default(self, value):
        self._default_factory = None
        self._default = value

    @property
    def default_factory(self) -> Optional[DefaultFactory]:
        """
        A callable invoked with the map and a missing key to produce the value
        returned for that key. Setting it clears any `default`.
        """
        return self._default_factory

    @default_factory.setter
    def default_factory(self, factory: Optional[DefaultFactory]):
        if factory is not None:
            if not callable(factory):
                raise TypeError(f"`default_factory` must be callable, not `{type(factory).__name__}`.")
            try:
                inspect.signature(factory).bind(self, None)
            except TypeError:
                raise TypeError("`default_factory` must accept two arguments: the map and the key.") from None
            except ValueError:  # pragma: no cover; builtins without signatures
                pass
        self._default = None
        self._default_factory = factory

    def default_for(self, key: Any = MISSING) -> Any:
        """
        The default for a missing `key`. If `key` is not given, the static
        `default` is returned without invoking any `default_factory`.
        """
        if key is MISSING:
            return self._default
        if self._default_factory is not None:
            return self._default_factory(self, key)
        return self._default

    # Bulk mutation

    def store(self, key, value) -> Any:
        """
        Associate `value` with `key`.

        Returns:
            `value`.
        """
        return self._storage.set(key, value)

    def delete(self, key, factory: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        Delete `key` (if present).

        Returns:
            The value that was associated with `key`. If `key` was missing, the
            result of `factory(key)` if `factory` is given, and `None`
            otherwise.
        """
        value = self._storage.delete(key)
        if value is not MISSING:
            return value
        return factory(key) if factory is not None else None

    def update(self, *maps, resolve: Optional[Callable[[Any, Any, Any], Any]] = None) -> "WeakMap":  # pylint: disable=arguments-differ
        """
        Add the pairs of each of `maps`, overwriting existing keys.

        Args:
            maps: Mappings (or objects with an `items()` method).
            resolve: A callable invoked with `(key, old_value, new_value)` for
                keys already present, whose result is stored instead of
                `new_value`.

        Returns:
            This map.
        """
        for mapping in maps:
            for key, value in iterate_pairs(mapping):
                if resolve is not None:
                    old_value = self._storage.get(key)
                    if old_value is not MISSING:
                        value = resolve(key, old_value, value)
                self._storage.set(key, value)
        return self

    merge_in = update

    def merge(self, *maps, resolve: Optional[Callable[[Any, Any, Any], Any]] = None) -> "WeakMap":
        """
        Like `update`, but returns a new weak map, leaving this one unchanged.
        """
        return self.copy().update(*maps, resolve=resolve)

    def replace(self, mapping) -> "WeakMap":
        """
        Replace the contents of this map with the pairs of `mapping`. If
        `mapping` is a `WeakMap`, its default configuration is copied too;
        otherwise the default is reset to `None` and any `default_factory` is
        cleared. If reading `mapping` fails, this map is left untouched.

        Returns:
            This map.
        """
        self._storage.replace(iterate_pairs(mapping))
        if isinstance(mapping, WeakMap):
            self._copy_defaults(mapping)
        else:
            self.default = None
        return self

    def keep_if(self, predicate: Callable[[Any, Any], bool]) -> "WeakMap":
        """
        Delete every pair for which `predicate(key, value)` is falsey.

        Returns:
            This map.
        """
        for key, value in self._storage.each_pair():
            if not predicate(key, value):
                self._storage.delete(key)
        return self

    def delete_if(self, predicate: Callable[[Any, Any], bool]) -> "WeakMap":
        """
        Delete every pair for which `predicate(key, value)` is truthy.

        Returns:
            This map.
        """
        for key, value in self._storage.each_pair():
            if predicate(key, value):
                self._storage.delete(key)
        return self

    def select(self, predicate: Callable[[Any, Any], bool]) -> Optional["WeakMap"]:
        """
        Like `keep_if`, but returns `None` if no pair was deleted.
        """
        changed = False
        for key, value in self._storage.each_pair():
            if not predicate(key, value):
                self._storage.delete(key)
                changed = True
        return self if changed else None

    def reject(self, predicate: Callable[[Any, Any], bool]) -> Optional["WeakMap"]:
        """
        Like `delete_if`, but returns `None` if no pair was deleted.
        """
        changed = False
        for key, value in self._storage.each_pair():
            if predicate(key, value):
                self._storage.delete(key)
                changed = True
        return self if changed else None

    # Magic methods

    def _copy_defaults(self, other: "WeakMap"):
        if other.default_factory is not None:
            self.default_factory = other.default_factory
        else:
            self.default = other.default

    def __copy__(self):
        new = type(self)()
        new._copy_defaults(self)
        return new.update(self)

    def __eq__(self, other):
        if other is self:
            return True
        if not isinstance(other, WeakMap):
            return NotImplemented
        pairs = self.to_list()
        if len(pairs) != len(other):
            return False
        for key, value in pairs:
            other_value, found = other._storage.lookup(key)
            if not found or not (other_value is value or other_value == value):
                return False
        return True

    __hash__ = None

    def _render_entries(self) -> str:
        return ", ".join(
            f"{key!r}: {value!r}"
            for key, value in by_identity(self.to_list(), key=lambda pair: pair[0])
        )
