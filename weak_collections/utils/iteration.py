from collections.abc import Iterable, Mapping
from typing import Any, Iterator, Tuple


def iterate(source: Any) -> Iterator[Any]:
    """
    Iterate over the elements of `source`, raising a `TypeError` if it is not
    iterable.
    """
    if not isinstance(source, Iterable):
        raise TypeError(
            f"value must be iterable, not `{type(source).__name__}`"
        )
    return iter(source)


def iterate_pairs(source: Any) -> Iterator[Tuple[Any, Any]]:
    """
    Iterate over the `(key, value)` pairs of a mapping-like `source`, raising a
    `TypeError` if it cannot be interpreted as a mapping.

    Mappings (including `WeakMap`) and objects with an `items()` method are
    accepted.
    """
    if isinstance(source, Mapping) or callable(getattr(source, "items", None)):
        return iter(list(source.items()))
    raise TypeError(f"no implicit conversion of `{type(source).__name__}` into a mapping")
