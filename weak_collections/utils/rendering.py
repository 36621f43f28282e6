import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, List

_RENDERING = threading.local()


@contextmanager
def rendering(obj: Any) -> Iterator[bool]:
    """
    Track that `obj` is being rendered in the current thread for the duration
    of the context.

    Yields:
        `False` if `obj` is already being rendered further up the stack (i.e.
        it is contained within itself), and `True` otherwise.
    """
    active = getattr(_RENDERING, "active", None)
    if active is None:
        active = _RENDERING.active = set()
    token = id(obj)
    if token in active:
        yield False
        return
    active.add(token)
    try:
        yield True
    finally:
        active.discard(token)


def by_identity(objs: Iterable[Any], key: Callable[[Any], Any] = lambda obj: obj) -> List[Any]:
    """
    Sort `objs` by the identity of `key(obj)`, which gives weak collections
    (which have no inherent order) a stable rendering.
    """
    return sorted(objs, key=lambda obj: id(key(obj)))
