from typing import Any, Callable, Dict, Optional


def identity(obj: Any) -> int:
    """
    The identity token of `obj`. Tokens are unique among live objects, but may
    be reused once an object has been garbage collected.
    """
    return id(obj)


class Surrogate:
    """
    An opaque object standing in for the identity of a stored object inside of
    a strongly keyed weak table. Surrogates are never handed out to callers.
    """

    __slots__ = ("__weakref__",)

    def __repr__(self):
        return f"<Surrogate at {id(self):#x}>"


class IdentityIndex:
    """
    A strongly referenced mapping from the identity token of an object to the
    `Surrogate` used to store it.

    Entries are never removed automatically (this is the only bookkeeping
    structure which does not shrink by itself as objects are collected), so
    owners are expected to `retain` only the entries that are still in use from
    time to time.
    """

    def __init__(self):
        self._surrogates: Dict[int, Surrogate] = {}

    def get(self, obj: Any) -> Optional[Surrogate]:
        return self._surrogates.get(identity(obj))

    def surrogate_for(self, obj: Any) -> Surrogate:
        """
        Look up the surrogate for `obj`, creating one if it does not exist yet.
        """
        token = identity(obj)
        surrogate = self._surrogates.get(token)
        if surrogate is None:
            surrogate = self._surrogates[token] = Surrogate()
        return surrogate

    def retain(self, predicate: Callable[[Surrogate], bool]) -> int:
        """
        Drop every entry whose surrogate does not satisfy `predicate`.

        Returns:
            The number of dropped entries.
        """
        dropped = [
            token
            for token, surrogate in self._surrogates.items()
            if not predicate(surrogate)
        ]
        for token in dropped:
            del self._surrogates[token]
        return len(dropped)

    def __len__(self):
        return len(self._surrogates)

    def __repr__(self):
        return f"<IdentityIndex size={len(self)}>"
