"""
Emulated deletion for weak tables that cannot delete slots directly.

A slot is "deleted" by overwriting its collectible value with a fresh
`Tombstone` that nothing else references. The slot vanishes from the table as
soon as the tombstone is garbage collected; until then, readers treat it
exactly like an absent slot.
"""
from typing import Any

from weak_collections.types import MISSING


class Tombstone:
    __slots__ = ("__weakref__",)

    def __repr__(self):
        return "<Tombstone>"


def bury(table, key: Any):
    """
    Mark the slot for `key` in `table` as deleted.
    """
    table[key] = Tombstone()


def is_tombstone(raw: Any) -> bool:
    return isinstance(raw, Tombstone)


def missing(raw: Any) -> bool:
    """
    Whether a raw slot value read from a weak table represents an absent entry,
    i.e. it is either `MISSING` or a `Tombstone`.
    """
    return raw is MISSING or isinstance(raw, Tombstone)


def have(raw: Any) -> bool:
    """
    Whether a raw slot value read from a weak table is a live caller value.
    """
    return not missing(raw)
