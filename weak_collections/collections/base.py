from abc import ABCMeta, abstractmethod
from typing import Optional, Type

from weak_collections.storage import AutoPrunePolicy, StrategySelector, WeakStorage
from weak_collections.utils.rendering import rendering


class WeakCollection(metaclass=ABCMeta):
    """
    Common plumbing for weak collections: every instance delegates storage to
    an instance of the storage strategy selected for its collection type.

    Class Attributes:
        STRATEGIES: The `StrategySelector` that picks the storage strategy for
            this collection type.
        STRATEGY: An explicit storage strategy for this collection type, which
            (if set) is used instead of the one picked by `STRATEGIES`.
            Subclasses can use this to pin a strategy.
        PRUNE_POLICY: The `AutoPrunePolicy` to hand to storage instances. If not
            set, the policy is derived from the process-wide configuration.
    """

    STRATEGIES: StrategySelector = None
    STRATEGY: Optional[Type[WeakStorage]] = None
    PRUNE_POLICY: Optional[AutoPrunePolicy] = None

    def __init__(self):
        self._storage = self.storage_strategy()(prune_policy=self.PRUNE_POLICY)

    @classmethod
    def storage_strategy(cls) -> Type[WeakStorage]:
        """
        The storage strategy used by instances of this collection type.
        """
        return cls.STRATEGY or cls.STRATEGIES.strategy

    def prune(self):
        """
        Clean up internal data structures, removing data associated with
        deleted or garbage collected entries. This is also done automatically
        (where needed) once enough such data has accumulated, so it is only
        necessary to call this when a deterministic point of cleanup is
        desired.

        Returns:
            This collection.
        """
        self._storage.prune()
        return self

    def clear(self):
        """
        Remove all entries.

        Returns:
            This collection.
        """
        self._storage.clear()
        return self

    @property
    def empty(self) -> bool:
        return self._storage.size() == 0

    def copy(self):
        return self.__copy__()

    @abstractmethod
    def __copy__(self):
        ...  # pragma: no cover

    @abstractmethod
    def _render_entries(self) -> str:
        """
        The comma-separated entries shown inside the braces of `repr`.
        """

    def __repr__(self):
        with rendering(self) as renderable:
            if not renderable:
                return f"{type(self).__name__}({{...}})"
            if self.empty:
                return f"{type(self).__name__}()"
            return f"{type(self).__name__}({{{self._render_entries()}}})"
