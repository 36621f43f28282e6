import logging
import math
from abc import ABCMeta, abstractmethod
from typing import Optional, Tuple

from weak_collections.config import Config, get_config
from weak_collections.errors import ConfigurationError

logger = logging.getLogger(__name__)


class AutoPrunePolicy:
    """
    Decides when bookkeeping tables have accumulated enough reclaimable entries
    to be worth a full prune pass.

    A prune pass costs O(n) in the size of the bookkeeping table, so we only
    run it once at least `min_cutoff` entries or `ratio` of the table
    (whichever is greater) could be removed. This keeps the amortized cost per
    operation constant while keeping memory use proportional to live data.

    Args:
        min_cutoff: The minimum number of reclaimable entries.
        ratio: The minimum fraction of the table that must be reclaimable.
    """

    def __init__(self, min_cutoff: int = 2000, ratio: float = 0.2):
        if min_cutoff < 0:
            raise ConfigurationError(
                f"`min_cutoff` must be non-negative, not `{min_cutoff}`."
            )
        if not 0 <= ratio <= 1:
            raise ConfigurationError(f"`ratio` must be between 0 and 1, not `{ratio}`.")
        self.min_cutoff = min_cutoff
        self.ratio = ratio

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "AutoPrunePolicy":
        config = config or get_config()
        return cls(min_cutoff=config.prune_min_cutoff, ratio=config.prune_ratio)

    def cutoff(self, size: int) -> int:
        return max(self.min_cutoff, math.ceil(size * self.ratio))

    def should_prune(self, size: int, live: int) -> bool:
        """
        Args:
            size: The size of the bookkeeping table.
            live: The number of entries in the table that are (or may be) live.
        """
        return size - live > self.cutoff(size)

    def __repr__(self):
        return f"{type(self).__name__}(min_cutoff={self.min_cutoff}, ratio={self.ratio})"


class AutoPruning(metaclass=ABCMeta):
    """
    Mixin for storage strategies whose bookkeeping does not shrink by itself.

    Subclasses implement `_bookkeeping_sizes` and `prune`, and call
    `auto_prune` from their high-traffic read paths.
    """

    prune_policy: AutoPrunePolicy

    @abstractmethod
    def _bookkeeping_sizes(self) -> Tuple[int, int]:
        """
        Returns:
            A tuple of the size of the bookkeeping table that may grow without
            bound, and the number of entries in it that may still be live.
        """

    def auto_prune(self) -> bool:
        """
        Run `prune` if the configured policy deems it worthwhile.

        Returns:
            Whether a prune pass was run.
        """
        size, live = self._bookkeeping_sizes()
        if not self.prune_policy.should_prune(size, live):
            return False
        logger.debug(
            "Auto-pruning %s: %d bookkeeping entries for %d live entries.",
            type(self).__name__,
            size,
            live,
        )
        self.prune()
        return True
