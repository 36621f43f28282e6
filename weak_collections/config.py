import dataclasses
import functools
import logging
import os
from typing import Mapping, Optional

from typing_extensions import Literal

from weak_collections.errors import ConfigurationError

logger = logging.getLogger(__name__)

StrategyName = Literal[
    "weak_keys_with_delete",
    "weak_keys",
    "strong_keys",
    "strong_secondary_keys",
]
STRATEGY_NAMES = StrategyName.__args__

ENV_STRATEGY = "WEAK_COLLECTIONS_STRATEGY"
ENV_PRUNE_MIN_CUTOFF = "WEAK_COLLECTIONS_PRUNE_MIN_CUTOFF"
ENV_PRUNE_RATIO = "WEAK_COLLECTIONS_PRUNE_RATIO"


@dataclasses.dataclass(frozen=True)
class Config:
    """
    Process-wide settings for weak collections.

    Attributes:
        strategy: The name of the storage strategy to force for all collection
            types, or `None` to pick the best strategy the interpreter supports.
        prune_min_cutoff: The minimum number of reclaimable bookkeeping entries
            that must accumulate before an automatic prune pass is run.
        prune_ratio: The fraction of the bookkeeping table size that must be
            reclaimable before an automatic prune pass is run (if larger than
            `prune_min_cutoff`).
    """

    strategy: Optional[StrategyName] = None
    prune_min_cutoff: int = 2000
    prune_ratio: float = 0.2

    def __post_init__(self):
        if self.strategy is not None and self.strategy not in STRATEGY_NAMES:
            raise ConfigurationError(
                f"Unknown storage strategy `{self.strategy}`. Expected one of: {', '.join(STRATEGY_NAMES)}."
            )
        if self.prune_min_cutoff < 0:
            raise ConfigurationError(
                f"`prune_min_cutoff` must be non-negative, not `{self.prune_min_cutoff}`."
            )
        if not 0 <= self.prune_ratio <= 1:
            raise ConfigurationError(
                f"`prune_ratio` must be between 0 and 1, not `{self.prune_ratio}`."
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a `Config` instance from environment variables, falling back to
        the defaults for any variable that is unset or empty.
        """
        environ = os.environ if environ is None else environ
        kwargs = {}
        if environ.get(ENV_STRATEGY):
            kwargs["strategy"] = environ[ENV_STRATEGY].strip().lower()
        try:
            if environ.get(ENV_PRUNE_MIN_CUTOFF):
                kwargs["prune_min_cutoff"] = int(environ[ENV_PRUNE_MIN_CUTOFF])
            if environ.get(ENV_PRUNE_RATIO):
                kwargs["prune_ratio"] = float(environ[ENV_PRUNE_RATIO])
        except ValueError as e:
            raise ConfigurationError(f"Invalid auto-prune setting: {e}") from e
        return cls(**kwargs)


@functools.lru_cache(maxsize=None)
def get_config() -> Config:
    """
    The process-wide configuration, read from the environment on first use.
    """
    config = Config.from_env()
    logger.debug("Loaded weak collection configuration: %r", config)
    return config
