import logging
import platform
from typing import Optional, Sequence, Type

from cached_property import cached_property

from weak_collections.config import Config, get_config
from weak_collections.errors import ConfigurationError

from .base import Capabilities, WeakStorage
from .primitive import WeakTable

logger = logging.getLogger(__name__)

# Interpreters whose `id()` values are unique for the lifetime of an object and
# can be used as dictionary keys.
STABLE_IDENTITY_IMPLEMENTATIONS = ("CPython", "PyPy")


def probe_capabilities() -> Capabilities:
    """
    Determine the capabilities of the weak tables in the running interpreter.
    """
    table = WeakTable()
    return Capabilities(
        weak_keys=table.weak_keys,
        weak_values=table.WEAK_VALUES,
        supports_delete=table.deletable,
        stable_identity=platform.python_implementation()
        in STABLE_IDENTITY_IMPLEMENTATIONS,
    )


def select_strategy(
    candidates: Sequence[Type[WeakStorage]],
    capabilities: Capabilities,
    name: Optional[str] = None,
) -> Type[WeakStorage]:
    """
    Pick a storage strategy.

    Args:
        candidates: The strategies to choose from, in order of preference.
        capabilities: The capabilities of the available weak tables.
        name: The name of a strategy to use instead of the most preferred one.

    Returns:
        The first usable strategy in `candidates` (or the named one).

    Raises:
        ConfigurationError: If the named strategy is unknown or not usable, or
            if no candidate is usable at all.
    """
    if name is not None:
        for strategy in candidates:
            if strategy.NAME == name:
                if not strategy.usable(capabilities):
                    raise ConfigurationError(
                        f"Storage strategy `{name}` is not usable with {capabilities}."
                    )
                return strategy
        raise ConfigurationError(f"Unknown storage strategy `{name}`.")

    for strategy in candidates:
        if strategy.usable(capabilities):
            return strategy
    raise ConfigurationError(f"No usable storage strategy for {capabilities}.")


class StrategySelector:
    """
    Lazily selects (exactly once) the storage strategy for a collection type.

    Args:
        candidates: The strategies to choose from, in order of preference.
        config: The configuration to honour. If not specified, the process-wide
            configuration is used.
    """

    def __init__(
        self, candidates: Sequence[Type[WeakStorage]], config: Optional[Config] = None
    ):
        self.candidates = tuple(candidates)
        self._config = config

    @property
    def config(self) -> Config:
        return self._config or get_config()

    @cached_property
    def capabilities(self) -> Capabilities:
        return probe_capabilities()

    @cached_property
    def strategy(self) -> Type[WeakStorage]:
        strategy = select_strategy(
            self.candidates, self.capabilities, name=self.config.strategy
        )
        logger.debug(
            "Selected storage strategy `%s.%s` for %s.",
            strategy.__module__,
            strategy.__name__,
            self.capabilities,
        )
        return strategy

    def __repr__(self):
        return f"<{type(self).__name__}: {', '.join(strategy.NAME for strategy in self.candidates)}>"
