import pytest

from weak_collections.config import Config
from weak_collections.errors import ConfigurationError
from weak_collections.storage import Capabilities, mappings, sets
from weak_collections.storage.selection import (
    StrategySelector,
    probe_capabilities,
    select_strategy,
)

FULL = Capabilities(weak_keys=True, weak_values=True, supports_delete=True, stable_identity=True)
NO_DELETE = FULL._replace(supports_delete=False)
VALUES_ONLY = Capabilities(weak_keys=False, weak_values=True, supports_delete=False, stable_identity=True)
UNSTABLE = VALUES_ONLY._replace(stable_identity=False)


def test_probe_capabilities():
    capabilities = probe_capabilities()
    assert capabilities.weak_keys
    assert capabilities.weak_values
    assert capabilities.supports_delete


@pytest.mark.parametrize(
    "capabilities, name",
    [
        (FULL, "weak_keys_with_delete"),
        (NO_DELETE, "weak_keys"),
        (VALUES_ONLY, "strong_keys"),
        (UNSTABLE, "strong_secondary_keys"),
    ],
)
def test_select_strategy(capabilities, name):
    assert select_strategy(sets.SET_STRATEGIES, capabilities).NAME == name
    assert select_strategy(mappings.MAP_STRATEGIES, capabilities).NAME == name


def test_select_strategy_by_name():
    assert select_strategy(sets.SET_STRATEGIES, FULL, name="strong_keys") is sets.StrongKeys
    assert (
        select_strategy(mappings.MAP_STRATEGIES, UNSTABLE, name="strong_secondary_keys")
        is mappings.StrongSecondaryKeys
    )

    with pytest.raises(ConfigurationError, match="is not usable"):
        select_strategy(sets.SET_STRATEGIES, VALUES_ONLY, name="weak_keys")
    with pytest.raises(ConfigurationError, match="Unknown storage strategy `nope`"):
        select_strategy(sets.SET_STRATEGIES, FULL, name="nope")


def test_select_strategy_none_usable():
    with pytest.raises(ConfigurationError, match="No usable storage strategy"):
        select_strategy([sets.WeakKeysWithDelete], VALUES_ONLY)


class TestStrategySelector:
    def test_default(self):
        selector = StrategySelector(sets.SET_STRATEGIES, config=Config())
        assert selector.strategy is sets.WeakKeysWithDelete
        assert selector.strategy is selector.strategy

    def test_configured(self):
        selector = StrategySelector(mappings.MAP_STRATEGIES, config=Config(strategy="strong_keys"))
        assert selector.strategy is mappings.StrongKeys

    def test_capabilities_override(self):
        selector = StrategySelector(sets.SET_STRATEGIES, config=Config())
        selector.__dict__["capabilities"] = UNSTABLE
        assert selector.strategy is sets.StrongSecondaryKeys

    def test_repr(self):
        assert repr(StrategySelector(sets.SET_STRATEGIES)) == (
            "<StrategySelector: weak_keys_with_delete, weak_keys, strong_keys, strong_secondary_keys>"
        )
