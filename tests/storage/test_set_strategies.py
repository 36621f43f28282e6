import pytest

from conftest import Obj, Value, collect
from weak_collections.storage import AutoPrunePolicy, sets


@pytest.fixture
def storage(set_strategy):
    return set_strategy()


class TestSetStorage:
    def test_add_include_delete(self, storage):
        a, b = Obj("a"), Obj("b")
        assert storage.add(a) is storage
        assert storage.include(a)
        assert not storage.include(b)
        assert storage.size() == 1

        storage.add(a)
        assert storage.size() == 1

        assert storage.delete(a)
        assert not storage.delete(a)
        assert not storage.include(a)
        assert storage.size() == 0

        storage.add(a)
        assert storage.include(a)

    def test_identity(self, storage):
        a, b = Value("x"), Value("x")
        storage.add(a)
        assert storage.include(a)
        assert not storage.include(b)
        assert not storage.delete(b)
        assert storage.size() == 1

    def test_lookup(self, storage):
        a = Obj()
        assert storage.lookup(a) == (None, False)
        storage.add(a)
        assert storage.lookup(a) == (a, True)

    def test_strong_fallback(self, storage):
        storage.add(1)
        storage.add(None)
        assert storage.include(1)
        assert storage.include(None)
        assert sorted(storage.to_list(), key=repr) == [1, None]
        assert storage.delete(None)
        assert not storage.include(None)

    def test_liveness(self, storage):
        keep = [Obj(i) for i in range(5)]
        for i in range(5):
            storage.add(Obj(f"temporary {i}"))
        for obj in keep:
            storage.add(obj)
        collect()

        assert storage.size() == 5
        assert sorted(storage.to_list(), key=id) == sorted(keep, key=id)

        del keep[:2]
        collect()
        assert storage.size() == 3

    def test_delete_during_iteration(self, storage):
        objs = [Obj(i) for i in range(10)]
        for obj in objs:
            storage.add(obj)

        for obj in storage.each():
            if obj.name % 2:
                storage.delete(obj)
        assert sorted(obj.name for obj in storage.each()) == [0, 2, 4, 6, 8]

    def test_clear(self, storage):
        a = Obj()
        storage.add(a)
        assert storage.clear() is storage
        assert storage.size() == 0
        assert not storage.include(a)

    def test_prune(self, storage):
        objs = [Obj(i) for i in range(10)]
        for obj in objs:
            storage.add(obj)
        storage.delete(objs[0])
        del objs[1:5]
        collect()

        assert storage.prune() is storage
        assert storage.size() == 5
        assert all(storage.include(obj) for obj in objs[1:])
        assert not storage.include(objs[0])

    def test_replace(self, storage):
        a, b, c = Obj("a"), Obj("b"), Obj("c")
        storage.add(a)
        storage.replace([b, c])
        assert not storage.include(a)
        assert storage.include(b) and storage.include(c)

    def test_replace_failure(self, storage):
        a, b = Obj("a"), Obj("b")
        storage.add(a)

        def objs():
            yield b
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            storage.replace(objs())
        assert storage.include(a)
        assert not storage.include(b)
        assert storage.size() == 1

    def test_repr(self, storage):
        storage.add(1)
        assert repr(storage) == f"<{type(storage).__name__}: 1 entries>"


class TestStrongSecondaryKeys:
    def test_index_survives_delete(self):
        storage = sets.StrongSecondaryKeys()
        a = Obj()
        storage.add(a)
        storage.delete(a)
        assert len(storage._index) == 1
        storage.prune()
        assert len(storage._index) == 0

    def test_auto_prune(self):
        storage = sets.StrongSecondaryKeys()
        keeper = Obj("keeper")
        storage.add(keeper)
        objs = [Obj(i) for i in range(5000)]
        for obj in objs:
            storage.add(obj)
        del objs, obj
        collect()

        assert len(storage._index) == 5001
        assert storage.include(keeper)
        assert len(storage._index) == 1
        assert storage.size() == 1

    def test_auto_prune_below_cutoff(self):
        storage = sets.StrongSecondaryKeys()
        keeper = Obj("keeper")
        storage.add(keeper)
        objs = [Obj(i) for i in range(1000)]
        for obj in objs:
            storage.add(obj)
        del objs, obj
        collect()

        assert storage.include(keeper)
        assert len(storage._index) == 1001

    def test_custom_policy(self):
        storage = sets.StrongSecondaryKeys(prune_policy=AutoPrunePolicy(min_cutoff=5, ratio=0))
        keeper = Obj("keeper")
        storage.add(keeper)
        objs = [Obj(i) for i in range(10)]
        for obj in objs:
            storage.add(obj)
        del objs, obj
        collect()

        assert storage.include(keeper)
        assert len(storage._index) == 1


def test_strategy_names():
    assert [strategy.NAME for strategy in sets.SET_STRATEGIES] == [
        "weak_keys_with_delete",
        "weak_keys",
        "strong_keys",
        "strong_secondary_keys",
    ]


@pytest.mark.parametrize("strategy", sets.SET_STRATEGIES, ids=lambda strategy: strategy.NAME)
def test_each_skips_elements_deleted_by_earlier_visits(strategy):
    storage = strategy()
    objs = [Obj(i) for i in range(6)]
    for obj in objs:
        storage.add(obj)

    visited = []
    for obj in storage.each():
        visited.append(obj)
        for other in objs:
            if other is not obj:
                storage.delete(other)

    assert len(visited) == 1
    assert storage.to_list() == visited
