import copy

import pytest

from conftest import Obj, Value, collect
from weak_collections import WeakSet
from weak_collections.collections import WeakCollection


class TestWeakSet:
    def test_garbage_collection(self, set_cls):
        s = set_cls()
        a = Obj("a")
        s.add(a)
        assert a in s
        assert len(s) == 1

        del a
        collect()
        assert len(s) == 0
        assert s.empty
        assert list(s) == []

    def test_constructor(self, set_cls):
        a, b = Obj("a"), Obj("b")
        s = set_cls([a, b, a])
        assert len(s) == 2
        assert a in s and b in s

        wrapped = {"a": a, "b": b}
        assert set_cls(["a", "b"], transform=wrapped.get) == set_cls.of(a, b)

        with pytest.raises(TypeError, match="value must be iterable, not `int`"):
            set_cls(1)

    def test_identity(self, set_cls):
        a, b = Value("x"), Value("x")
        s = set_cls.of(a)
        assert a in s
        assert b not in s
        s.add(b)
        assert len(s) == 2

    def test_unhashable(self, set_cls):
        class Unhashable(Obj):
            __hash__ = None

        a = Unhashable()
        s = set_cls.of(a)
        assert a in s
        s.remove(a)
        assert a not in s

    def test_add_delete(self, set_cls):
        s = set_cls()
        a, b = Obj("a"), Obj("b")

        assert s.add(a) is s
        assert s.add_if_absent(a) is None
        assert s.add_if_absent(b) is s
        assert s.get(a) is a
        assert s.get(Obj()) is None
        assert s.include(a)

        assert s.delete(a) is s
        assert s.delete(a) is s
        assert s.delete_if_present(a) is None
        assert s.delete_if_present(b) is s
        assert s.empty

        s.add(a)
        s.discard(a)
        s.discard(a)
        with pytest.raises(KeyError):
            s.remove(a)

    def test_pop(self, set_cls):
        a = Obj()
        s = set_cls.of(a)
        assert s.pop() is a
        with pytest.raises(KeyError):
            s.pop()

    def test_strong_fallback(self, set_cls):
        s = set_cls.of(1, "two", None)
        collect()
        assert len(s) == 3
        assert None in s
        assert 1 in s

    def test_bulk(self, set_cls):
        a, b, c = Obj("a"), Obj("b"), Obj("c")
        s = set_cls()
        assert s.update([a], (b,)) is s
        assert s.merge([c]) is s
        assert len(s) == 3
        assert s.subtract([a, b]) is s
        assert s.to_list() == [c]

        assert s.replace([a, b]) is s
        assert sorted(s.to_list(), key=id) == sorted([a, b], key=id)
        with pytest.raises(TypeError, match="value must be iterable"):
            s.replace(None)
        assert len(s) == 2

    def test_filters(self, set_cls):
        objs = [Obj(i) for i in range(6)]
        s = set_cls(objs)

        assert s.keep_if(lambda obj: obj.name < 5) is s
        assert len(s) == 5
        assert s.delete_if(lambda obj: obj.name == 0) is s
        assert len(s) == 4

        assert s.select(lambda obj: True) is None
        assert s.select(lambda obj: obj.name % 2) is s
        assert sorted(obj.name for obj in s) == [1, 3]
        assert s.reject(lambda obj: False) is None
        assert s.reject(lambda obj: obj.name == 1) is s
        assert s.to_list() == [objs[3]]

    def test_algebra(self, set_cls):
        a, b, c = Obj("a"), Obj("b"), Obj("c")
        s = set_cls.of(a, b)
        t = set_cls.of(b, c)

        assert s | t == set_cls.of(a, b, c)
        assert s.union([c]) == set_cls.of(a, b, c)
        assert s & t == set_cls.of(b)
        assert s - t == set_cls.of(a)
        assert s ^ t == set_cls.of(a, c)
        assert s == set_cls.of(a, b)

        assert isinstance(s | [c], set_cls)
        assert [c] | s == set_cls.of(a, b, c)
        assert [a, c] - s == set_cls.of(c)
        assert [a, c] & s == set_cls.of(a)
        assert [a, c] ^ s == set_cls.of(b, c)

        with pytest.raises(TypeError):
            s | 1

    def test_comparisons(self, set_cls):
        a, b = Obj("a"), Obj("b")
        small, large = set_cls.of(a), set_cls.of(a, b)

        assert small <= large and small < large
        assert large >= small and large > small
        assert small <= set_cls.of(a) and not small < set_cls.of(a)
        assert small.issubset(large) and large.issuperset(small)
        assert small.is_proper_subset(large) and large.is_proper_superset(small)

        assert small.compare(large) == -1
        assert large.compare(small) == 1
        assert small.compare(set_cls.of(a)) == 0
        assert small.compare(set_cls.of(b)) is None
        assert small.compare([a]) is None

        assert small != large
        assert small != {a}
        assert small.intersects(large)
        assert small.intersects([a])
        assert not small.intersects([b])
        assert small.isdisjoint(set_cls.of(b))

        with pytest.raises(TypeError, match="value must be a weak set"):
            small.issubset([a])
        with pytest.raises(TypeError):
            small <= {a}

    def test_equal_content(self, set_cls):
        assert set_cls.of(Value("x")) != set_cls.of(Value("x"))
        with pytest.raises(TypeError):
            hash(set_cls())

    def test_iteration_mutation(self, set_cls):
        objs = [Obj(i) for i in range(5)]
        s = set_cls(objs)
        for obj in s:
            s.delete(obj)
            s.add(Obj("temporary"))
        collect()
        assert s.empty

    def test_callbacks_deleting_later_elements(self, set_cls):
        objs = [Obj(i) for i in range(6)]
        s = set_cls(objs)
        visited = []

        def predicate(obj):
            visited.append(obj)
            s.subtract(other for other in objs if other is not obj)
            return False

        assert s.delete_if(predicate) is s
        assert len(visited) == 1
        assert s.to_list() == visited
        assert [obj for obj in s] == visited

    def test_copy(self, set_cls):
        a = Obj()
        s = set_cls.of(a)
        for other in (s.copy(), copy.copy(s)):
            assert type(other) is set_cls
            assert other == s
            other.delete(a)
            assert a in s

    def test_clear_prune(self, set_cls):
        objs = [Obj(i) for i in range(3)]
        s = set_cls(objs)
        s.delete(objs[0])
        assert s.prune() is s
        assert len(s) == 2
        assert s.clear() is s
        assert s.empty

    def test_repr(self, set_cls):
        name = set_cls.__name__
        s = set_cls()
        assert repr(s) == f"{name}()"

        a = Obj("a")
        s.add(a)
        assert repr(s) == f"{name}({{Obj('a')}})"

        s.add(s)
        assert repr(s) in (
            f"{name}({{Obj('a'), {name}({{...}})}})",
            f"{name}({{{name}({{...}}), Obj('a')}})",
        )


def test_default_strategy():
    assert WeakSet.storage_strategy().NAME == "weak_keys_with_delete"
    assert repr(WeakSet.of(1)) == "WeakSet({1})"


def test_weak_collection_is_abstract():
    with pytest.raises(TypeError, match="abstract"):
        WeakCollection()
