"""Tests for the registry pattern."""

from threading import Thread

import pytest

from utilknobs_common.exceptions import NotFoundError, OperationError
from utilknobs_common.registry import MemoRegistry, Registry


class TestRegistry:
    """Test basic Registry functionality."""

    def test_create_registry(self):
        """Test creating a registry."""
        registry = Registry[str]("test_registry")
        assert registry.name == "test_registry"
        assert registry.count() == 0

    def test_register_item(self):
        """Test registering an item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        assert registry.count() == 1
        assert registry.has("key1")
        assert registry.get("key1") == "value1"

    def test_register_duplicate_raises_error(self):
        """Test that registering duplicate key raises error."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        with pytest.raises(OperationError) as exc_info:
            registry.register("key1", "value2")

        assert "already registered" in str(exc_info.value)
        assert registry.get("key1") == "value1"

    def test_register_duplicate_with_overwrite(self):
        """Test overwriting an item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")
        registry.register("key1", "value2", allow_overwrite=True)

        assert registry.get("key1") == "value2"

    def test_get_missing_raises_not_found(self):
        """Test that a missing key raises NotFoundError listing the keys."""
        registry = Registry[str]("test")
        registry.register("a", "1")

        with pytest.raises(NotFoundError) as exc_info:
            registry.get("b")

        assert exc_info.value.context["available_keys"] == ["a"]

    def test_get_optional(self):
        """Test optional lookup."""
        registry = Registry[str]("test")
        assert registry.get_optional("missing") is None

    def test_unregister(self):
        """Test unregistering returns the item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        assert registry.unregister("key1") == "value1"
        assert "key1" not in registry
        with pytest.raises(NotFoundError):
            registry.unregister("key1")

    def test_list_keys_in_registration_order(self):
        """Test that keys keep registration order."""
        registry = Registry[int]("test")
        for key in ("c", "a", "b"):
            registry.register(key, 0)

        assert registry.list_keys() == ["c", "a", "b"]

    def test_dunder_methods(self):
        """Test len, contains and iteration."""
        registry = Registry[int]("test")
        registry.register("one", 1)
        registry.register("two", 2)

        assert len(registry) == 2
        assert "one" in registry
        assert list(registry) == [1, 2]

    def test_clear(self):
        """Test clearing the registry."""
        registry = Registry[int]("test")
        registry.register("one", 1)
        registry.clear()

        assert registry.count() == 0

    def test_concurrent_registration(self):
        """Test registering from several threads."""
        registry = Registry[int]("test")

        def register_range(start):
            for i in range(start, start + 100):
                registry.register(f"key{i}", i)

        threads = [Thread(target=register_range, args=(i * 100,)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 500


class TestMemoRegistry:
    """Test MemoRegistry functionality."""

    def test_get_or_create_builds_once(self):
        """Test that the factory runs only on a miss."""
        memo = MemoRegistry[int]("lengths")
        calls = []

        def factory():
            calls.append(1)
            return 3

        assert memo.get_or_create("abc", factory) == 3
        assert memo.get_or_create("abc", factory) == 3
        assert len(calls) == 1

    def test_stats(self):
        """Test hit and miss counting."""
        memo = MemoRegistry[int]("lengths")
        memo.get_or_create("abc", lambda: 3)
        memo.get_or_create("abc", lambda: 3)
        memo.get_or_create("de", lambda: 2)

        assert memo.get_stats() == {"name": "lengths", "size": 2, "hits": 1, "misses": 2}

    def test_factory_error_stores_nothing(self):
        """Test that a failing factory leaves the memo unchanged."""
        memo = MemoRegistry[int]("test")

        def factory():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            memo.get_or_create("key", factory)

        assert not memo.has("key")

    def test_invalidate(self):
        """Test invalidating one key and all keys."""
        memo = MemoRegistry[int]("test")
        memo.get_or_create("a", lambda: 1)
        memo.get_or_create("b", lambda: 2)

        memo.invalidate("a")
        assert memo.list_keys() == ["b"]

        memo.invalidate("missing")
        memo.invalidate()
        assert memo.count() == 0
