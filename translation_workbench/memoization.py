"""Caller-owned caches for repeated data transforms."""
import copy
import json
from collections import OrderedDict
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class LRUCache(Generic[K, V]):
    """Bounded least-recently-used cache."""

    def __init__(self, max_size: int = 50):
        self.max_size = max(1, int(max_size))
        self._cache: 'OrderedDict[K, V]' = OrderedDict()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: K) -> bool:
        return key in self._cache

    def get(self, key: K) -> Optional[V]:
        if key not in self._cache:
            return None
        self._cache.move_to_end(key)
        return self._cache[key]

    def set(self, key: K, value: V) -> None:
        if key in self._cache:
            self._cache.move_to_end(key)
        elif len(self._cache) >= self.max_size:
            self._cache.popitem(last=False)
        self._cache[key] = value

    def clear(self) -> None:
        self._cache.clear()


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    raise TypeError(f"Cannot build a cache key from {type(value).__name__}")


def create_cache_key(*values: Any) -> str:
    """Serialize the arguments of a transform into a cache key."""
    return json.dumps(values, ensure_ascii=False, default=_to_jsonable)


class TransformCache:
    """
    LRU cache for transform results keyed by the serialized transform arguments.

    Results are deep-copied on the way in and out so callers can never mutate a
    cached value through a returned reference.
    """

    def __init__(self, max_size: int = 20):
        self._lru: LRUCache[str, Any] = LRUCache(max_size)
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._lru)

    def get_or_compute(self, name: str, args: tuple, factory: Callable[[], V]) -> V:
        key = create_cache_key(name, *args)
        if key in self._lru:
            self.hits += 1
            return copy.deepcopy(self._lru.get(key))
        self.misses += 1
        result = factory()
        self._lru.set(key, copy.deepcopy(result))
        return result

    def clear(self) -> None:
        self._lru.clear()
        self.hits = 0
        self.misses = 0
