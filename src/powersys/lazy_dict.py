"""Defines a lookup that is populated lazily from an iterable."""

from typing import Callable, Generic, Hashable, Iterable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class LazyDictFromIterator(Generic[K, V]):
    """Keyed lookup over an iterable that is consumed only as far as lookups require.

    Every item read from the iterable is cached by the key returned from ``key_func``. If two
    items produce the same key, the first one wins.

    Examples
    --------
    >>> generators = LazyDictFromIterator(system.get_components(ThermalGen), lambda x: x.name)
    >>> generators.get("gen1")
    """

    def __init__(self, items: Iterable[V], key_func: Callable[[V], K]) -> None:
        self._items = iter(items)
        self._key_func = key_func
        self._cache: dict[K, V] = {}

    def get(self, key: K, default: V | None = None) -> V | None:
        """Return the item for key, or default if the iterable has no such item."""
        item = self._find(key)
        return default if item is _MISSING else item  # type: ignore[return-value]

    def __getitem__(self, key: K) -> V:
        item = self._find(key)
        if item is _MISSING:
            raise KeyError(key)
        return item  # type: ignore[return-value]

    def __contains__(self, key: object) -> bool:
        return self._find(key) is not _MISSING  # type: ignore[arg-type]

    @property
    def num_loaded(self) -> int:
        """Return the number of distinct keys cached so far."""
        return len(self._cache)

    def _find(self, key: K) -> object:
        if key in self._cache:
            return self._cache[key]

        for item in self._items:
            item_key = self._key_func(item)
            self._cache.setdefault(item_key, item)
            if item_key == key:
                return self._cache[item_key]

        return _MISSING
