import pytest

from powersys.lazy_dict import LazyDictFromIterator


class CountingIterable:
    """Iterable that records how many items were consumed."""

    def __init__(self, items):
        self.items = items
        self.num_consumed = 0

    def __iter__(self):
        for item in self.items:
            self.num_consumed += 1
            yield item


def test_lazy_lookup():
    items = CountingIterable(["alpha", "beta", "gamma", "delta"])
    lookup = LazyDictFromIterator(items, str.upper)

    assert lookup.get("BETA") == "beta"
    assert items.num_consumed == 2
    assert lookup.num_loaded == 2

    # Cached items do not consume the iterator.
    assert lookup["ALPHA"] == "alpha"
    assert items.num_consumed == 2

    assert "DELTA" in lookup
    assert items.num_consumed == 4


def test_missing_key():
    lookup = LazyDictFromIterator(["a", "b"], str.upper)
    assert lookup.get("Z") is None
    assert lookup.get("Z", "default") == "default"
    assert "Z" not in lookup
    with pytest.raises(KeyError):
        lookup["Z"]

    # Items consumed during the failed lookup remain available.
    assert lookup.num_loaded == 2
    assert lookup["B"] == "b"


def test_duplicate_keys():
    items = CountingIterable(["gen1", "GEN1", "gen2"])
    lookup = LazyDictFromIterator(items, str.upper)
    assert lookup["GEN2"] == "gen2"
    assert lookup["GEN1"] == "gen1"

    # num_loaded counts distinct keys, not items read.
    assert items.num_consumed == 3
    assert lookup.num_loaded == 2


def test_empty():
    lookup = LazyDictFromIterator([], str.upper)
    assert lookup.get("A") is None
    assert lookup.num_loaded == 0
