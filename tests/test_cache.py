import pandas as pd
import pytest

from utils.sample_order_reporting.cache import ResultCache
from utils.sample_order_reporting.models import FilterState


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResultCache(store={}, ttl_seconds=300, clock=clock)


def test_set_then_get(cache):
    cache.set('k', {'a': 1})
    assert cache.get('k') == {'a': 1}


def test_entries_expire_after_ttl(cache, clock):
    cache.set('k', {'a': 1})
    clock.now += 300
    assert cache.get('k') == {'a': 1}
    clock.now += 1
    assert cache.get('k') is None
    assert 'dashboard_cache_k' not in cache.store


def test_corrupt_entry_is_a_miss(cache):
    cache.store['dashboard_cache_bad'] = '{not json'
    assert cache.get('bad') is None


def test_clear_only_touches_own_prefix(cache):
    cache.set('a', 1)
    cache.set('b', 2)
    cache.store['other'] = 'keep'
    cache.clear()
    assert cache.store == {'other': 'keep'}


def test_clear_key(cache):
    cache.set('a', 1)
    cache.set('b', 2)
    cache.clear_key('a')
    assert cache.get('a') is None
    assert cache.get('b') == 2


def test_dataframes_survive_the_cache(cache):
    df = pd.DataFrame({'name': ['Atlas', 'Globe'], 'quantity': [3, 1]})
    cache.set('books', {'top': df})
    restored = cache.get('books')['top']
    pd.testing.assert_frame_equal(restored, df)


def test_keys_differ_by_viewer_and_filters():
    base = FilterState()
    key = ResultCache.generate_key('sample', base, 'a@x.com')
    assert key == ResultCache.generate_key('sample', FilterState(), 'a@x.com')
    assert key != ResultCache.generate_key('sample', base, 'b@x.com')
    assert key != ResultCache.generate_key('sample', base.with_status('Delivered'), 'a@x.com')
    assert key != ResultCache.generate_key('order', base, 'a@x.com')
