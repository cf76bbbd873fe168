from price_feed.bars import Bar
from price_feed.cache import CandleCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _bars(n: int = 3) -> list[Bar]:
    return [Bar(1_700_000_000 - i * 900, 1.0, 1.1, 0.9, 1.05) for i in range(n)]


def test_cache_hit_within_ttl_and_miss_after_expiry():
    clock = FakeClock()
    cache = CandleCache(30.0, clock=clock)
    key = cache_key("eur/usd", "15M")
    cache.set(key, _bars())

    clock.now += 29.9
    assert cache.get(key) == _bars()

    clock.now += 0.2
    assert cache.get(key) is None
    assert len(cache) == 0


def test_cache_returns_fresh_list_each_hit():
    cache = CandleCache(30.0, clock=FakeClock())
    key = cache_key("EUR/USD", "1h")
    cache.set(key, _bars())

    first = cache.get(key)
    first.clear()
    assert len(cache.get(key)) == 3


def test_cache_ignores_empty_series():
    cache = CandleCache(30.0, clock=FakeClock())
    cache.set(cache_key("EUR/USD", "4h"), [])
    assert len(cache) == 0


def test_cache_init_and_clear_reset_entries():
    cache = CandleCache(30.0, clock=FakeClock())
    cache.set(cache_key("EUR/USD", "4h"), _bars())
    cache.set(cache_key("GBP/USD", "4h"), _bars())
    assert len(cache) == 2

    cache.clear()
    assert len(cache) == 0

    cache.set(cache_key("EUR/USD", "4h"), _bars())
    assert cache.init() is cache
    assert cache.get(cache_key("EUR/USD", "4h")) is None


def test_zero_ttl_disables_storage():
    cache = CandleCache(0, clock=FakeClock())
    cache.set(cache_key("EUR/USD", "15m"), _bars())
    assert cache.get(cache_key("EUR/USD", "15m")) is None


def test_full_length_entry_misses_for_larger_request():
    cache = CandleCache(30.0, clock=FakeClock())
    key = cache_key("EUR/USD", "1h")
    cache.set(key, _bars(5), requested=5)

    assert cache.get(key, 5) == _bars(5)
    assert cache.get(key, 3) == _bars(5)
    assert cache.get(key, 200) is None
    assert len(cache) == 1


def test_short_entry_still_answers_larger_request():
    cache = CandleCache(30.0, clock=FakeClock())
    key = cache_key("EUR/USD", "1h")
    cache.set(key, _bars(3), requested=50)

    assert cache.get(key, 200) == _bars(3)
