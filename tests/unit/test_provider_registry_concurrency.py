"""Concurrency tests for lazy discovery and overrides."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from measure_spi.core.providers import ProviderRegistry, StaticDiscovery
from tests.fixtures.provider_plugin_example import ExampleProvider

_THREADS = 16


class SlowCountingDiscovery:
    def __init__(self, providers, delay: float = 0.05):
        self.providers = list(providers)
        self.delay = delay
        self.calls = 0
        self._calls_lock = threading.Lock()

    def discover(self):
        with self._calls_lock:
            self.calls += 1
        time.sleep(self.delay)
        return list(self.providers)


def _run_concurrently(fn, count: int = _THREADS):
    barrier = threading.Barrier(count)

    def _task(i):
        barrier.wait()
        return fn(i)

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(_task, range(count)))


def test_concurrent_first_reads_discover_once():
    a = ExampleProvider("a", priority=1)
    b = ExampleProvider("b", priority=2)
    discovery = SlowCountingDiscovery([a, b])
    registry = ProviderRegistry(discovery)

    operations = [
        lambda: registry.available(),
        lambda: registry.current(),
        lambda: registry.of("a"),
    ]
    results = _run_concurrently(lambda i: operations[i % len(operations)]())

    assert discovery.calls == 1
    for i, result in enumerate(results):
        if i % 3 == 0:
            assert result == [b, a]
        elif i % 3 == 1:
            assert result is b
        else:
            assert result is a


def test_concurrent_first_set_current_discovers_once():
    discovery = SlowCountingDiscovery([ExampleProvider("base", priority=1)])
    registry = ProviderRegistry(discovery)
    newcomers = [ExampleProvider(f"n{i}") for i in range(_THREADS)]

    _run_concurrently(lambda i: registry.set_current(newcomers[i]))

    assert discovery.calls == 1
    listed = registry.available()
    assert len(listed) == _THREADS + 1
    assert len({id(p) for p in listed}) == _THREADS + 1


def test_concurrent_overrides_keep_each_provider_once():
    pool = [ExampleProvider(f"p{i}", priority=i) for i in range(6)]
    registry = ProviderRegistry(StaticDiscovery(pool[:3]))
    registry.available()

    def _override(i):
        for step in range(50):
            registry.set_current(pool[(i + step) % len(pool)])

    _run_concurrently(_override, count=8)

    listed = registry.available()
    assert len(listed) == len(pool)
    assert {id(p) for p in listed} == {id(p) for p in pool}
    assert registry.current() is listed[0]


def test_previous_values_chain_across_threads():
    """Every returned "previous" was current exactly when the override landed."""
    base = ExampleProvider("base", priority=1)
    registry = ProviderRegistry(StaticDiscovery([base]))
    newcomers = [ExampleProvider(f"n{i}") for i in range(_THREADS)]

    previous = _run_concurrently(lambda i: registry.set_current(newcomers[i]))

    # Each override replaced a distinct head; together they form one chain.
    returned = {id(p) for p in previous}
    assert len(returned) == _THREADS
    assert id(base) in returned
    assert id(registry.current()) not in returned


def test_override_log_events_form_one_chain(caplog):
    base = ExampleProvider("base", priority=1)
    registry = ProviderRegistry(StaticDiscovery([base]))
    registry.available()
    newcomers = [ExampleProvider(f"n{i}") for i in range(_THREADS)]

    with caplog.at_level(logging.DEBUG, logger="measure_spi.core.providers.registry"):
        _run_concurrently(lambda i: registry.set_current(newcomers[i]))

    records = [
        r
        for r in caplog.records
        if r.name == "measure_spi.core.providers.registry" and r.levelno == logging.DEBUG
    ]
    assert len(records) == _THREADS
    assert records[0].previous == "base"
    for earlier, later in zip(records, records[1:]):
        assert later.previous == earlier.provider
    assert records[-1].provider == registry.current().name
    assert {r.provider for r in records} == {p.name for p in newcomers}


def test_populated_reads_do_not_wait_for_the_write_lock():
    a = ExampleProvider("a", priority=1)
    b = ExampleProvider("b", priority=2)
    registry = ProviderRegistry(StaticDiscovery([a, b]))
    registry.available()

    held = threading.Event()
    release = threading.Event()

    def _hold_lock():
        with registry._lock:
            held.set()
            release.wait(5)

    holder = threading.Thread(target=_hold_lock)
    holder.start()
    pool = ThreadPoolExecutor(max_workers=3)
    try:
        assert held.wait(5)
        current = pool.submit(registry.current)
        listed = pool.submit(registry.available)
        found = pool.submit(registry.of, "a")

        assert current.result(timeout=1) is b
        assert listed.result(timeout=1) == [b, a]
        assert found.result(timeout=1) is a
    finally:
        release.set()
        holder.join()
        pool.shutdown(wait=True)
