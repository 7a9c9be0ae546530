"""
Tests for the retry wrapper and the per-key debouncer
"""

import asyncio
import threading
import pytest

from seatplan.editor.debounce import Debouncer
from seatplan.editor.retry import execute_with_retry, linear_backoff
from seatplan.services.errors import StoreError

def no_wait(attempt):
    return 0

class FlakyOperation:
    """Fails a fixed number of times before succeeding"""

    def __init__(self, failures, error=StoreError("backend down")):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"

def test_linear_backoff():
    backoff = linear_backoff(0.5)
    assert backoff(1) == 0.5
    assert backoff(2) == 1.0

def test_retry_succeeds_after_failures():
    operation = FlakyOperation(failures=2)
    result = asyncio.run(execute_with_retry(operation, attempts=3, backoff=no_wait))
    assert result.success is True
    assert result.value == "ok"
    assert result.attempts == 3
    assert operation.calls == 3

def test_retry_gives_up_and_reports_error():
    operation = FlakyOperation(failures=5)
    delays = []

    def backoff(attempt):
        delays.append(attempt)
        return 0

    result = asyncio.run(execute_with_retry(operation, attempts=3, backoff=backoff))
    assert result.success is False
    assert isinstance(result.error, StoreError)
    assert result.attempts == 3
    assert operation.calls == 3
    # no wait after the last attempt
    assert delays == [1, 2]

def test_retry_awaits_coroutines():
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) == 1:
            raise StoreError("first")
        return 42

    result = asyncio.run(execute_with_retry(operation, backoff=no_wait))
    assert result.success is True
    assert result.value == 42

def test_retry_runs_blocking_operation_in_worker_thread():
    loop_thread = threading.get_ident()
    operation = FlakyOperation(failures=1)
    threads = []

    def blocking():
        threads.append(threading.get_ident())
        return operation()

    result = asyncio.run(execute_with_retry(blocking, backoff=no_wait, run_in_thread=True))
    assert result.success is True
    assert result.value == "ok"
    assert result.attempts == 2
    assert loop_thread not in threads

def test_unlisted_errors_propagate():
    operation = FlakyOperation(failures=1, error=KeyError("bug"))
    with pytest.raises(KeyError):
        asyncio.run(execute_with_retry(operation, backoff=no_wait, retry_on=(StoreError,)))

def test_debounce_keeps_only_last_call():
    """Three quick schedules for one key produce one call, the last"""
    calls = []

    def record(value):
        async def callback():
            calls.append(value)
        return callback

    async def scenario():
        debouncer = Debouncer(0.02)
        debouncer.schedule(1, record("first"))
        debouncer.schedule(1, record("second"))
        debouncer.schedule(1, record("third"))
        assert debouncer.pending(1)
        await asyncio.sleep(0.1)
        assert not debouncer.pending(1)

    asyncio.run(scenario())
    assert calls == ["third"]

def test_debounce_keys_are_independent():
    calls = []

    def record(value):
        async def callback():
            calls.append(value)
        return callback

    async def scenario():
        debouncer = Debouncer(0.02)
        debouncer.schedule(1, record("table 1"))
        debouncer.schedule(2, record("table 2"))
        assert sorted(debouncer.pending_keys()) == [1, 2]
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert sorted(calls) == ["table 1", "table 2"]

def test_debounce_flush_and_cancel():
    calls = []

    def record(value):
        async def callback():
            calls.append(value)
        return callback

    async def scenario():
        debouncer = Debouncer(60)
        debouncer.schedule("a", record("a"))
        debouncer.schedule("b", record("b"))
        debouncer.cancel("b")
        await debouncer.flush()
        assert debouncer.pending_keys() == []

    asyncio.run(scenario())
    assert calls == ["a"]

def test_debounce_callback_error_is_logged_not_raised(caplog):
    async def failing():
        raise RuntimeError("write failed")

    async def scenario():
        debouncer = Debouncer(0.01)
        debouncer.schedule(1, failing)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert "write failed" in caplog.text
