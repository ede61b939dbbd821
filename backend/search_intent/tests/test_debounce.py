import asyncio

import pytest

from search_intent.service.debounce import Debouncer


@pytest.mark.asyncio
async def test_rapid_submissions_run_once_for_latest_value():
    calls = []
    debouncer = Debouncer(0.05, calls.append)

    for text in ("a", "ab", "abc"):
        debouncer.submit(text)
        await asyncio.sleep(0.01)

    assert debouncer.pending
    await debouncer.wait()
    assert calls == ["abc"]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_cancel_drops_pending_run():
    calls = []
    debouncer = Debouncer(0.02, calls.append)
    debouncer.submit("a")
    debouncer.cancel()
    await asyncio.sleep(0.05)
    assert calls == []


@pytest.mark.asyncio
async def test_async_callback_is_awaited():
    calls = []

    async def callback(value):
        await asyncio.sleep(0)
        calls.append(value)

    debouncer = Debouncer(0.01, callback)
    debouncer.submit("x")
    await debouncer.wait()
    assert calls == ["x"]


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_later_runs():
    calls = []

    def callback(value):
        if value == "bad":
            raise ValueError("boom")
        calls.append(value)

    debouncer = Debouncer(0.01, callback)
    debouncer.submit("bad")
    await debouncer.wait()
    debouncer.submit("good")
    await debouncer.wait()
    assert calls == ["good"]
