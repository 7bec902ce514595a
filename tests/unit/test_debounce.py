import asyncio

import pytest

from omnisearch.orchestrators.search.debounce import Debouncer


class Recorder:
    def __init__(self):
        self.calls: list[str] = []

    async def __call__(self, value: str) -> str:
        self.calls.append(value)
        return value.upper()


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_burst_collapses_to_latest_call(self):
        recorder = Recorder()
        debounced = Debouncer(recorder, delay=0.02)

        waiters = [debounced("y"), debounced("yo"), debounced("yolo")]
        assert debounced.pending is True
        results = await asyncio.gather(*waiters)

        assert recorder.calls == ["yolo"]
        assert results == ["YOLO", "YOLO", "YOLO"]
        assert debounced.pending is False

    @pytest.mark.asyncio
    async def test_calls_outside_window_run_separately(self):
        recorder = Recorder()
        debounced = Debouncer(recorder, delay=0)
        await debounced("a")
        await debounced("b")
        assert recorder.calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_per_call_delay_overrides_default(self):
        recorder = Recorder()
        debounced = Debouncer(recorder, delay=60)
        result = await asyncio.wait_for(debounced("now", delay=0), timeout=1)
        assert result == "NOW"

    @pytest.mark.asyncio
    async def test_cancel_resolves_waiters_with_none(self):
        recorder = Recorder()
        debounced = Debouncer(recorder, delay=60)
        waiter = debounced("never")
        debounced.cancel()
        assert await waiter is None
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_disposed_debouncer_never_runs(self):
        recorder = Recorder()
        debounced = Debouncer(recorder, delay=0)
        debounced.dispose()
        assert await debounced("late") is None
        await asyncio.sleep(0.01)
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_exception_reaches_every_waiter(self):
        async def explode(value: str) -> None:
            raise ValueError(value)

        debounced = Debouncer(explode, delay=0)
        first, second = debounced("a"), debounced("b")
        for waiter in (first, second):
            with pytest.raises(ValueError, match="b"):
                await waiter
