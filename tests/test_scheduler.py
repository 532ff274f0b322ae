"""Tests for the debounced flush scheduler."""

import asyncio

import pytest

from simple_cache.scheduler import DebouncedFlusher


class FlushRecorder:
    """Flush callback that records the state it saw and checks for overlap."""

    def __init__(self, duration: float = 0.0):
        self.duration = duration
        self.state = 0
        self.seen: list[int] = []
        self.active = 0
        self.max_active = 0

    async def __call__(self) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        state = self.state
        try:
            if self.duration:
                await asyncio.sleep(self.duration)
            self.seen.append(state)
        finally:
            self.active -= 1


class TestDebouncedFlusher:
    """Tests for DebouncedFlusher class."""

    @pytest.mark.asyncio
    async def test_burst_produces_one_flush(self) -> None:
        """Test that N schedules inside the window flush exactly once."""
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=0.05)

        for _ in range(20):
            flusher.schedule()
        assert flusher.pending

        await asyncio.sleep(0.2)

        assert recorder.seen == [0]
        assert flusher.flush_count == 1
        assert not flusher.pending

    @pytest.mark.asyncio
    async def test_flush_sees_current_state(self) -> None:
        """Test that the flush uses state at fire time, not schedule time."""
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=0.05)

        recorder.state = 1
        flusher.schedule()
        recorder.state = 2

        await asyncio.sleep(0.2)

        assert recorder.seen == [2]

    @pytest.mark.asyncio
    async def test_reschedule_resets_timer(self) -> None:
        """Test that each schedule pushes the flush back by the full delay."""
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=0.1)

        flusher.schedule()
        await asyncio.sleep(0.06)
        flusher.schedule()
        await asyncio.sleep(0.06)

        assert recorder.seen == []

        await asyncio.sleep(0.15)
        assert recorder.seen == [0]

    @pytest.mark.asyncio
    async def test_separate_bursts_flush_separately(self) -> None:
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=0.02)

        flusher.schedule()
        await asyncio.sleep(0.1)
        recorder.state = 1
        flusher.schedule()
        await asyncio.sleep(0.1)

        assert recorder.seen == [0, 1]

    @pytest.mark.asyncio
    async def test_flushes_never_overlap(self) -> None:
        """Test that a flush scheduled during a running flush waits for it."""
        recorder = FlushRecorder(duration=0.1)
        flusher = DebouncedFlusher(recorder, delay=0.01)

        flusher.schedule()
        await asyncio.sleep(0.03)  # first flush is now running
        recorder.state = 1
        flusher.schedule()

        await asyncio.sleep(0.4)

        assert recorder.max_active == 1
        assert recorder.seen == [0, 1]

    @pytest.mark.asyncio
    async def test_flush_now(self) -> None:
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=10)

        flusher.schedule()
        await flusher.flush_now()

        assert recorder.seen == [0]
        assert not flusher.pending

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=0.01)

        flusher.schedule()
        flusher.cancel()
        await asyncio.sleep(0.05)

        assert recorder.seen == []

    @pytest.mark.asyncio
    async def test_drain_runs_pending_flush(self) -> None:
        recorder = FlushRecorder()
        flusher = DebouncedFlusher(recorder, delay=10)

        flusher.schedule()
        await flusher.drain()

        assert recorder.seen == [0]

    @pytest.mark.asyncio
    async def test_drain_waits_for_inflight_flush(self) -> None:
        recorder = FlushRecorder(duration=0.05)
        flusher = DebouncedFlusher(recorder, delay=0.01)

        flusher.schedule()
        await asyncio.sleep(0.02)
        await flusher.drain()

        assert recorder.seen == [0]
        assert recorder.active == 0

    @pytest.mark.asyncio
    async def test_drain_without_work(self) -> None:
        flusher = DebouncedFlusher(FlushRecorder(), delay=0.01)
        await flusher.drain()
        assert flusher.flush_count == 0

    @pytest.mark.asyncio
    async def test_flush_error_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a failing flush does not raise."""

        async def failing_flush() -> None:
            raise OSError("Read-only file system")

        flusher = DebouncedFlusher(failing_flush, delay=0.01, name="test snapshot")

        with caplog.at_level("WARNING"):
            await flusher.flush_now()

        assert flusher.flush_count == 0
        assert "Failed to flush test snapshot" in caplog.text
