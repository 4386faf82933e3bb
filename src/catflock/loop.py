from __future__ import annotations

import asyncio
import inspect
from time import perf_counter
from typing import Any, Awaitable, Callable, Optional, Union

FrameCallback = Callable[[float], Union[None, Awaitable[Any]]]


class RenderLoop:
    """Calls `callback` once per frame with the elapsed milliseconds, capped at `max_delta`.

    ``stop()`` only sets a flag; the frame being processed always finishes and
    no further frame is started.
    """

    def __init__(
        self,
        callback: FrameCallback,
        max_delta: float,
        frame_interval: float = 16.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if max_delta <= 0:
            raise ValueError(f"max_delta must be positive, got {max_delta}")
        self._callback = callback
        self._max_delta = max_delta
        self._frame_interval = max(0.0, frame_interval)
        self._clock = clock if clock is not None else perf_counter
        self._shutdown = True
        self.frames = 0

    @property
    def running(self) -> bool:
        return not self._shutdown

    @property
    def max_delta(self) -> float:
        return self._max_delta

    def clamp(self, elapsed: float) -> float:
        return max(0.0, min(elapsed, self._max_delta))

    def tick(self, elapsed: float) -> None:
        """Run one frame synchronously, for drivers that own their own clock."""
        self._callback(self.clamp(elapsed))
        self.frames += 1

    async def run(self) -> None:
        self._shutdown = False
        last_frame = self._clock()
        while not self._shutdown:
            await asyncio.sleep(self._frame_interval / 1000.0)
            if self._shutdown:
                break
            this_frame = self._clock()
            result = self._callback(self.clamp((this_frame - last_frame) * 1000.0))
            if inspect.isawaitable(result):
                await result
            self.frames += 1
            last_frame = this_frame

    def stop(self) -> None:
        self._shutdown = True
