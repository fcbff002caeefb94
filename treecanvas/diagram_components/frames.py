import logging
from itertools import count
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]


class FrameLoop:
    """Single-threaded stand-in for animation-frame callbacks.

    Callbacks requested while a frame is running are deferred to the next frame,
    so a task that re-requests itself advances exactly one step per frame.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._handles = count(1)
        self.frame = 0

    @property
    def idle(self) -> bool:
        return not self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._pending.pop(handle, None)

    def clear(self) -> None:
        self._pending.clear()

    def run_frame(self) -> int:
        batch = self._pending
        self._pending = {}
        self.frame += 1
        for callback in batch.values():
            callback()
        return len(batch)

    def run_until_idle(self, max_frames: Optional[int] = None) -> int:
        frames = 0
        while self._pending:
            if max_frames is not None and frames >= max_frames:
                logger.debug("Frame loop stopped after %d frames with %d pending", frames, len(self._pending))
                break
            self.run_frame()
            frames += 1
        return frames
