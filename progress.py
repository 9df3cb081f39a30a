"""
Progress sinks for the sampler.

A sink is any callable taking an integer percentage. Delivery is best-effort:
a sink that raises is logged and the run carries on.
"""

from __future__ import annotations
import queue
from typing import Callable, List, Optional

from tqdm import tqdm

from logging_config import get_logger

logger = get_logger(__name__)

ProgressSink = Callable[[int], None]


def notify(sink: Optional[ProgressSink], percentage: int) -> None:
    if sink is None:
        return
    try:
        sink(percentage)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Progress notification %d%% dropped: %s", percentage, exc)


class ProgressChannel:
    """Bounded, non-blocking hand-off of progress values to another thread.

    Repeated percentages are coalesced. When the queue is full the oldest
    pending value is discarded, so the latest value (finally 100) always gets
    through.
    """

    def __init__(self, maxsize: int = 128):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._last: Optional[int] = None

    def __call__(self, percentage: int) -> None:
        if percentage == self._last:
            return
        self._last = percentage
        while True:
            try:
                self._queue.put_nowait(percentage)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def get(self, timeout: Optional[float] = None) -> int:
        return self._queue.get(timeout=timeout)

    def drain(self) -> List[int]:
        values = []
        while True:
            try:
                values.append(self._queue.get_nowait())
            except queue.Empty:
                return values


class TqdmProgress:
    """Show percentages on a tqdm bar."""

    def __init__(self, desc: str = "Sampling", **kwargs):
        self.bar = tqdm(total=100, desc=desc, unit="%", **kwargs)

    def __call__(self, percentage: int) -> None:
        step = percentage - self.bar.n
        if step > 0:
            self.bar.update(step)

    def close(self) -> None:
        self.bar.close()

    def __enter__(self) -> TqdmProgress:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
