"""
Asynchronous command boundary around the sampler.

A UI (or the CLI) edits the current settings through set_quantum_numbers /
set_sample_size and awaits calc(). Each calc() works on a snapshot taken when
it starts and runs in a worker thread, so the event loop stays responsive.
"""

from __future__ import annotations
import asyncio
import threading
from typing import Optional

from config import ConfigStore, QuantumNumbers, SampleRequest, SamplerConfig
from hydrogenHandler import SampleSet, sample_orbital_cloud
from logging_config import get_logger
from progress import ProgressSink

logger = get_logger(__name__)


class OrbitalService:
    def __init__(self, store: Optional[ConfigStore] = None, sampling: Optional[SamplerConfig] = None):
        self.store = store or ConfigStore()
        self.sampling = sampling or SamplerConfig()
        self._runs: set[threading.Event] = set()
        self._runs_lock = threading.Lock()

    def set_quantum_numbers(self, quantum_numbers: QuantumNumbers) -> None:
        self.store.set_quantum_numbers(quantum_numbers)

    def set_sample_size(self, sample_size: int) -> None:
        self.store.set_sample_size(sample_size)

    def get_configuration(self) -> SampleRequest:
        return self.store.snapshot()

    async def calc(self, progress: Optional[ProgressSink] = None) -> SampleSet:
        request = self.get_configuration()
        cancel = threading.Event()
        with self._runs_lock:
            self._runs.add(cancel)
        try:
            return await asyncio.to_thread(
                sample_orbital_cloud, request, progress, cancel=cancel, **self.sampling.to_kwargs()
            )
        except asyncio.CancelledError:
            # the worker thread outlives the awaiting task unless told to stop
            cancel.set()
            raise
        finally:
            with self._runs_lock:
                self._runs.discard(cancel)

    def cancel(self) -> int:
        """Ask every in-flight run to stop; returns how many were signalled."""
        with self._runs_lock:
            runs = list(self._runs)
        for event in runs:
            event.set()
        if runs:
            logger.info("Cancelling %d sampling run(s)", len(runs))
        return len(runs)
