import asyncio

import pytest

from config import ConfigStore, QuantumNumbers, SampleRequest, SamplerConfig
from errors import InvalidQuantumNumbers, InvalidSampleSize, SamplingCancelled
from progress import ProgressChannel
from service import OrbitalService


def make_service(size, batch_size=65536):
    store = ConfigStore(SampleRequest(QuantumNumbers(1, 0, 0), size))
    return OrbitalService(store, SamplerConfig(seed=8, batch_size=batch_size))


def test_calc_returns_configured_count():
    service = make_service(40)
    channel = ProgressChannel()
    samples = asyncio.run(service.calc(progress=channel))
    assert len(samples) == 40
    assert channel.drain()[-1] == 100


def test_calc_uses_snapshot_taken_at_start():
    service = make_service(60)

    def reconfigure(_):
        service.set_sample_size(5)
        service.set_quantum_numbers(QuantumNumbers(3, 1, 0))

    samples = asyncio.run(service.calc(progress=reconfigure))
    assert len(samples) == 60
    assert service.get_configuration() == SampleRequest(QuantumNumbers(3, 1, 0), 5)


def test_cancel_stops_in_flight_run():
    service = make_service(1000, batch_size=2048)

    def cancel_on_first(_):
        service.cancel()

    with pytest.raises(SamplingCancelled):
        asyncio.run(service.calc(progress=cancel_on_first))
    assert service.cancel() == 0


def test_calc_surfaces_validation_errors():
    service = make_service(10)
    service.set_quantum_numbers(QuantumNumbers(2, 3, 0))
    with pytest.raises(InvalidQuantumNumbers):
        asyncio.run(service.calc())


def test_event_loop_stays_responsive():
    service = make_service(200)

    async def run():
        ticks = 0
        task = asyncio.create_task(service.calc())
        while not task.done():
            ticks += 1
            await asyncio.sleep(0.001)
        return ticks, await task

    ticks, samples = asyncio.run(run())
    assert len(samples) == 200
    assert ticks >= 1


def test_fractional_sample_size_is_rejected_and_previous_kept():
    service = make_service(10)
    with pytest.raises(InvalidSampleSize):
        service.set_sample_size(2.5)
    assert service.get_configuration().sample_size == 10
    samples = asyncio.run(service.calc())
    assert len(samples) == 10
