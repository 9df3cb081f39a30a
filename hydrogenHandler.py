import json
import math
import time
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pyvista as pv

from config import DEFAULT_BATCH_SIZE, SampleRequest
from errors import InvalidSampleSize, ProbabilityOverflow, SamplingBudgetExceeded, SamplingCancelled
from handler import orbitalLabel, psi, radialExtent, validateQuantumNumbers, wrapPhase
from logging_config import get_logger
from progress import notify

logger = get_logger(__name__)


@dataclass(frozen=True)
class SpatialSample:
    position: tuple
    phase: float


class SampleSet:
    """Accepted samples of one run, in order of acceptance. Read-only."""

    def __init__(self, positions, phases):
        self.positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        self.phases = np.asarray(phases, dtype=float).reshape(-1)
        if len(self.positions) != len(self.phases):
            raise ValueError("positions and phases must have the same length")
        self.positions.flags.writeable = False
        self.phases.flags.writeable = False

    @classmethod
    def empty(cls):
        return cls(np.empty((0, 3)), np.empty(0))

    def __len__(self):
        return len(self.phases)

    def __getitem__(self, i):
        if isinstance(i, slice):
            return SampleSet(self.positions[i], self.phases[i])
        return SpatialSample(tuple(self.positions[i].tolist()), float(self.phases[i]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def radii(self):
        return np.linalg.norm(self.positions, axis=1)

    def to_dict(self):
        return {
            "points": [
                {"position": pos, "phase": phase}
                for pos, phase in zip(self.positions.tolist(), self.phases.tolist())
            ]
        }


def propose_candidates(rng, count, r_max):
    """Spherical candidates: r = r_max * u^(1/3), cos(theta) uniform on [-1, 1], phi uniform."""
    u = rng.random((3, count))
    r = r_max * u[0] ** (1 / 3)
    theta = np.arccos(2 * u[1] - 1)
    phi = u[2] * 2 * math.pi
    return r, theta, phi


def to_cartesian(r, theta, phi):
    sin_theta = np.sin(theta)
    return np.column_stack((r * sin_theta * np.cos(phi), r * sin_theta * np.sin(phi), r * np.cos(theta)))


def sample_orbital_cloud(request: SampleRequest, progress=None, *, rng=None, seed=None,
                         batch_size=DEFAULT_BATCH_SIZE, max_attempts=None, timeout=None,
                         cancel=None, clamp=False):
    """
    Rejection-sample `request.sample_size` points with density |psi_nlm|^2.

    Candidates are proposed `batch_size` at a time and tested in proposal order;
    each is kept with probability |psi|^2. After every acceptance `progress`
    is called with accepted*100 // sample_size.

    Raises InvalidQuantumNumbers / InvalidSampleSize for bad input,
    ProbabilityOverflow if |psi|^2 > 1 is met and clamp is False,
    SamplingCancelled when `cancel` (a threading.Event) is set, and
    SamplingBudgetExceeded once `max_attempts` candidates or `timeout`
    seconds are used up.
    """
    qn = validateQuantumNumbers(request.quantum_numbers)
    size = request.sample_size
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size < 0:
        raise InvalidSampleSize(f"sample_size must be a non-negative integer, got {size!r}")
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    label = orbitalLabel(qn)
    if size == 0:
        logger.info("Nothing to sample for %s: sample size is 0", label)
        return SampleSet.empty()

    rng = rng if rng is not None else np.random.default_rng(seed)
    r_max = radialExtent(qn.n)
    logger.info("Sampling %d points for %s within r_max=%.1f", size, label, r_max)

    positions, phases = [], []
    accepted = attempts = 0
    clamped = False
    start = time.monotonic()

    while accepted < size:
        if cancel is not None and cancel.is_set():
            raise SamplingCancelled(
                f"Sampling cancelled after {accepted}/{size} samples", accepted, attempts)
        if max_attempts is not None and attempts >= max_attempts:
            raise SamplingBudgetExceeded(
                f"Gave up after {attempts} candidates with {accepted}/{size} samples accepted",
                accepted, attempts)
        if timeout is not None and time.monotonic() - start > timeout:
            raise SamplingBudgetExceeded(
                f"Timed out after {timeout:g}s with {accepted}/{size} samples accepted",
                accepted, attempts)

        count = batch_size if max_attempts is None else min(batch_size, max_attempts - attempts)
        r, theta, phi = propose_candidates(rng, count, r_max)
        wave = psi(r, theta, phi, qn)
        prob = wave.real ** 2 + wave.imag ** 2

        # u lies in [0, 1), so u < p accepts any p >= 1
        over = np.flatnonzero(prob > 1)
        limit = int(over[0]) if over.size and not clamp else count
        hits = np.flatnonzero(rng.random(count)[:limit] < prob[:limit])[: size - accepted]
        done = hits.size > 0 and accepted + hits.size == size
        used = int(hits[-1]) + 1 if done else limit
        attempts += used

        if clamp and not clamped and over.size and over[0] < used:
            first = int(over[0])
            logger.warning("Clamping |psi|^2 = %.4g at r = %.4g to 1", prob[first], r[first])
            clamped = True

        if hits.size:
            positions.append(to_cartesian(r[hits], theta[hits], phi[hits]))
            phases.append(wrapPhase(np.angle(wave[hits])))
            if progress is not None:
                for n_done in range(accepted + 1, accepted + hits.size + 1):
                    notify(progress, n_done * 100 // size)
            accepted += hits.size

        if not done and limit < count:
            raise ProbabilityOverflow(float(prob[limit]), float(r[limit]))

        logger.debug("Batch of %d: %d accepted, %d/%d total", count, hits.size, accepted, size)

    elapsed = time.monotonic() - start
    logger.info("Accepted %d of %d candidates (rate %.3g) in %.2f s",
                accepted, attempts, accepted / attempts, elapsed)
    return SampleSet(np.concatenate(positions), np.concatenate(phases))


def phase_colors(phases):
    """RGB (uint8) per phase: hue (phase + pi) / 2pi at full saturation and lightness 0.5."""
    hue = (np.asarray(phases, dtype=float) + np.pi) / (2 * np.pi)
    channels = []
    for offset in (0, 8, 4):
        k = (offset + hue * 12) % 12
        channels.append(0.5 - 0.5 * np.clip(np.minimum(k - 3, 9 - k), -1, 1))
    return np.round(np.column_stack(channels) * 255).astype(np.uint8)


def save_orbital_cloud(samples: SampleSet, request: SampleRequest, path):
    """Dump the cloud as JSON: {n, l, ml, points: [{position, phase}, ...]}."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {**request.quantum_numbers.to_dict(), **samples.to_dict()}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f)
    logger.info("Saved %d samples to %s", len(samples), path)
    return path


def show_orbital_cloud_pyvista(samples: SampleSet, request: SampleRequest):
    """Display the sampled cloud, coloured by phase, with the orbital name overlaid."""
    qn = request.quantum_numbers
    point_cloud = pv.PolyData(samples.positions)
    point_cloud.point_data["phase"] = phase_colors(samples.phases)
    plotter = pv.Plotter()
    plotter.add_mesh(point_cloud, scalars="phase", rgb=True, point_size=3, render_points_as_spheres=True)
    plotter.show_axes()
    plotter.background_color = 'black'
    orbital_def = (
        f"Hydrogen\n"
        f"{orbitalLabel(qn)}, points={len(samples)}\n"
        "ψₙₗₘ(r,θ,φ) = Rₙₗ(r)·Yₗₘ(θ,φ)"
    )
    plotter.add_text(orbital_def, position='upper_left', font_size=13, color='white')
    plotter.show(title=f"Probability Cloud of Hydrogen {orbitalLabel(qn)} - AtomCloud")
