"""Error kinds raised by the orbital sampler."""


class OrbitalError(Exception):
    """Base class for all sampler failures."""


class InvalidQuantumNumbers(OrbitalError, ValueError):
    """Quantum numbers outside 1 <= n, 0 <= l < n, |ml| <= l."""


class InvalidSampleSize(OrbitalError, ValueError):
    """Sample size that is negative or not an integer."""


class ProbabilityOverflow(OrbitalError):
    """A squared amplitude above 1 was met, so it cannot be used as an acceptance probability."""

    def __init__(self, value: float, r: float):
        super().__init__(
            f"|psi|^2 = {value:.4g} at r = {r:.4g} exceeds 1; "
            "pass clamp=True to clamp the acceptance probability"
        )
        self.value = value
        self.r = r


class SamplingInterrupted(OrbitalError):
    """The run stopped before `sample_size` samples were accepted."""

    def __init__(self, message: str, accepted: int, attempts: int):
        super().__init__(message)
        self.accepted = accepted
        self.attempts = attempts


class SamplingCancelled(SamplingInterrupted):
    pass


class SamplingBudgetExceeded(SamplingInterrupted):
    pass
