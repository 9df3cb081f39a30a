"""
Configuration containers for orbital sampling.

QuantumNumbers and SampleRequest are frozen values; a SampleRequest is the
snapshot one sampling run works from. ConfigStore holds the mutable "current"
settings that a UI or CLI edits, and hands out snapshots.

A YAML file can seed the store:

    quantum_numbers: {n: 3, l: 2, ml: 1}
    sample_size: 20000
    sampling:
      batch_size: 65536
      max_attempts: null
      timeout: 120
      seed: 7
      clamp: false
"""

from __future__ import annotations
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from errors import InvalidQuantumNumbers, InvalidSampleSize
from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SAMPLE_SIZE = 100
DEFAULT_BATCH_SIZE = 65536


def as_integer(value, name, error=ValueError):
    """Integer form of a config value; integral floats and numeric strings pass, 2.5 does not."""
    if isinstance(value, bool):
        raise error(f"{name} must be an integer, got {value!r}")
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise error(f"{name} must be an integer, got {value!r}")


def as_optional_integer(value, name):
    return None if value is None else as_integer(value, name)


def as_optional_float(value, name):
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


@dataclass(frozen=True)
class QuantumNumbers:
    """Principal (n), azimuthal (l) and magnetic (ml) quantum numbers."""
    n: int = 1
    l: int = 0
    ml: int = 0

    @classmethod
    def from_params(cls, params: dict) -> QuantumNumbers:
        return cls(
            n=as_integer(params.get("n", 1), "n", InvalidQuantumNumbers),
            l=as_integer(params.get("l", 0), "l", InvalidQuantumNumbers),
            ml=as_integer(params.get("ml", params.get("m", 0)), "ml", InvalidQuantumNumbers),
        )

    def to_dict(self) -> dict:
        return {"n": self.n, "l": self.l, "ml": self.ml}


@dataclass(frozen=True)
class SampleRequest:
    quantum_numbers: QuantumNumbers = field(default_factory=QuantumNumbers)
    sample_size: int = DEFAULT_SAMPLE_SIZE


@dataclass
class SamplerConfig:
    """Tuning of the rejection sampler.

    Attributes
    ----------
    batch_size : int
        Candidates proposed per loop iteration.
    max_attempts : int, optional
        Give up after this many candidates.
    timeout : float, optional
        Give up after this many seconds.
    seed : int, optional
        Seed for numpy's default_rng.
    clamp : bool
        Clamp |psi|^2 > 1 to 1 instead of failing.
    """
    batch_size: int = DEFAULT_BATCH_SIZE
    max_attempts: Optional[int] = None
    timeout: Optional[float] = None
    seed: Optional[int] = None
    clamp: bool = False

    @classmethod
    def from_params(cls, params: dict) -> SamplerConfig:
        return cls(
            batch_size=as_integer(params.get("batch_size", DEFAULT_BATCH_SIZE), "batch_size"),
            max_attempts=as_optional_integer(params.get("max_attempts"), "max_attempts"),
            timeout=as_optional_float(params.get("timeout"), "timeout"),
            seed=as_optional_integer(params.get("seed"), "seed"),
            clamp=bool(params.get("clamp", False)),
        )

    def to_kwargs(self) -> dict:
        return {
            "batch_size": self.batch_size,
            "max_attempts": self.max_attempts,
            "timeout": self.timeout,
            "seed": self.seed,
            "clamp": self.clamp,
        }


@dataclass
class AppConfig:
    request: SampleRequest = field(default_factory=SampleRequest)
    sampling: SamplerConfig = field(default_factory=SamplerConfig)

    _KNOWN_KEYS = ("quantum_numbers", "sample_size", "sampling")

    @classmethod
    def from_params(cls, params: dict) -> AppConfig:
        for key in params:
            if key not in cls._KNOWN_KEYS:
                logger.warning("Ignoring unknown config key '%s'", key)
        request = SampleRequest(
            quantum_numbers=QuantumNumbers.from_params(params.get("quantum_numbers") or {}),
            sample_size=as_integer(params.get("sample_size", DEFAULT_SAMPLE_SIZE), "sample_size", InvalidSampleSize),
        )
        return cls(request=request, sampling=SamplerConfig.from_params(params.get("sampling") or {}))


def load_config(path: str | Path) -> AppConfig:
    """Read an AppConfig from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            params = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Could not parse config file {path}: {exc}") from exc
    if not isinstance(params, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(params).__name__}")

    logger.info("Loaded configuration from %s", path)
    return AppConfig.from_params(params)


class ConfigStore:
    """Current quantum numbers and sample size, safe to edit from any thread.

    snapshot() copies the values under the lock and releases it at once, so
    setters never wait on a sampling run and a run never sees later edits.
    """

    def __init__(self, request: Optional[SampleRequest] = None):
        self._lock = threading.Lock()
        self._request = request or SampleRequest()

    def set_quantum_numbers(self, quantum_numbers: QuantumNumbers) -> None:
        with self._lock:
            self._request = replace(self._request, quantum_numbers=quantum_numbers)
        logger.debug("Quantum numbers set to %s", quantum_numbers)

    def set_sample_size(self, sample_size: int) -> None:
        sample_size = as_integer(sample_size, "sample_size", InvalidSampleSize)
        with self._lock:
            self._request = replace(self._request, sample_size=sample_size)
        logger.debug("Sample size set to %d", sample_size)

    def snapshot(self) -> SampleRequest:
        with self._lock:
            return self._request
