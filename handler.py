import math
import numpy as np
from scipy.special import gamma

from config import QuantumNumbers
from errors import InvalidQuantumNumbers
from polynomials import assoc_laguerre, assoc_legendre

SUBSHELLS = "spdfghiklmnoqrtuvwxyz"


def validateQuantumNumbers(qn: QuantumNumbers) -> QuantumNumbers:
    for name in ("n", "l", "ml"):
        value = getattr(qn, name)
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidQuantumNumbers(f"Quantum number {name} must be an integer, got {value!r}")
    if qn.n < 1:
        raise InvalidQuantumNumbers(f"Principal quantum number n={qn.n} must be at least 1.")
    if not 0 <= qn.l < qn.n:
        raise InvalidQuantumNumbers(
            f"Azimuthal quantum number l={qn.l} incompatible with n={qn.n}. "
            "Remember 0 <= l <= n-1."
        )
    if abs(qn.ml) > qn.l:
        raise InvalidQuantumNumbers(
            f"Magnetic quantum number ml={qn.ml} incompatible with l={qn.l}. "
            "Remember -l <= ml <= l."
        )
    return qn


def radialNorm(n, l):
    n = np.float64(n)
    return np.sqrt((2 / n) ** 3 * gamma(n - l) / (2 * n * gamma(n + l + 1)))


def angularNorm(l, ml):
    m = abs(ml)
    return np.sqrt((2 * l + 1) / (4 * math.pi) * gamma(l - m + 1) / gamma(l + m + 1))


def radialPart(r, n, l):
    """R_nl(r) in Bohr radii, normalized."""
    rho = 2 * np.asarray(r, dtype=float) / n
    return radialNorm(n, l) * np.exp(-rho / 2) * rho ** l * assoc_laguerre(n - l - 1, 2 * l + 1, rho)


def psi(r, theta, phi, quantum_numbers: QuantumNumbers):
    """
    Complex hydrogen amplitude psi_nlm(r, theta, phi) = R_nl(r) * Y_l^ml(theta, phi).

    Accepts scalars or broadcastable arrays. Quantum numbers are not checked here;
    n=0, l>=n or |ml|>l give non-finite or meaningless values.
    """
    n, l, ml = quantum_numbers.n, quantum_numbers.l, quantum_numbers.ml
    phase = np.exp(1j * ml * np.asarray(phi, dtype=float))
    angular = angularNorm(l, ml) * assoc_legendre(l, abs(ml), np.cos(theta))
    return phase * (radialPart(r, n, l) * angular)


def probabilityDensity(r, theta, phi, quantum_numbers: QuantumNumbers):
    return np.abs(psi(r, theta, phi, quantum_numbers)) ** 2


def wrapPhase(phase):
    """Fold numpy.angle output from [-pi, pi] into (-pi, pi]."""
    phase = np.asarray(phase, dtype=float)
    return np.where(phase <= -np.pi, np.pi, phase)[()]


def radialExtent(n):
    """Radius of the proposal ball, generous enough to hold the whole orbital."""
    return 10.0 * n * n


def orbitalLabel(qn: QuantumNumbers) -> str:
    subshell = SUBSHELLS[qn.l] if 0 <= qn.l < len(SUBSHELLS) else f"[l={qn.l}]"
    return f"{qn.n}{subshell} (ml={qn.ml})"
