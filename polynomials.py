import numpy as np


def assoc_laguerre(n, k, x):
    """Generalized Laguerre polynomial L_n^(k)(x) by the three-term recurrence.

    `x` may be a float or a numpy array; the result has the same shape.
    """
    x = np.asarray(x, dtype=float)
    l0 = np.ones_like(x)
    if n == 0:
        return l0[()]

    l1 = 1.0 + k - x
    if n == 1:
        return l1[()]

    for i in range(1, n):
        l0, l1 = l1, ((2 * i + k + 1 - x) * l1 - (i + k) * l0) / (i + 1)
    return l1[()]


def assoc_legendre(l, m, x):
    """Associated Legendre function P_l^m(x) for 0 <= m <= l, unnormalized.

    Seeds P_m^m with the (-1)^m (2m-1)!! (1-x^2)^(m/2) product, then climbs
    in degree with the standard upward recurrence. The Condon-Shortley sign
    is whatever the seed product gives, so values match scipy's lpmv.
    """
    x = np.asarray(x, dtype=float)
    pmm = np.ones_like(x)
    if m > 0:
        somx2 = np.sqrt((1.0 - x) * (1.0 + x))
        fact = 1.0
        for _ in range(m):
            pmm = -fact * somx2 * pmm
            fact += 2.0

    if l == m:
        return pmm[()]

    pmmp1 = x * (2 * m + 1) * pmm
    if l == m + 1:
        return pmmp1[()]

    for ll in range(m + 2, l + 1):
        pll = (x * (2 * ll - 1) * pmmp1 - (ll + m - 1) * pmm) / (ll - m)
        pmm, pmmp1 = pmmp1, pll
    return pmmp1[()]
