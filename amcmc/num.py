# amcmc/num.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Numerical layer for amcmc.

This module gathers the dense linear-algebra primitives and the random
number generator used by the chains. Everything is built on NumPy and
SciPy.

Cholesky decomposition
----------------------
`cholesky` never raises on a matrix that is not positive definite. It returns
a `CholeskyResult`, a tagged result with `ok` set to False and `factor` set
to None, so that callers handle the failure branch explicitly instead of
testing for a sentinel matrix.

Random numbers
--------------
`RandomGenerator` wraps a `numpy.random.Generator` and exposes the two draws
the samplers need: `uniform01()` and `standard_normal_vector(n)`.
"""

import builtins
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy
from numpy import (
    asarray,
    copy,
    zeros,
    eye,
    diag,
    sqrt,
    exp,
    log,
    isnan,
    isfinite,
    allclose,
    empty,
    sum,
    mean,
    cov,
    inf,
)
import scipy.linalg

from amcmc.config import get_config

ArrayLike = Any

_np_dtype = numpy.float64

_LINALG_ERROR_KEYWORDS = (
    "singular",
    "not positive definite",
    "not positive-definite",
    "leading minor",
    "cholesky",
    "lapack",
    "array must not contain infs or nans",
)


def _is_linalg_exception(exc: Exception) -> bool:
    if isinstance(exc, numpy.linalg.LinAlgError):
        return True
    msg = str(exc).lower()
    return builtins.any(keyword in msg for keyword in _LINALG_ERROR_KEYWORDS)


# ..................................................


def array(x, dtype=None):
    return numpy.array(x, dtype=_np_dtype if dtype is None else dtype)


def as_vector(x, dim: Optional[int] = None) -> numpy.ndarray:
    """Return x as a float vector, checking its length when dim is given."""
    v = numpy.asarray(x, dtype=_np_dtype).reshape(-1)
    if dim is not None and v.shape[0] != dim:
        raise ValueError(f"expected a vector of length {dim}, got {v.shape[0]}.")
    return v


def as_covariance_matrix(c, dim: int) -> numpy.ndarray:
    """Return c as a (dim, dim) float matrix. A scalar is accepted for dim == 1."""
    m = numpy.asarray(c, dtype=_np_dtype)
    if m.ndim == 0 or m.size == 1:
        if dim != 1:
            raise ValueError("a scalar covariance is only valid in dimension 1.")
        return m.reshape(1, 1).copy()
    if m.shape != (dim, dim):
        raise ValueError(f"covariance must have shape ({dim}, {dim}), got {m.shape}.")
    return m.copy()


def outer(x, y=None):
    """Outer product x y^T (x x^T when y is None)."""
    x = numpy.asarray(x, dtype=_np_dtype).reshape(-1)
    y = x if y is None else numpy.asarray(y, dtype=_np_dtype).reshape(-1)
    return numpy.outer(x, y)


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(numpy.floor(x + 0.5))


# ..................................................


@dataclass(frozen=True)
class CholeskyResult:
    """Outcome of a Cholesky decomposition.

    Attributes
    ----------
    ok : bool
        True if the decomposition succeeded.
    factor : ndarray or None
        Lower-triangular factor L with L L^T = A when ok is True, else None.
    """

    ok: bool
    factor: Optional[numpy.ndarray] = None

    @classmethod
    def success(cls, factor):
        return cls(ok=True, factor=factor)

    @classmethod
    def failure(cls):
        return cls(ok=False, factor=None)


def cholesky(A) -> CholeskyResult:
    """Lower Cholesky factor of A, as a tagged result.

    Linear-algebra failures (non positive definite input, infs or nans) give
    ``CholeskyResult.failure()``; any other exception propagates.
    """
    A = numpy.asarray(A, dtype=_np_dtype)
    try:
        L = scipy.linalg.cholesky(A, lower=True, check_finite=True)
    except (numpy.linalg.LinAlgError, ValueError) as exc:
        if _is_linalg_exception(exc):
            return CholeskyResult.failure()
        raise
    return CholeskyResult.success(L)


# ..................................................


class RandomGenerator:
    """Seeded source of uniform and standard normal draws.

    Parameters
    ----------
    seed : int or numpy.random.Generator, optional
        Seed of the underlying PCG64 generator. If None, the default seed of
        the package configuration is used.
    """

    def __init__(self, seed: Union[int, numpy.random.Generator, None] = None):
        if isinstance(seed, numpy.random.Generator):
            self._rng = seed
            self.seed = None
        else:
            self.seed = get_config().seed if seed is None else seed
            self._rng = numpy.random.default_rng(seed=self.seed)

    def __repr__(self):
        return f"RandomGenerator(seed={self.seed!r})"

    def uniform01(self) -> float:
        """One draw from U[0, 1)."""
        return float(self._rng.random())

    def standard_normal_vector(self, n: int) -> numpy.ndarray:
        """n iid N(0, 1) draws."""
        return self._rng.standard_normal(n).astype(_np_dtype, copy=False)


def make_rng(rng=None) -> RandomGenerator:
    """Coerce None, an integer seed or a generator into a RandomGenerator."""
    if isinstance(rng, RandomGenerator):
        return rng
    return RandomGenerator(rng)
