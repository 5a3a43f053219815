# amcmc/target.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Target distributions.

A target is anything with an integer attribute ``dim`` and a method
``log_density(x)`` returning the log of an (unnormalized) density at a point
x of shape (dim,). Points outside the support give ``-inf``; NaN is never a
valid return value.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import numpy as np

from amcmc.errors import InvalidArgument


@runtime_checkable
class TargetDistribution(Protocol):
    dim: int

    def log_density(self, x: np.ndarray) -> float: ...


class LogDensityTarget:
    """Wrap a plain log-density callable into a target.

    Parameters
    ----------
    log_density : callable
        Function x -> log p(x), x of shape (dim,).
    dim : int
        Dimension of the sample space.
    """

    def __init__(self, log_density: Callable[[np.ndarray], float], dim: int):
        if not callable(log_density):
            raise InvalidArgument("log_density must be callable.")
        if int(dim) < 1:
            raise InvalidArgument("dim must be a positive integer.")
        self._log_density = log_density
        self.dim = int(dim)

    def __repr__(self):
        return f"LogDensityTarget(dim={self.dim})"

    def log_density(self, x: np.ndarray) -> float:
        return float(self._log_density(x))
