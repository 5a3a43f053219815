# amcmc/mcmc/proposals.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Proposal strategies for random-walk Metropolis-Hastings.

A proposal strategy tells a chain which Cholesky factor L to use at the next
step; the chain then proposes y = x + L z with z ~ N(0, I).

FixedProposal
    Homogeneous random walk with a fixed covariance, factored once.
AdaptiveProposal
    Haario et al. global adaptive scaling: after 2 dim + 1 homogeneous steps,
    the proposal covariance is (2.38^2 / dim) times the running covariance of
    the chain. When the scaled covariance cannot be factored, the previous
    working factor is kept.
MixtureProposal
    Roberts and Rosenthal mixture: at each adaptive step, with probability
    probability_safety the fixed "safety" factor is used, otherwise the
    adaptive one. A failed factorization falls back to the safety factor.

Factors are never modified in place: a new factor replaces the working one,
so a copy of a strategy can share them safely.

References
----------
[1] H. Haario, E. Saksman and J. Tamminen (2001). "An adaptive Metropolis
    algorithm." Bernoulli 7(2):223-242.
[2] G. O. Roberts and J. S. Rosenthal (2009). "Examples of adaptive MCMC."
    Journal of Computational and Graphical Statistics 18(2):349-367.
[3] P. Giordani and R. Kohn (2010). "Adaptive independent Metropolis-Hastings
    by fast estimation of mixtures of normals." Journal of Computational and
    Graphical Statistics 19(2):243-259.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

import amcmc.num as anp
from amcmc.config import get_logger
from amcmc.errors import InvalidArgument, NumericalError

_logger = get_logger()

OPTIMAL_SCALING = 2.38**2


class Proposal(ABC):
    """Base class of proposal strategies."""

    dim: int

    @abstractmethod
    def cholesky_factor(self, chain) -> np.ndarray:
        """Cholesky factor of the proposal covariance for the next step of chain."""

    def current_factor(self) -> Optional[np.ndarray]:
        """Factor handed out at the last step, None if not tracked."""
        return None

    def copy(self) -> "Proposal":
        return copy.copy(self)


class FixedProposal(Proposal):
    """
    Random walk with a fixed proposal covariance.

    Parameters
    ----------
    covariance : array_like, shape (dim, dim), or scalar if dim == 1
        Proposal covariance. Must be positive definite.
    dim : int
        Dimension of the sample space.

    Raises
    ------
    NumericalError
        If the covariance is not positive definite.
    """

    def __init__(self, covariance, dim: int):
        self.dim = int(dim)
        try:
            self.covariance = anp.as_covariance_matrix(covariance, self.dim)
        except ValueError as exc:
            raise InvalidArgument(str(exc)) from exc
        result = anp.cholesky(self.covariance)
        if not result.ok:
            raise NumericalError(
                "the proposal covariance is not positive definite."
            )
        self.fixed_factor = result.factor

    def __repr__(self):
        return f"{type(self).__name__}(dim={self.dim})"

    def current_factor(self) -> np.ndarray:
        return self.fixed_factor

    def cholesky_factor(self, chain) -> np.ndarray:
        return self.fixed_factor


class AdaptiveProposal(FixedProposal):
    """
    Global adaptive scaling of the chain covariance.

    Parameters
    ----------
    covariance : array_like
        Proposal covariance of the homogeneous steps.
    dim : int
        Dimension of the sample space.
    scaling : float, optional
        Factor applied to the chain covariance. Defaults to 2.38^2 / dim.
    n_homogeneous_steps : int, optional
        Number of initial steps using the fixed covariance. Defaults to
        2 dim + 1.
    """

    def __init__(
        self,
        covariance,
        dim: int,
        scaling: Optional[float] = None,
        n_homogeneous_steps: Optional[int] = None,
    ):
        super().__init__(covariance, dim)
        self.scaling = OPTIMAL_SCALING / self.dim if scaling is None else float(scaling)
        if self.scaling <= 0.0:
            raise InvalidArgument("scaling must be positive.")
        if n_homogeneous_steps is None:
            n_homogeneous_steps = 2 * self.dim + 1
        self.n_homogeneous_steps = int(n_homogeneous_steps)
        if self.n_homogeneous_steps < 1:
            raise InvalidArgument("n_homogeneous_steps must be at least 1.")
        self.working_factor = self.fixed_factor
        self.n_fallbacks = 0

    def current_factor(self) -> np.ndarray:
        return self.working_factor

    def cholesky_factor(self, chain) -> np.ndarray:
        if chain.n_step < self.n_homogeneous_steps:
            return self.fixed_factor
        return self.adaptive_factor(chain)

    def scaled_chain_factor(self, chain) -> anp.CholeskyResult:
        """Factor (scaling * chain covariance)."""
        return anp.cholesky(self.scaling * chain.get_chain_covariance())

    def _fallback_factor(self) -> np.ndarray:
        return self.working_factor

    def adaptive_factor(self, chain) -> np.ndarray:
        result = self.scaled_chain_factor(chain)
        if result.ok:
            self.working_factor = result.factor
        else:
            self.n_fallbacks += 1
            _logger.debug(
                "step %d: scaled chain covariance is not positive definite, "
                "using fallback proposal",
                chain.n_step + 1,
            )
            self.working_factor = self._fallback_factor()
        return self.working_factor


class MixtureProposal(AdaptiveProposal):
    """
    Mixture of a fixed safety proposal and the adaptive proposal.

    Parameters
    ----------
    covariance : array_like
        Covariance of the homogeneous steps and of the safety proposal.
    dim : int
        Dimension of the sample space.
    probability_safety : float, optional
        Probability of using the safety proposal at an adaptive step
        (default 0.05).
    scaling, n_homogeneous_steps :
        See AdaptiveProposal.

    Notes
    -----
    The mixture coin is drawn from the chain's generator only when
    0 < probability_safety < 1, so that probability_safety = 1 gives the
    same random stream as a fixed random walk.
    """

    def __init__(
        self,
        covariance,
        dim: int,
        probability_safety: float = 0.05,
        scaling: Optional[float] = None,
        n_homogeneous_steps: Optional[int] = None,
    ):
        super().__init__(covariance, dim, scaling, n_homogeneous_steps)
        self.safety_factor = self.fixed_factor.copy()
        self.set_probability_safety(probability_safety)
        self.n_safety_steps = 0

    def set_probability_safety(self, probability_safety: float) -> None:
        probability_safety = float(probability_safety)
        if not 0.0 <= probability_safety <= 1.0:
            raise InvalidArgument("probability_safety must be in [0, 1].")
        self.probability_safety = probability_safety

    def _use_safety(self, chain) -> bool:
        if self.probability_safety >= 1.0:
            return True
        if self.probability_safety <= 0.0:
            return False
        return chain.rng.uniform01() < self.probability_safety

    def _fallback_factor(self) -> np.ndarray:
        return self.safety_factor

    def adaptive_factor(self, chain) -> np.ndarray:
        if self._use_safety(chain):
            self.n_safety_steps += 1
            self.working_factor = self.safety_factor
            return self.working_factor
        return super().adaptive_factor(chain)
