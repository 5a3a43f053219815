# amcmc/mcmc/rwmh.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Random-walk Metropolis-Hastings chains.

RandomWalkMetropolisHastings
    Symmetric Gaussian random walk. The proposal covariance is given by a
    proposal strategy (see amcmc.mcmc.proposals); by default a fixed one.
AdaptiveRwmh
    Random walk with Haario global adaptive scaling.
MixtureAdaptiveRwmh
    Random walk mixing a fixed safety proposal with the adaptive one.

One step from x:
  z ~ N(0, I), y = x + L z,
  log_a = log p(y) - log p(x),
  a = min(1, exp(log_a))   (a = 0 if log_a is NaN, e.g. -inf - (-inf)),
  keep y with probability a, otherwise x.
"""

from __future__ import annotations

import math
import time
from typing import Optional

import numpy as np

from amcmc.config import get_logger
from amcmc.errors import InvalidArgument

from .chain import Chain, ChainOptions
from .proposals import AdaptiveProposal, FixedProposal, MixtureProposal, Proposal

_logger = get_logger()


def acceptance_probability(log_density_proposed: float, log_density_current: float) -> float:
    """min(1, exp(log_density_proposed - log_density_current)), 0 for NaN ratios."""
    log_a = log_density_proposed - log_density_current
    if math.isnan(log_a):
        return 0.0
    return math.exp(min(0.0, log_a))


class RandomWalkMetropolisHastings(Chain):
    """
    Random-walk Metropolis-Hastings with a Gaussian proposal.

    Parameters
    ----------
    target : TargetDistribution
        Target distribution.
    chain_length : int
        Total number of samples, the initial value included.
    proposal_covariance : array_like, optional
        Covariance of the random walk, shape (dim, dim) (a scalar when
        dim == 1). Ignored if ``proposal`` is given.
    rng : RandomGenerator, int or None, optional
        Source of random numbers, or a seed.
    options : ChainOptions, optional
        Run-time options.
    proposal : Proposal, optional
        Proposal strategy; defaults to FixedProposal(proposal_covariance).

    Raises
    ------
    NumericalError
        If proposal_covariance is not positive definite.
    """

    def __init__(
        self,
        target,
        chain_length: int,
        proposal_covariance=None,
        rng=None,
        options: Optional[ChainOptions] = None,
        proposal: Optional[Proposal] = None,
    ):
        super().__init__(target, chain_length, rng=rng, options=options)
        if proposal is None:
            if proposal_covariance is None:
                raise InvalidArgument(
                    "provide either proposal_covariance or proposal."
                )
            proposal = FixedProposal(proposal_covariance, self.dim)
        elif proposal.dim != self.dim:
            raise InvalidArgument(
                f"proposal has dimension {proposal.dim}, target has {self.dim}."
            )
        self.proposal = proposal
        self.last_accept_probability = None

    def _copy_state_from(self, chain: "RandomWalkMetropolisHastings") -> None:
        self.proposal = chain.proposal.copy()
        self.last_accept_probability = chain.last_accept_probability

    def step(self) -> None:
        """Do one Metropolis-Hastings step."""
        self._check_not_full()
        L = self.proposal.cholesky_factor(self)

        current = self._chain_array[self._n_step].copy()
        z = self.rng.standard_normal_vector(self.dim)
        proposed = current + L @ z

        log_density_current = self._current_log_density()
        log_density_proposed = float(self.target.log_density(proposed.copy()))
        accept_probability = acceptance_probability(
            log_density_proposed, log_density_current
        )

        if self.accept_step(accept_probability, current, proposed):
            self._log_density_current = log_density_proposed
        self.last_accept_probability = accept_probability
        self.update_statistics()

    def run(self) -> None:
        """Do steps until the chain is full (chain_length - 1 steps for a new chain)."""
        start_time = time.time()
        start_step = self.n_step
        if self.options.show_progress:
            _logger.info(
                "Sampling with %s: dim = %d, steps = %d",
                type(self).__name__,
                self.dim,
                self.n_remaining_steps,
            )
        while not self.is_complete:
            self.step()
            self._log_progress(start_time, start_step)
        if self.options.show_progress:
            _logger.info(
                "Done in %.3fs, acceptance rate = %.3f",
                time.time() - start_time,
                self._acceptance_array[-1],
            )

    def get_proposal_factor(self) -> Optional[np.ndarray]:
        """Cholesky factor of the last proposal, or None if the strategy does not expose one."""
        factor = self.proposal.current_factor()
        return None if factor is None else factor.copy()


class AdaptiveRwmh(RandomWalkMetropolisHastings):
    """
    Random-walk Metropolis-Hastings with global adaptive scaling.

    The first ``n_homogeneous_steps`` (default 2 dim + 1) steps use
    proposal_covariance. Afterwards the proposal covariance is
    ``scaling * chain covariance`` (default scaling 2.38^2 / dim, optimal
    for Gaussian targets).

    Parameters
    ----------
    target, chain_length, proposal_covariance, rng, options :
        See RandomWalkMetropolisHastings.
    scaling : float, optional
    n_homogeneous_steps : int, optional
    """

    def __init__(
        self,
        target,
        chain_length: int,
        proposal_covariance,
        rng=None,
        options: Optional[ChainOptions] = None,
        scaling: Optional[float] = None,
        n_homogeneous_steps: Optional[int] = None,
    ):
        proposal = AdaptiveProposal(
            proposal_covariance,
            int(target.dim),
            scaling=scaling,
            n_homogeneous_steps=n_homogeneous_steps,
        )
        super().__init__(target, chain_length, rng=rng, options=options, proposal=proposal)


class MixtureAdaptiveRwmh(RandomWalkMetropolisHastings):
    """
    Random-walk Metropolis-Hastings mixing a safety proposal with global
    adaptive scaling.

    At each adaptive step, with probability ``probability_safety`` the
    proposal covariance is proposal_covariance (the safety proposal);
    otherwise it is the scaled chain covariance, or the safety proposal if
    the latter is not positive definite.

    Parameters
    ----------
    target, chain_length, proposal_covariance, rng, options :
        See RandomWalkMetropolisHastings.
    probability_safety : float, optional
        Default 0.05.
    scaling, n_homogeneous_steps :
        See AdaptiveRwmh.
    """

    def __init__(
        self,
        target,
        chain_length: int,
        proposal_covariance,
        rng=None,
        options: Optional[ChainOptions] = None,
        probability_safety: float = 0.05,
        scaling: Optional[float] = None,
        n_homogeneous_steps: Optional[int] = None,
    ):
        proposal = MixtureProposal(
            proposal_covariance,
            int(target.dim),
            probability_safety=probability_safety,
            scaling=scaling,
            n_homogeneous_steps=n_homogeneous_steps,
        )
        super().__init__(target, chain_length, rng=rng, options=options, proposal=proposal)

    @property
    def probability_safety(self) -> float:
        return self.proposal.probability_safety

    def set_probability_safety(self, probability_safety: float) -> None:
        """Set the probability that the proposal is the safety proposal."""
        self.proposal.set_probability_safety(probability_safety)
