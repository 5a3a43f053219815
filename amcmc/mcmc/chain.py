# amcmc/mcmc/chain.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Markov chain storage and statistics.

`Chain` is the abstract base of all samplers in amcmc. Subclasses implement
`step()` (one transition) and `run()` (steps until the chain is full). The
base class owns everything that does not depend on the transition kernel:

- preallocated sample storage, shape (chain_length, dim), row 0 being the
  initial value,
- the running mean and covariance of the chain, updated in O(dim^2) per step,
- the cumulative acceptance rate after each step,
- posterior statistics after burn-in (expectation, covariance, Monte Carlo
  error by batch means),
- the sample autocorrelation function.

Running moments
---------------
With n = n_step + 1 samples x_0, ..., x_{n-1}, the mean is updated as
  mean_n = ((n - 1) mean_{n-1} + x_{n-1}) / n.
At the first step the covariance is built from the two samples,
  cov = (x_0 - mean)(x_0 - mean)^T + (x_1 - mean)(x_1 - mean)^T,
and afterwards updated recursively,
  cov_n = [(n - 2) cov_{n-1} + n / (n - 1) (x - mean_n)(x - mean_n)^T] / (n - 1).
Both agree with the batch estimates (covariance with divisor n - 1).

Monte Carlo error
-----------------
After burn-in, the n remaining samples are cut into round(sqrt(n))
contiguous batches, batch b ending at round((b + 1) n / n_batch). The error
of the posterior expectation is
  sqrt( sum_b len_b (mean_b - mean)^2 / (n_batch n) ).

References
----------
[1] B. P. Welford (1962). "Note on a method for calculating corrected sums of
    squares and products." Technometrics 4(3):419-420.
[2] C. J. Geyer (1992). "Practical Markov chain Monte Carlo." Statistical
    Science 7(4):473-483.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

import amcmc.num as anp
from amcmc.config import get_logger
from amcmc.errors import InvalidArgument

_logger = get_logger()


@dataclass
class ChainOptions:
    """
    Run-time options shared by all chains.
    """

    show_progress: bool = False
    progress_interval: int = 1000  # Log every 1000 steps

    def __post_init__(self):
        if self.progress_interval < 1:
            raise InvalidArgument("progress_interval must be >= 1.")


def sample_acf(series, max_lag: int) -> np.ndarray:
    """
    Sample autocorrelation function of a series for lags 0, ..., max_lag.

    The series is centered on its sample mean, then
    S(k) = sum_{i=0}^{n-1-k} x_i x_{i+k} and acf[k] = S(k) / S(0).
    acf[0] is set to exactly 1.
    """
    series = anp.as_vector(series)
    x = series - anp.sum(series) / series.shape[0]
    n = x.shape[0]

    acf = anp.empty(max_lag + 1)
    for k in range(max_lag + 1):
        acf[k] = anp.sum(x[k:] * x[: n - k])
    with np.errstate(divide="ignore", invalid="ignore"):
        acf[1:] /= acf[0]
    acf[0] = 1.0
    return acf


class Chain(ABC):
    """
    Abstract Markov chain with sample storage and running statistics.

    Parameters
    ----------
    target : TargetDistribution
        Object with attribute ``dim`` and method ``log_density(x)``.
    chain_length : int
        Total number of samples, the initial value included.
    rng : RandomGenerator, int or None, optional
        Source of random numbers, or a seed.
    options : ChainOptions, optional
        Run-time options.
    """

    def __init__(self, target, chain_length: int, rng=None, options=None):
        dim = int(target.dim)
        if dim < 1:
            raise InvalidArgument("target.dim must be a positive integer.")
        chain_length = int(chain_length)
        if chain_length < 2:
            raise InvalidArgument("chain_length must be at least 2.")

        self.target = target
        self.rng = anp.make_rng(rng)
        self.options = options or ChainOptions()

        self._chain_length = chain_length
        self._chain_array = anp.zeros((chain_length, dim))
        self._chain_mean = anp.zeros(dim)
        self._chain_covariance = anp.zeros((dim, dim))
        self._acceptance_array = anp.zeros(chain_length - 1)
        self._n_step = 0
        self._n_accept = 0
        self._log_density_current = None

        self._reset_posterior_statistics()

    @classmethod
    def from_chain(cls, chain: "Chain", n_more_steps: int):
        """
        Extend a chain by n_more_steps, to resume sampling where it stopped.

        The new chain has length ``chain.chain_length + n_more_steps``.

        Shared by reference with the source chain: ``target``, ``rng`` (the
        random stream continues) and ``options``.

        Copied: the stored samples, the acceptance record, the running mean
        and covariance, the step and acceptance counters, and the cached
        log-density of the last sample. Subclass state is copied by
        `_copy_state_from`. The source chain is left unchanged, and must be
        exactly of class ``cls``.
        """
        if type(chain) is not cls:
            raise InvalidArgument(
                f"cannot extend a {type(chain).__name__} as a {cls.__name__}."
            )
        n_more_steps = int(n_more_steps)
        if n_more_steps < 1:
            raise InvalidArgument("n_more_steps must be at least 1.")

        new = cls.__new__(cls)
        new.target = chain.target
        new.rng = chain.rng
        new.options = chain.options

        n_old = chain._chain_length
        new._chain_length = n_old + n_more_steps
        new._chain_array = anp.zeros((new._chain_length, chain.dim))
        new._chain_array[:n_old] = chain._chain_array
        new._acceptance_array = anp.zeros(new._chain_length - 1)
        new._acceptance_array[: n_old - 1] = chain._acceptance_array
        new._chain_mean = chain._chain_mean.copy()
        new._chain_covariance = chain._chain_covariance.copy()
        new._n_step = chain._n_step
        new._n_accept = chain._n_accept
        new._log_density_current = chain._log_density_current

        new._reset_posterior_statistics()
        new._copy_state_from(chain)
        return new

    def _copy_state_from(self, chain: "Chain") -> None:
        """Hook for subclasses to copy their own state in `from_chain`."""

    def _reset_posterior_statistics(self) -> None:
        self._burn_in = None
        self._posterior_expectation = None
        self._monte_carlo_error = None
        self._posterior_covariance = None

    def __repr__(self):
        return (
            f"<{type(self).__name__} dim={self.dim} "
            f"chain_length={self._chain_length} n_step={self._n_step} "
            f"n_accept={self._n_accept}>"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def dim(self) -> int:
        return int(self.target.dim)

    @property
    def chain_length(self) -> int:
        return self._chain_length

    @property
    def n_step(self) -> int:
        return self._n_step

    @property
    def n_accept(self) -> int:
        return self._n_accept

    @property
    def n_remaining_steps(self) -> int:
        return self._chain_length - 1 - self._n_step

    @property
    def is_complete(self) -> bool:
        return self.n_remaining_steps == 0

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    @abstractmethod
    def step(self) -> None:
        """Do one MCMC step."""

    @abstractmethod
    def run(self) -> None:
        """Do MCMC steps until the chain is full."""

    def set_initial_value(self, initial_value) -> None:
        """
        Set the initial value of the chain. To be called before any step.
        """
        if self._n_step > 0:
            raise InvalidArgument(
                "the initial value can only be set before the first step."
            )
        try:
            x0 = anp.as_vector(initial_value, self.dim)
        except ValueError as exc:
            raise InvalidArgument(str(exc)) from exc
        self._chain_array[0] = x0
        # running mean of the one stored sample
        self._chain_mean = x0.copy()
        self._log_density_current = None

    def _check_not_full(self) -> None:
        if self.is_complete:
            raise InvalidArgument(
                f"chain is full ({self._chain_length} samples); "
                "use from_chain() to extend it."
            )

    def _current_log_density(self) -> float:
        """Log-density of the last sample, evaluated once and cached."""
        if self._log_density_current is None:
            self._log_density_current = float(
                self.target.log_density(self._chain_array[self._n_step].copy())
            )
        return self._log_density_current

    def accept_step(self, accept_probability, current_point, proposed_point) -> bool:
        """
        Store the next sample at row n_step + 1.

        With probability accept_probability the proposed point is stored
        and the acceptance counter is incremented; otherwise the current
        point is stored again. Returns True if the proposal was accepted.
        """
        accepted = self.rng.uniform01() < accept_probability
        if accepted:
            self._chain_array[self._n_step + 1] = proposed_point
            self._n_accept += 1
        else:
            self._chain_array[self._n_step + 1] = current_point
        return accepted

    def update_statistics(self) -> None:
        """
        Update the acceptance record, n_step, the chain mean and covariance.
        """
        # the acceptance rate counts from the first step, not the initial value
        self._acceptance_array[self._n_step] = self._n_accept / (self._n_step + 1)

        self._n_step += 1
        n = float(self._n_step + 1)
        x = self._chain_array[self._n_step]

        self._chain_mean = ((n - 1.0) * self._chain_mean + x) / n

        if self._n_step == 1:
            r1 = self._chain_array[0] - self._chain_mean
            r2 = x - self._chain_mean
            self._chain_covariance = anp.outer(r1) + anp.outer(r2)
        else:
            r2 = x - self._chain_mean
            self._chain_covariance = (
                (n - 2.0) * self._chain_covariance + (n / (n - 1.0)) * anp.outer(r2)
            ) / (n - 1.0)

    def _log_progress(self, start_time: float, start_step: int = 0) -> None:
        if not self.options.show_progress:
            return
        if self._n_step % self.options.progress_interval != 0:
            return
        elapsed_time = time.time() - start_time
        done = self._n_step
        total = self._chain_length - 1
        avg_time = elapsed_time / max(done - start_step, 1)
        remaining = avg_time * (total - done)
        _logger.info(
            "Progress: %5.2f%% | acceptance rate: %.3f | time left: %5.1fs",
            100.0 * done / total,
            self._acceptance_array[done - 1],
            remaining,
        )

    # ------------------------------------------------------------------
    # Autocorrelation
    # ------------------------------------------------------------------

    def _check_dimension(self, dimension: int) -> int:
        dimension = int(dimension)
        if not 0 <= dimension < self.dim:
            raise InvalidArgument(
                f"dimension must be in [0, {self.dim - 1}], got {dimension}."
            )
        return dimension

    def get_acf(self, dimension: int, max_lag: int) -> np.ndarray:
        """
        Sample autocorrelation function of one dimension of the chain.

        The whole stored chain is used (no burn-in).

        Parameters
        ----------
        dimension : int
            Index of the dimension.
        max_lag : int
            Largest lag.

        Returns
        -------
        acf : ndarray, shape (max_lag + 1,)
            acf[k] for lags k = 0, ..., max_lag; acf[0] is exactly 1.
        """
        dimension = self._check_dimension(dimension)
        max_lag = int(max_lag)
        if not 0 <= max_lag < self._chain_length:
            raise InvalidArgument(
                f"max_lag must be in [0, {self._chain_length - 1}], got {max_lag}."
            )

        return sample_acf(self._chain_array[:, dimension], max_lag)

    # ------------------------------------------------------------------
    # Posterior statistics
    # ------------------------------------------------------------------

    def calculate_posterior_statistics(self, burn_in: int) -> None:
        """
        Compute the posterior expectation, covariance and the Monte Carlo
        error of the expectation, ignoring the first burn_in samples.

        Read the results with `get_posterior_expectation`,
        `get_posterior_covariance` and `get_monte_carlo_error`.
        """
        burn_in = int(burn_in)
        if not 0 <= burn_in <= self._chain_length - 2:
            raise InvalidArgument(
                f"burn_in must be in [0, {self._chain_length - 2}], got {burn_in}."
            )
        burnt_chain = self._chain_array[burn_in:]
        n = burnt_chain.shape[0]

        expectation = anp.sum(burnt_chain, axis=0) / (self._chain_length - burn_in)

        # batch means
        n_batch = anp.round_half_up(anp.sqrt(n))
        batch_length = anp.zeros(n_batch)
        batch_mean = anp.zeros((n_batch, self.dim))
        index_start = 0
        for i_batch in range(n_batch):
            index_end = anp.round_half_up((i_batch + 1) * n / n_batch)
            batch_length[i_batch] = index_end - index_start
            batch_mean[i_batch] = (
                anp.sum(burnt_chain[index_start:index_end], axis=0)
                / batch_length[i_batch]
            )
            index_start = index_end
        monte_carlo_error = anp.sqrt(
            anp.sum(batch_length[:, None] * (batch_mean - expectation) ** 2, axis=0)
            / (n_batch * n)
        )

        # bias corrected covariance
        r = burnt_chain - expectation
        covariance = (r.T @ r) / (self._chain_length - burn_in - 1)

        self._burn_in = burn_in
        self._posterior_expectation = expectation
        self._monte_carlo_error = monte_carlo_error
        self._posterior_covariance = covariance

    def _check_posterior_statistics(self) -> None:
        if self._posterior_expectation is None:
            raise InvalidArgument(
                "posterior statistics are not available; "
                "call calculate_posterior_statistics(burn_in) first."
            )

    def get_difference_ln_error(self) -> np.ndarray:
        """
        ln(posterior std) - ln(Monte Carlo error), one entry per dimension.

        Gives an indication of how large the Monte Carlo error is compared
        to the posterior spread; about 6.9 corresponds to an error 1000
        times smaller than the standard deviation.
        """
        self._check_posterior_statistics()
        posterior_std = anp.sqrt(anp.diag(self._posterior_covariance))
        return anp.log(posterior_std) - anp.log(self._monte_carlo_error)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_chain(self, dimension: Optional[int] = None) -> np.ndarray:
        """
        Samples of the chain, shape (chain_length, dim), or the series of
        one dimension, shape (chain_length,).
        """
        if dimension is None:
            return self._chain_array.copy()
        dimension = self._check_dimension(dimension)
        return self._chain_array[:, dimension].copy()

    def get_acceptance_rate(self) -> np.ndarray:
        """Cumulative acceptance rate after each step, shape (chain_length - 1,)."""
        return self._acceptance_array.copy()

    def get_end_of_chain(self) -> np.ndarray:
        """Last stored sample."""
        return self._chain_array[self._n_step].copy()

    def get_chain_mean(self) -> np.ndarray:
        return self._chain_mean.copy()

    def get_chain_covariance(self) -> np.ndarray:
        return self._chain_covariance.copy()

    def get_posterior_expectation(self) -> np.ndarray:
        self._check_posterior_statistics()
        return self._posterior_expectation.copy()

    def get_posterior_covariance(self) -> np.ndarray:
        self._check_posterior_statistics()
        return self._posterior_covariance.copy()

    def get_monte_carlo_error(self) -> np.ndarray:
        self._check_posterior_statistics()
        return self._monte_carlo_error.copy()

    @property
    def burn_in(self) -> Optional[int]:
        """Burn-in used by the last call to calculate_posterior_statistics."""
        return self._burn_in
