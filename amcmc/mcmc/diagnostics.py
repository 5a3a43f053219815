# amcmc/mcmc/diagnostics.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Convergence diagnostics for one or several chains.

Defined functions
-----------------
gelman_rubin_rhat
    Potential scale reduction factor across independent chains.
effective_sample_size
    Effective number of independent samples of one dimension of a chain.
check_acceptance_rate
    Compare the final acceptance rate of a chain with bounds.

References
----------
[1] A. Gelman et al., Bayesian Data Analysis, 3rd Edition, Chapter 11.
[2] C. J. Geyer (1992). "Practical Markov chain Monte Carlo." Statistical
    Science 7(4):473-483.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Union

import numpy as np

import amcmc.num as anp
from amcmc.config import get_logger
from amcmc.errors import InvalidArgument

from .chain import Chain, sample_acf

_logger = get_logger()


def _stored_samples(chain: Chain, burn_in: int) -> np.ndarray:
    x = chain.get_chain()[: chain.n_step + 1]
    if not 0 <= burn_in < x.shape[0] - 1:
        raise InvalidArgument(
            f"burn_in must be in [0, {x.shape[0] - 2}], got {burn_in}."
        )
    return x[burn_in:]


def gelman_rubin_rhat(chains: Sequence[Chain], burn_in: int = 0) -> np.ndarray:
    """
    Compute the Gelman-Rubin R-hat statistic from independent chains.

    Parameters
    ----------
    chains : sequence of Chain
        At least two chains with the same dimension and number of steps.
    burn_in : int, optional
        Number of initial samples to ignore in each chain.

    Returns
    -------
    np.ndarray
        R-hat values for each dimension (shape: (dim,)). Values close to 1
        indicate convergence.
    """
    if len(chains) < 2:
        raise InvalidArgument("At least 2 chains are required.")
    dims = {c.dim for c in chains}
    steps = {c.n_step for c in chains}
    if len(dims) != 1 or len(steps) != 1:
        raise InvalidArgument(
            "chains must have the same dimension and number of steps."
        )

    block = np.stack([_stored_samples(c, burn_in) for c in chains])
    n_block = block.shape[1]
    chain_means = anp.mean(block, axis=1)  # shape: (n_chains, dim)
    chain_vars = np.var(block, axis=1, ddof=1)  # shape: (n_chains, dim)
    W = anp.mean(chain_vars, axis=0)  # within-chain variance
    # between-chain variance
    B = n_block * np.var(chain_means, axis=0, ddof=1)
    var_post = ((n_block - 1) / n_block) * W + (1.0 / n_block) * B
    return anp.sqrt(var_post / W)


def effective_sample_size(
    chain: Chain,
    dimension: int,
    burn_in: int = 0,
    max_lag: Optional[int] = None,
) -> float:
    """
    Effective sample size of one dimension of a chain.

    ESS = n / (1 + 2 sum_k acf[k]), the sum running over lags
    1, ..., K where K is the last lag before two consecutive
    autocorrelations sum to a negative value (or max_lag).

    Parameters
    ----------
    chain : Chain
    dimension : int
    burn_in : int, optional
    max_lag : int, optional
        Largest lag considered. Defaults to n // 2.
    """
    x = _stored_samples(chain, burn_in)[:, chain._check_dimension(dimension)]
    n = x.shape[0]
    if max_lag is None:
        max_lag = n // 2
    max_lag = min(int(max_lag), n - 1)
    if max_lag < 1:
        return float(n)

    acf = sample_acf(x, max_lag)
    if not np.isfinite(acf[1]):
        # constant series
        return float(n)
    tau = 1.0
    for k in range(1, max_lag + 1):
        if k > 1 and acf[k - 1] + acf[k] < 0.0:
            break
        tau += 2.0 * acf[k]
    return float(n / max(tau, 1.0 / n))


def check_acceptance_rate(
    chain: Chain,
    low_threshold: float = 0.15,
    high_threshold: float = 0.50,
    verbose: bool = True,
) -> Dict[str, Union[float, bool]]:
    """
    Check the final cumulative acceptance rate of a chain.

    Returns
    -------
    Dict[str, Union[float, bool]]
        Dictionary with keys:
          - "rate": acceptance rate after the last step
          - "ok": True if low_threshold <= rate <= high_threshold
    """
    if chain.n_step < 1:
        raise InvalidArgument("No steps taken yet.")
    rate = float(chain.get_acceptance_rate()[chain.n_step - 1])
    ok = low_threshold <= rate <= high_threshold

    if verbose:
        if rate < low_threshold:
            _logger.warning(
                "Acceptance rate (%.3f) is below the threshold of %.2f.",
                rate,
                low_threshold,
            )
        elif rate > high_threshold:
            _logger.warning(
                "Acceptance rate (%.3f) is above the threshold of %.2f.",
                rate,
                high_threshold,
            )
        else:
            _logger.info("Acceptance rate %.3f within tolerance bounds", rate)

    return {"rate": rate, "ok": ok}
