# amcmc/mcmc/plotting.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Plotting helpers for chains.

Defines
-------
plot_chain
    Trace plot of each dimension, with an optional acceptance-rate subplot.
plot_acf
    Sample autocorrelation function of one dimension.

Notes
-----
Matplotlib is imported inside this module. Importing amcmc.mcmc.plotting
will import matplotlib. Other amcmc modules do not import matplotlib.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

import matplotlib.pyplot as plt

from .chain import Chain


def plot_chain(
    chain: Chain,
    burn_in: Optional[int] = None,
    dimensions: Optional[Sequence[int]] = None,
    show_rate: bool = True,
    show: bool = True,
):
    """Trace plots of each dimension, optional acceptance-rate subplot.

    Parameters
    ----------
    chain : Chain
    burn_in : int, optional
        Drawn as a vertical line. Defaults to the burn-in of the last call to
        calculate_posterior_statistics, if any.
    dimensions : sequence of int, optional
        Dimensions to plot (default: all).
    show_rate : bool, optional
        Add a subplot with the cumulative acceptance rate.
    show : bool, optional
        Call plt.show().

    Returns
    -------
    matplotlib.figure.Figure
    """
    if burn_in is None:
        burn_in = chain.burn_in or 0
    n = chain.n_step + 1
    pidx = list(dimensions) if dimensions is not None else list(range(chain.dim))
    n_plots = len(pidx)
    total_plots = n_plots + 1 if show_rate else n_plots
    fig, axes = plt.subplots(
        total_plots, 1, figsize=(10, 3 * total_plots), sharex=True
    )
    axes = np.atleast_1d(axes)
    for i, d in enumerate(pidx):
        axes[i].plot(chain.get_chain(d)[:n])
        axes[i].set_ylabel(f"x_{d}")
        if burn_in > 0:
            axes[i].axvline(burn_in, color="red", linestyle="--", label="End Burn-in")
            axes[i].legend(loc="best")
    if show_rate:
        axr = axes[-1]
        steps = np.arange(1, n)
        axr.plot(steps, chain.get_acceptance_rate()[: n - 1])
        axr.set_ylabel("Acceptance")
        axr.set_ylim(0.0, 1.0)
    axes[-1].set_xlabel("Iteration")
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_acf(
    chain: Chain,
    dimension: int = 0,
    max_lag: int = 50,
    show: bool = True,
):
    """Stem plot of the sample autocorrelation function of one dimension."""
    max_lag = min(max_lag, chain.chain_length - 1)
    acf = chain.get_acf(dimension, max_lag)
    fig, ax = plt.subplots(1, 1, figsize=(8, 3))
    ax.stem(np.arange(max_lag + 1), acf)
    ax.axhline(0.0, color="black", linewidth=0.5)
    ax.set_xlabel("Lag")
    ax.set_ylabel(f"ACF x_{dimension}")
    fig.tight_layout()
    if show:
        plt.show()
    return fig
