# amcmc/mcmc/__init__.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Markov chain Monte Carlo samplers for amcmc.

This subpackage gathers:
- the abstract chain with its running and posterior statistics
- random-walk Metropolis-Hastings, fixed and adaptive
- proposal strategies
- convergence diagnostics and plots

Public API
----------
Chain, ChainOptions
    Abstract chain and its run-time options.
RandomWalkMetropolisHastings, AdaptiveRwmh, MixtureAdaptiveRwmh
    Random-walk Metropolis-Hastings chains.
FixedProposal, AdaptiveProposal, MixtureProposal
    Proposal strategies.
gelman_rubin_rhat, effective_sample_size, check_acceptance_rate
    Diagnostics.
plot_chain, plot_acf
    Plots (import matplotlib on first use).
"""
from __future__ import annotations

import importlib

__all__ = [
    "Chain",
    "ChainOptions",
    "sample_acf",
    "RandomWalkMetropolisHastings",
    "AdaptiveRwmh",
    "MixtureAdaptiveRwmh",
    "acceptance_probability",
    "Proposal",
    "FixedProposal",
    "AdaptiveProposal",
    "MixtureProposal",
    "gelman_rubin_rhat",
    "effective_sample_size",
    "check_acceptance_rate",
    "plot_chain",
    "plot_acf",
]

_EXPORT_TO_MODULE = {
    # Chain
    "Chain": "chain",
    "ChainOptions": "chain",
    "sample_acf": "chain",
    # Random-walk Metropolis-Hastings
    "RandomWalkMetropolisHastings": "rwmh",
    "AdaptiveRwmh": "rwmh",
    "MixtureAdaptiveRwmh": "rwmh",
    "acceptance_probability": "rwmh",
    # Proposals
    "Proposal": "proposals",
    "FixedProposal": "proposals",
    "AdaptiveProposal": "proposals",
    "MixtureProposal": "proposals",
    # Diagnostics
    "gelman_rubin_rhat": "diagnostics",
    "effective_sample_size": "diagnostics",
    "check_acceptance_rate": "diagnostics",
    # Plots
    "plot_chain": "plotting",
    "plot_acf": "plotting",
}


def __getattr__(name: str):
    module_name = _EXPORT_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = importlib.import_module(f"{__name__}.{module_name}")
    obj = getattr(module, name)
    globals()[name] = obj
    return obj


def __dir__():
    return sorted(set(globals().keys()) | set(__all__))
