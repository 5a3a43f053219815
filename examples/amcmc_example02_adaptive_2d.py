"""
Adaptive random-walk Metropolis-Hastings on a correlated 2D Gaussian.

The homogeneous proposal is badly scaled on purpose. The adaptive chains
learn the covariance of the target from their own history. Several
independent mixture-adaptive chains are compared with the Gelman-Rubin
statistic.

Author: The amcmc developers
License: GPLv3 (see LICENSE)
"""

import numpy as np
import amcmc
from amcmc.mcmc.diagnostics import (
    gelman_rubin_rhat,
    effective_sample_size,
    check_acceptance_rate,
)
from amcmc.mcmc.plotting import plot_chain

COV = np.array([[1.0, 0.9], [0.9, 1.0]])
COV_INV = np.linalg.inv(COV)


def log_density(x):
    return -0.5 * float(x @ COV_INV @ x)


def main(show=True):
    target = amcmc.LogDensityTarget(log_density, dim=2)
    proposal_covariance = 1e-2 * np.eye(2)
    n = 5000
    burn_in = 1000

    chains = []
    for seed in range(4):
        chain = amcmc.MixtureAdaptiveRwmh(
            target, n, proposal_covariance, rng=seed, probability_safety=0.05
        )
        chain.set_initial_value([2.0, -2.0])
        chain.run()
        chains.append(chain)

    for i, chain in enumerate(chains):
        chain.calculate_posterior_statistics(burn_in)
        print(f"Chain {i}")
        print("  posterior expectation:", chain.get_posterior_expectation())
        print("  posterior covariance:\n", chain.get_posterior_covariance())
        print("  Monte Carlo error:", chain.get_monte_carlo_error())
        print(
            "  ESS:",
            [effective_sample_size(chain, d, burn_in=burn_in) for d in range(2)],
        )
        check_acceptance_rate(chain)

    print("R-hat:", gelman_rubin_rhat(chains, burn_in=burn_in))

    # resume the first chain for 5000 more steps
    longer = amcmc.MixtureAdaptiveRwmh.from_chain(chains[0], 5000)
    longer.run()
    longer.calculate_posterior_statistics(burn_in)
    print("Extended chain, Monte Carlo error:", longer.get_monte_carlo_error())

    plot_chain(longer, burn_in=burn_in, show=show)
    return chains, longer


if __name__ == "__main__":
    main()
