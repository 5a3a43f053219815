"""
Random-walk Metropolis-Hastings on a standard normal distribution in
dimension 1, with posterior statistics and Monte Carlo error.

Author: The amcmc developers
License: GPLv3 (see LICENSE)
"""

import numpy as np
import amcmc
from amcmc.mcmc.plotting import plot_chain, plot_acf


def log_density(x):
    return -0.5 * float(x[0] ** 2)


def main(show=True):
    target = amcmc.LogDensityTarget(log_density, dim=1)

    chain = amcmc.RandomWalkMetropolisHastings(
        target, chain_length=10000, proposal_covariance=1.0, rng=42
    )
    chain.set_initial_value([0.0])
    chain.run()

    burn_in = 1000
    chain.calculate_posterior_statistics(burn_in)
    print("Posterior expectation:", chain.get_posterior_expectation())
    print("Posterior variance:", chain.get_posterior_covariance()[0, 0])
    print("Monte Carlo error:", chain.get_monte_carlo_error())
    print("ln(std) - ln(MC error):", chain.get_difference_ln_error())
    print("Acceptance rate:", chain.get_acceptance_rate()[-1])

    plot_chain(chain, burn_in=burn_in, show=show)
    plot_acf(chain, dimension=0, max_lag=40, show=show)
    return chain


if __name__ == "__main__":
    main()
