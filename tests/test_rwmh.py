"""
Tests of the random-walk Metropolis-Hastings chains (unittest version).
"""

import logging
import math
import time
import unittest

import numpy as np

import amcmc
from amcmc.errors import InvalidArgument, NumericalError
from amcmc.mcmc.chain import ChainOptions
from amcmc.mcmc.proposals import (
    AdaptiveProposal,
    FixedProposal,
    MixtureProposal,
    Proposal,
)
from amcmc.mcmc.rwmh import (
    AdaptiveRwmh,
    MixtureAdaptiveRwmh,
    RandomWalkMetropolisHastings,
    acceptance_probability,
)


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def standard_normal_1d():
    return amcmc.LogDensityTarget(lambda x: -0.5 * float(x[0] ** 2), dim=1)


def correlated_gaussian(rho=0.8):
    cov = np.array([[1.0, rho], [rho, 1.0]])
    prec = np.linalg.inv(cov)
    return amcmc.LogDensityTarget(lambda x: -0.5 * float(x @ prec @ x), dim=2), cov


class IsotropicProposal(Proposal):
    """Random walk with covariance scale**2 I, not tracking its factor."""

    def __init__(self, dim, scale):
        self.dim = dim
        self.scale = scale

    def cholesky_factor(self, chain):
        return self.scale * np.eye(self.dim)


def point_mass(dim):
    """log-density 0 at the origin, -inf elsewhere."""
    return amcmc.LogDensityTarget(
        lambda x: 0.0 if not np.any(x) else -np.inf, dim=dim
    )


# ======================================================================
#                           Test cases
# ======================================================================
class TestAcceptanceProbability(unittest.TestCase):
    def test_values(self):
        self.assertEqual(acceptance_probability(0.0, 1.0), math.exp(-1.0))
        self.assertEqual(acceptance_probability(1.0, 0.0), 1.0)
        self.assertEqual(acceptance_probability(-np.inf, 0.0), 0.0)
        self.assertEqual(acceptance_probability(0.0, -np.inf), 1.0)

    def test_nan_ratio_is_rejected(self):
        self.assertEqual(acceptance_probability(-np.inf, -np.inf), 0.0)


class TestRandomWalkMetropolisHastings(unittest.TestCase):
    def test_standard_normal(self):
        chain = RandomWalkMetropolisHastings(
            standard_normal_1d(), 10000, 1.0, rng=amcmc.RandomGenerator(42)
        )
        chain.set_initial_value([0.0])
        chain.run()
        self.assertEqual(chain.n_step, 9999)
        chain.calculate_posterior_statistics(1000)
        self.assertAlmostEqual(chain.get_posterior_expectation()[0], 0.0, delta=0.05)
        self.assertAlmostEqual(chain.get_posterior_covariance()[0, 0], 1.0, delta=0.1)
        rate = chain.get_acceptance_rate()[-1]
        self.assertTrue(0.5 < rate < 0.9)

    def test_not_positive_definite(self):
        target, _ = correlated_gaussian()
        with self.assertRaises(NumericalError):
            RandomWalkMetropolisHastings(target, 10, np.array([[1.0, 2.0], [2.0, 1.0]]))
        with self.assertRaises(NumericalError):
            RandomWalkMetropolisHastings(standard_normal_1d(), 10, 0.0)

    def test_missing_covariance(self):
        with self.assertRaises(InvalidArgument):
            RandomWalkMetropolisHastings(standard_normal_1d(), 10)

    def test_proposal_dimension_mismatch(self):
        with self.assertRaises(InvalidArgument):
            RandomWalkMetropolisHastings(
                standard_normal_1d(), 10, proposal=FixedProposal(np.eye(2), 2)
            )

    def test_reproducible(self):
        target, _ = correlated_gaussian()
        chains = []
        for _ in range(2):
            c = RandomWalkMetropolisHastings(target, 200, 0.3 * np.eye(2), rng=5)
            c.run()
            chains.append(c)
        self.assertTrue(np.array_equal(chains[0].get_chain(), chains[1].get_chain()))

    def test_infeasible_start(self):
        # -inf - (-inf) must give a rejection, never NaN
        target = amcmc.LogDensityTarget(lambda x: -np.inf, dim=1)
        chain = RandomWalkMetropolisHastings(target, 20, 1.0, rng=0)
        chain.run()
        self.assertEqual(chain.n_accept, 0)
        self.assertEqual(chain.last_accept_probability, 0.0)
        self.assertTrue(np.array_equal(chain.get_chain(), np.zeros((20, 1))))

    def test_leaves_infeasible_region(self):
        target = amcmc.LogDensityTarget(
            lambda x: -0.5 * float(x[0] ** 2) if x[0] > 0.0 else -np.inf, dim=1
        )
        chain = RandomWalkMetropolisHastings(target, 200, 1.0, rng=3)
        chain.set_initial_value([-0.1])
        chain.run()
        self.assertGreater(chain.n_accept, 0)
        self.assertTrue(np.all(chain.get_chain(0)[-50:] > 0.0))

    def test_progress_logging(self):
        target, _ = correlated_gaussian()
        chain = RandomWalkMetropolisHastings(
            target,
            101,
            np.eye(2),
            rng=1,
            options=ChainOptions(show_progress=True, progress_interval=50),
        )
        with self.assertLogs("amcmc", level=logging.INFO) as cm:
            chain.run()
        self.assertTrue(any("Progress" in line for line in cm.output))

    def test_custom_proposal(self):
        target, _ = correlated_gaussian()
        chain = RandomWalkMetropolisHastings(
            target, 100, proposal=IsotropicProposal(2, 0.5), rng=6
        )
        chain.run()
        self.assertTrue(chain.is_complete)
        self.assertIsNone(chain.get_proposal_factor())
        resumed = RandomWalkMetropolisHastings.from_chain(chain, 10)
        resumed.run()
        self.assertEqual(resumed.n_step, 109)

    def test_time_left_counts_steps_since_start(self):
        target, _ = correlated_gaussian()
        options = ChainOptions(show_progress=True, progress_interval=100)
        chain = RandomWalkMetropolisHastings(
            target, 101, np.eye(2), rng=1, options=options
        )
        chain.run()
        resumed = RandomWalkMetropolisHastings.from_chain(chain, 199)
        for _ in range(100):
            resumed.step()
        # 100 new steps in 10s, 99 steps to go
        with self.assertLogs("amcmc", level=logging.INFO) as cm:
            resumed._log_progress(time.time() - 10.0, start_step=100)
        self.assertIn("time left:   9.9s", cm.output[0])

    def test_invalid_options(self):
        with self.assertRaises(InvalidArgument):
            ChainOptions(progress_interval=0)


class TestAdaptiveRwmh(unittest.TestCase):
    def test_homogeneous_steps_then_adaptation(self):
        target, _ = correlated_gaussian()
        chain = AdaptiveRwmh(target, 200, 0.1 * np.eye(2), rng=2)
        self.assertEqual(chain.proposal.n_homogeneous_steps, 5)
        self.assertAlmostEqual(chain.proposal.scaling, 2.38**2 / 2)
        for _ in range(5):
            chain.step()
        fixed = chain.proposal.fixed_factor
        self.assertTrue(np.array_equal(chain.get_proposal_factor(), fixed))
        scaled = chain.proposal.scaling * chain.get_chain_covariance()
        chain.step()
        # after 2 dim + 1 steps, the working factor comes from the chain covariance
        L = chain.get_proposal_factor()
        if amcmc.num.cholesky(scaled).ok:
            self.assertTrue(np.allclose(L @ L.T, scaled))
        else:
            self.assertTrue(np.array_equal(L, fixed))
            self.assertEqual(chain.proposal.n_fallbacks, 1)

    def test_learns_target_covariance(self):
        target, cov = correlated_gaussian()
        chain = AdaptiveRwmh(target, 10000, 1e-2 * np.eye(2), rng=11)
        chain.run()
        self.assertTrue(np.allclose(chain.get_chain_covariance(), cov, atol=0.25))
        L = chain.get_proposal_factor()
        expected = 2.38**2 / 2 * chain.get_chain_covariance()
        # the working factor is the one of the last step
        self.assertTrue(np.allclose(L @ L.T, expected, atol=0.1))

    def test_fallback_keeps_previous_factor(self):
        chain = AdaptiveRwmh(point_mass(2), 50, 0.5 * np.eye(2), rng=0)
        chain.run()
        self.assertEqual(chain.n_accept, 0)
        # chain covariance is zero, every adaptive step falls back
        self.assertEqual(chain.proposal.n_fallbacks, 49 - 5)
        self.assertTrue(
            np.array_equal(chain.get_proposal_factor(), chain.proposal.fixed_factor)
        )

    def test_custom_scaling(self):
        target, _ = correlated_gaussian()
        chain = AdaptiveRwmh(
            target, 10, np.eye(2), rng=0, scaling=0.5, n_homogeneous_steps=3
        )
        self.assertEqual(chain.proposal.scaling, 0.5)
        self.assertEqual(chain.proposal.n_homogeneous_steps, 3)
        with self.assertRaises(InvalidArgument):
            AdaptiveProposal(np.eye(2), 2, scaling=-1.0)

    def test_extension_matches_single_run(self):
        target, _ = correlated_gaussian()
        full = AdaptiveRwmh(target, 301, 0.1 * np.eye(2), rng=8)
        full.run()
        part = AdaptiveRwmh(target, 201, 0.1 * np.eye(2), rng=8)
        part.run()
        resumed = AdaptiveRwmh.from_chain(part, 100)
        resumed.run()
        self.assertTrue(np.array_equal(full.get_chain(), resumed.get_chain()))
        self.assertTrue(
            np.array_equal(full.get_acceptance_rate(), resumed.get_acceptance_rate())
        )
        self.assertIsNot(resumed.proposal, part.proposal)


class TestMixtureAdaptiveRwmh(unittest.TestCase):
    def test_default_probability(self):
        target, _ = correlated_gaussian()
        chain = MixtureAdaptiveRwmh(target, 10, np.eye(2))
        self.assertEqual(chain.probability_safety, 0.05)
        chain.set_probability_safety(0.2)
        self.assertEqual(chain.probability_safety, 0.2)
        with self.assertRaises(InvalidArgument):
            chain.set_probability_safety(1.5)

    def test_safety_only_equals_fixed_rwmh(self):
        target, _ = correlated_gaussian()
        cov = 0.4 * np.eye(2)
        mixture = MixtureAdaptiveRwmh(
            target, 500, cov, rng=21, probability_safety=1.0
        )
        fixed = RandomWalkMetropolisHastings(target, 500, cov, rng=21)
        for c in (mixture, fixed):
            c.set_initial_value([1.0, 1.0])
        p_mixture, p_fixed = [], []
        for _ in range(499):
            mixture.step()
            fixed.step()
            p_mixture.append(mixture.last_accept_probability)
            p_fixed.append(fixed.last_accept_probability)
        self.assertEqual(p_mixture, p_fixed)
        self.assertTrue(np.array_equal(mixture.get_chain(), fixed.get_chain()))
        self.assertTrue(
            np.array_equal(mixture.get_acceptance_rate(), fixed.get_acceptance_rate())
        )
        self.assertEqual(mixture.proposal.n_safety_steps, 499 - 5)

    def test_fallback_to_safety(self):
        chain = MixtureAdaptiveRwmh(
            point_mass(1), 40, 2.0, rng=4, probability_safety=0.0
        )
        chain.run()
        self.assertEqual(chain.proposal.n_fallbacks, 39 - 3)
        self.assertTrue(
            np.array_equal(chain.get_proposal_factor(), chain.proposal.safety_factor)
        )

    def test_safety_factor_is_not_updated(self):
        target, _ = correlated_gaussian()
        chain = MixtureAdaptiveRwmh(target, 2000, 0.1 * np.eye(2), rng=9)
        safety = chain.proposal.safety_factor.copy()
        chain.run()
        self.assertTrue(np.array_equal(chain.proposal.safety_factor, safety))
        self.assertGreater(chain.proposal.n_safety_steps, 0)
        self.assertLess(chain.proposal.n_safety_steps, 500)

    def test_mixture_proposal_is_copied_on_extension(self):
        target, _ = correlated_gaussian()
        chain = MixtureAdaptiveRwmh(target, 100, np.eye(2), rng=3, probability_safety=0.3)
        chain.run()
        longer = MixtureAdaptiveRwmh.from_chain(chain, 50)
        self.assertIsInstance(longer.proposal, MixtureProposal)
        self.assertEqual(longer.probability_safety, 0.3)
        longer.set_probability_safety(0.5)
        self.assertEqual(chain.probability_safety, 0.3)
        longer.run()
        self.assertEqual(longer.n_step, 149)


if __name__ == "__main__":
    unittest.main()
