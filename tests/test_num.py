"""
Unit tests for the numerical layer (Cholesky, generator, helpers).
"""

import unittest

import numpy as np

import amcmc
import amcmc.num as anp
from amcmc.num import CholeskyResult, RandomGenerator


class TestCholesky(unittest.TestCase):
    def test_positive_definite(self):
        A = np.array([[4.0, 2.0], [2.0, 3.0]])
        res = anp.cholesky(A)
        self.assertTrue(res.ok)
        L = res.factor
        self.assertTrue(np.allclose(L @ L.T, A))
        self.assertEqual(L[0, 1], 0.0)

    def test_not_positive_definite(self):
        res = anp.cholesky(np.array([[1.0, 2.0], [2.0, 1.0]]))
        self.assertFalse(res.ok)
        self.assertIsNone(res.factor)

    def test_zero_matrix(self):
        res = anp.cholesky(np.zeros((3, 3)))
        self.assertEqual(res, CholeskyResult.failure())

    def test_nan_matrix(self):
        res = anp.cholesky(np.array([[np.nan, 0.0], [0.0, 1.0]]))
        self.assertFalse(res.ok)

    def test_non_square_propagates(self):
        with self.assertRaises(ValueError):
            anp.cholesky(np.ones((2, 3)))


class TestHelpers(unittest.TestCase):
    def test_as_covariance_matrix_scalar(self):
        m = anp.as_covariance_matrix(2.0, 1)
        self.assertEqual(m.shape, (1, 1))
        self.assertEqual(m[0, 0], 2.0)

    def test_as_covariance_matrix_bad_shape(self):
        with self.assertRaises(ValueError):
            anp.as_covariance_matrix(np.eye(2), 3)
        with self.assertRaises(ValueError):
            anp.as_covariance_matrix(1.0, 2)

    def test_outer(self):
        self.assertTrue(np.array_equal(anp.outer([1.0, 2.0]), [[1.0, 2.0], [2.0, 4.0]]))

    def test_round_half_up(self):
        self.assertEqual(anp.round_half_up(2.5), 3)
        self.assertEqual(anp.round_half_up(3.5), 4)
        self.assertEqual(anp.round_half_up(2.49), 2)


class TestRandomGenerator(unittest.TestCase):
    def test_reproducible(self):
        a = RandomGenerator(7)
        b = RandomGenerator(7)
        self.assertEqual(a.uniform01(), b.uniform01())
        self.assertTrue(
            np.array_equal(a.standard_normal_vector(5), b.standard_normal_vector(5))
        )

    def test_uniform_range(self):
        rng = RandomGenerator(0)
        u = np.array([rng.uniform01() for _ in range(1000)])
        self.assertTrue(np.all((u >= 0.0) & (u < 1.0)))

    def test_make_rng(self):
        rng = RandomGenerator(3)
        self.assertIs(anp.make_rng(rng), rng)
        self.assertEqual(anp.make_rng(11).seed, 11)


class TestConfig(unittest.TestCase):
    def test_version(self):
        self.assertEqual(amcmc.__version__, amcmc.config.get_config().version)
        self.assertNotEqual(amcmc.__version__, "")


if __name__ == "__main__":
    unittest.main()
