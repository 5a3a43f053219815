# amcmc/errors.py
# --------------------------------------------------------------
# Author: The amcmc developers
# Copyright (c) 2024-2026, The amcmc developers
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Exceptions raised by amcmc."""


class NumericalError(ArithmeticError):
    """A required Cholesky factorization failed and no fallback exists."""


class InvalidArgument(ValueError):
    """A precondition on the arguments or on the chain state is violated."""
