# amcmc/__init__.py

from . import config
from . import num
from . import target
from . import mcmc
from .errors import NumericalError, InvalidArgument
from .num import RandomGenerator
from .target import TargetDistribution, LogDensityTarget
from .mcmc.rwmh import RandomWalkMetropolisHastings, AdaptiveRwmh, MixtureAdaptiveRwmh

__all__ = [
    "num",
    "mcmc",
    "NumericalError",
    "InvalidArgument",
    "RandomGenerator",
    "TargetDistribution",
    "LogDensityTarget",
    "RandomWalkMetropolisHastings",
    "AdaptiveRwmh",
    "MixtureAdaptiveRwmh",
    "__version__",
]

__version__ = config.__version__
