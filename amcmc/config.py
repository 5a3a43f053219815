# amcmc/config.py
import os
import logging

# Read version from VERSION file
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(os.path.abspath(_version_file), "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"


class _AMCMCConfig:
    def __init__(self):
        self.version = __version__
        self.dtype = float
        self.seed = 1234
        # logger lives in config
        self.logger = logging.getLogger("amcmc")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.INFO)

    def __str__(self):
        return (
            f"AMCMCConfig("
            f"version={self.version}, "
            f"dtype={self.dtype}, "
            f"seed={self.seed})"
        )

    def __repr__(self):
        return (
            f"<AMCMCConfig "
            f"version={self.version!r}, "
            f"dtype={self.dtype!r}, "
            f"seed={self.seed!r}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        return self


_config = _AMCMCConfig()


def get_config():
    return _config


def set_seed(seed):
    """Default seed used by chains constructed without an explicit rng."""
    _config.seed = seed


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
