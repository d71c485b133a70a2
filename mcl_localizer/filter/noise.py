"""
Per-axis independent Gaussian sampling.

The motion model draws pose noise from a diagonal Gaussian: each axis is
sampled independently with its own mean and variance.
"""

from typing import Optional

import numpy as np


def make_rng(seed: int = -1) -> np.random.Generator:
    """numpy Generator; seed -1 draws fresh OS entropy."""
    return np.random.default_rng(None if seed is None or seed < 0 else seed)


class GaussVectorGenerator:
    """
    Sampler for vectors with independent Gaussian components.

    Calling the generator returns one sample; ``sample(n)`` returns n rows.
    A zero variance yields exactly the mean on that axis.
    """

    def __init__(self, mean, variance, rng: Optional[np.random.Generator] = None):
        self.mean = np.asarray(mean, dtype=float).reshape(-1)
        self.variance = np.asarray(variance, dtype=float).reshape(-1)
        if self.mean.shape != self.variance.shape:
            raise ValueError(
                f"mean and variance must have the same length, got {self.mean.shape} and {self.variance.shape}"
            )
        if np.any(self.variance < 0.0):
            raise ValueError("variance entries must be >= 0")
        self.std = np.sqrt(self.variance)
        self.rng = rng if rng is not None else np.random.default_rng()

    def __call__(self) -> np.ndarray:
        return self.rng.normal(self.mean, self.std)

    def sample(self, n: int) -> np.ndarray:
        """Draw ``n`` independent samples, shape (n, dim)."""
        return self.rng.normal(self.mean, self.std, size=(int(n), self.mean.shape[0]))
