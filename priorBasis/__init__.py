"""Package initializer for priorBasis.

Exposes the EuclideanRandomFeatures prior basis and the kernels it is sampled from.
"""

from .errors import InvalidArgument, RandomFeaturesError, ShapeMismatch, UnsupportedKernel
from .kernels import (EuclideanKernel, GradientKernel, MaternKernel, SquaredExponentialKernel,
                      make_kernel, spectral_distribution, spectral_weights)
from .rff import EuclideanRandomFeatures

__all__ = [
    "EuclideanRandomFeatures",
    "EuclideanKernel", "SquaredExponentialKernel", "MaternKernel", "GradientKernel",
    "make_kernel", "spectral_distribution", "spectral_weights",
    "RandomFeaturesError", "InvalidArgument", "ShapeMismatch", "UnsupportedKernel",
]
