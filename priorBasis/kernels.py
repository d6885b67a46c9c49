"""Stationary Euclidean kernels and their spectral (Bochner) decomposition.

Each kernel exposes the contract consumed by EuclideanRandomFeatures:
  dims                                  -> (input_dim, output_dim)
  spectral_distribution(k, num_samples) -> frequencies (input_dim, output_dim, num_samples)
  spectral_weights(k, frequency)        -> (outer_weight, inner_weight)

Frequencies are drawn for unit length scale; the length scales are applied to the
inputs through inner_weight, the variance after the nonlinearity through outer_weight.
Supported kernels: squared exponential (rbf), matern12 (laplace), matern32, matern52.
"""
from __future__ import annotations
import numbers
import numpy as np
from scipy.spatial.distance import cdist

from .errors import InvalidArgument, UnsupportedKernel

MATERN_ORDERS = (0.5, 1.5, 2.5)


def _check_count(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer; got {value!r}")
    return int(value)


class EuclideanKernel:
    """Base class for stationary kernels on R^input_dim with independent outputs."""

    def __init__(self, length_scales, variance=1.0, output_dim=1, input_dim=None,
                 dtype=np.float64):
        dtype = np.dtype(dtype)
        if not np.issubdtype(dtype, np.floating):
            raise InvalidArgument(f"dtype must be a floating type; got {dtype}")
        self.dtype = dtype.type
        length_scales = np.atleast_1d(np.asarray(length_scales, dtype=self.dtype))
        if length_scales.ndim != 1:
            raise InvalidArgument(f"length_scales must be a scalar or vector; got shape {length_scales.shape}")
        if input_dim is not None:
            input_dim = _check_count("input_dim", input_dim)
            if length_scales.shape[0] == 1:
                length_scales = np.repeat(length_scales, input_dim)
            elif length_scales.shape[0] != input_dim:
                raise InvalidArgument(
                    f"length_scales length ({length_scales.shape[0]}) must be 1 or input_dim ({input_dim})")
        if np.any(~(length_scales > 0)):
            raise InvalidArgument(f"length_scales must be positive; got {length_scales}")
        if not variance > 0:
            raise InvalidArgument(f"variance must be positive; got {variance}")
        self.length_scales = length_scales
        self.variance = self.dtype(variance)
        self.output_dim = _check_count("output_dim", output_dim)

    @property
    def dims(self):
        return (self.length_scales.shape[0], self.output_dim)

    def sample_frequency(self, num_samples, rng):
        raise NotImplementedError

    def spectral_weights(self, frequency):
        outer_weight = np.sqrt(self.variance).astype(self.dtype)
        inner_weight = self.length_scales
        return outer_weight, inner_weight

    def _profile(self, r):
        raise NotImplementedError

    def covariance(self, x1, x2=None):
        """Closed-form covariance between columns of x1 (input_dim, N1) and x2 (input_dim, N2)."""
        x1 = np.asarray(x1, dtype=self.dtype)
        x2 = x1 if x2 is None else np.asarray(x2, dtype=self.dtype)
        scale = self.length_scales[:, None]
        r = cdist((x1 / scale).T, (x2 / scale).T, metric='euclidean')
        return (self.variance * self._profile(r)).astype(self.dtype)

    def __repr__(self):
        return (f"{type(self).__name__}(length_scales={self.length_scales.tolist()}, "
                f"variance={float(self.variance)}, output_dim={self.output_dim})")


class SquaredExponentialKernel(EuclideanKernel):
    """k(r) = variance * exp(-r^2 / 2); spectral measure is standard normal."""

    def sample_frequency(self, num_samples, rng):
        (in_dim, out_dim) = self.dims
        return rng.standard_normal((in_dim, out_dim, num_samples))

    def _profile(self, r):
        return np.exp(-0.5 * r ** 2)


class MaternKernel(EuclideanKernel):
    """Matern kernel of order nu in {1/2, 3/2, 5/2}.

    The spectral measure is a multivariate Student-t with 2*nu degrees of freedom,
    sampled as z * sqrt(2 nu / chi2) with one chi-square draw per frequency vector.
    """

    def __init__(self, length_scales, variance=1.0, nu=1.5, output_dim=1, input_dim=None,
                 dtype=np.float64):
        if nu not in MATERN_ORDERS:
            raise InvalidArgument(f"nu must be one of {MATERN_ORDERS}; got {nu}")
        super().__init__(length_scales, variance, output_dim, input_dim, dtype)
        self.nu = float(nu)

    def sample_frequency(self, num_samples, rng):
        (in_dim, out_dim) = self.dims
        dof = 2.0 * self.nu
        z = rng.standard_normal((in_dim, out_dim, num_samples))
        chi2 = rng.chisquare(dof, size=(1, out_dim, num_samples))
        return z * np.sqrt(dof / chi2)

    def _profile(self, r):
        if self.nu == 0.5:
            return np.exp(-r)
        if self.nu == 1.5:
            s = np.sqrt(3.0) * r
            return (1.0 + s) * np.exp(-s)
        s = np.sqrt(5.0) * r
        return (1.0 + s + s ** 2 / 3.0) * np.exp(-s)

    def __repr__(self):
        return super().__repr__()[:-1] + f", nu={self.nu})"


class GradientKernel:
    """Wraps a Euclidean kernel to select evaluation of the GP's input-space gradient."""

    def __init__(self, base):
        if not isinstance(base, EuclideanKernel):
            raise UnsupportedKernel(f"GradientKernel requires a EuclideanKernel; got {type(base).__name__}")
        self.base = base

    @property
    def dims(self):
        return self.base.dims

    @property
    def dtype(self):
        return self.base.dtype

    def spectral_weights(self, frequency):
        return self.base.spectral_weights(frequency)

    def __repr__(self):
        return f"GradientKernel({self.base!r})"


def spectral_distribution(kernel, num_samples, rng=None):
    """Draw num_samples unit-length-scale frequencies from the kernel's spectral measure."""
    num_samples = _check_count("num_samples", num_samples)
    if isinstance(kernel, GradientKernel):
        kernel = kernel.base
    if rng is None:
        rng = np.random.RandomState()
    frequency = kernel.sample_frequency(num_samples, rng)
    return np.asarray(frequency, dtype=kernel.dtype)


def spectral_weights(kernel, frequency):
    """Return (outer_weight, inner_weight) for the kernel."""
    return kernel.spectral_weights(frequency)


def make_kernel(name, length_scales=1.0, variance=1.0, output_dim=1, input_dim=None,
                dtype=np.float64):
    """String factory mirroring the kernel names used on the command line."""
    key = name.lower()
    if key in {"se", "rbf", "squared_exponential"}:
        return SquaredExponentialKernel(length_scales, variance, output_dim, input_dim, dtype)
    if key in {"matern12", "laplace"}:
        nu = 0.5
    elif key == "matern32":
        nu = 1.5
    elif key == "matern52":
        nu = 2.5
    else:
        raise InvalidArgument(f"Unknown kernel name: {name}")
    return MaternKernel(length_scales, variance, nu, output_dim, input_dim, dtype)


__all__ = [
    "EuclideanKernel", "SquaredExponentialKernel", "MaternKernel", "GradientKernel",
    "spectral_distribution", "spectral_weights", "make_kernel", "MATERN_ORDERS",
]
