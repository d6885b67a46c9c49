"""Euclidean random Fourier features for Gaussian process prior sample paths (numpy-only core).

A GP f ~ GP(0, k) with stationary kernel k is approximated by
    f(x) = outer * sqrt(2/L) * sum_l w_l cos(omega_l . (x / inner) + b_l)
with omega_l drawn from the spectral measure of k, b_l ~ U[0, 2pi) and w_l ~ N(0, 1).

API: EuclideanRandomFeatures(kernel, num_features, num_samples=1, random_state=None)
Methods:
  resample(kernel, num_features=None, num_samples=None)
  evaluate(x, kernel)                           x: (input_dim, N)             -> (output_dim, N, S)
  evaluate_gradient(x, gradient_kernel)         x: (input_dim, N)             -> (input_dim, N, S)
  evaluate_gradient_batched(x, gradient_kernel) x: (input_dim, N, S)          -> (input_dim, N, S)
  feature_matrix(x, kernel)                     x: (input_dim, N)             -> (output_dim, N, L)
  __call__(x, kernel) dispatches on kernel type and input rank.
Resampling does NOT update any model holding values derived from the old basis.
"""
from __future__ import annotations
import copy
import logging
import numbers
import numpy as np

from .errors import InvalidArgument, ShapeMismatch, UnsupportedKernel
from .kernels import GradientKernel, spectral_distribution, spectral_weights

logger = logging.getLogger(__name__)


class EuclideanRandomFeatures:
    """A set of Euclidean random features (frequency, phase) with associated basis weights.

    Shapes: frequency (input_dim, output_dim, L), phase (output_dim, L), weights (L, S),
    where L is the number of features and S the number of sample paths.
    """

    def __init__(self, kernel, num_features, num_samples=1, random_state=None):
        (in_dim, out_dim) = _kernel_dims(kernel)
        num_features = _check_positive("num_features", num_features)
        num_samples = _check_positive("num_samples", num_samples)
        self.dtype = getattr(kernel, 'dtype', np.float64)
        self.rng = np.random.RandomState(random_state)
        self.frequency = np.zeros((in_dim, out_dim, num_features), dtype=self.dtype)
        self.phase = np.zeros((out_dim, num_features), dtype=self.dtype)
        self.weights = np.zeros((num_features, num_samples), dtype=self.dtype)
        self.resample(kernel)

    # -------------------------------- properties --------------------------------
    @property
    def num_features(self):
        return self.frequency.shape[-1]

    @property
    def num_samples(self):
        return self.weights.shape[1]

    @property
    def dims(self):
        return self.frequency.shape[:2]

    # -------------------------------- sampling --------------------------------
    def resample(self, kernel, num_features=None, num_samples=None):
        """Draw new frequencies from the spectral measure of kernel, new phases uniformly
        from [0, 2pi) and new standard-normal weights.

        num_features defaults to the current feature count and num_samples to the current
        number of weight columns. Does NOT resample anything holding the old basis.
        """
        (in_dim, out_dim) = _kernel_dims(kernel)
        if num_features is None:
            num_features = self.num_features
        if num_samples is None:
            num_samples = self.num_samples
        num_features = _check_positive("num_features", num_features)
        num_samples = _check_positive("num_samples", num_samples)
        fl = self.dtype

        frequency = np.asarray(spectral_distribution(kernel, num_features, rng=self.rng), dtype=fl)
        if frequency.shape != (in_dim, out_dim, num_features):
            raise ShapeMismatch(
                f"spectral_distribution returned shape {frequency.shape}; "
                f"expected {(in_dim, out_dim, num_features)}")
        self.frequency = frequency
        two_pi = fl(2 * np.pi)
        # float rounding can land on 2pi itself; phases stay in [0, 2pi)
        self.phase = np.mod(two_pi * self.rng.random_sample((out_dim, num_features)).astype(fl), two_pi)
        self.weights = self.rng.standard_normal((num_features, num_samples)).astype(fl)
        logger.debug("Resampled random features: dims=%s num_features=%d num_samples=%d",
                     (in_dim, out_dim), num_features, num_samples)

    def copy(self):
        """Independent snapshot (arrays and RNG state) for reads across a resample."""
        return copy.deepcopy(self)

    # -------------------------------- evaluation --------------------------------
    def __call__(self, x, kernel):
        if isinstance(kernel, GradientKernel):
            if np.ndim(x) == 3:
                return self.evaluate_gradient_batched(x, kernel)
            return self.evaluate_gradient(x, kernel)
        return self.evaluate(x, kernel)

    def evaluate(self, x, kernel):
        """Evaluate f(x), f a GP with kernel k, for x of shape (input_dim, N).

        Returns (output_dim, N, num_samples): every point against every sample path.
        """
        if isinstance(kernel, GradientKernel):
            raise UnsupportedKernel("evaluate() takes a value kernel; use evaluate_gradient() for GradientKernel")
        x = self._check_points(x, kernel)
        basis_fn_inner_prod, _ = self._inner_product(x, kernel)
        basis_fn = np.cos(basis_fn_inner_prod + self.phase[:, :, None])
        basis_weight = self._basis_weight(kernel)
        return np.einsum('oln,ls->ons', basis_fn, basis_weight)

    def feature_matrix(self, x, kernel):
        """Scaled basis functions Phi of shape (output_dim, N, L), so that f = Phi @ weights.

        Phi @ Phi^T is the covariance of f(x) over the weights for this frequency/phase basis.
        """
        if isinstance(kernel, GradientKernel):
            raise UnsupportedKernel("feature_matrix() takes a value kernel; got GradientKernel")
        x = self._check_points(x, kernel)
        fl = self.dtype
        basis_fn_inner_prod, _ = self._inner_product(x, kernel)
        basis_fn = np.cos(basis_fn_inner_prod + self.phase[:, :, None])
        (outer_weights, _) = spectral_weights(kernel, self.frequency)
        scale = np.asarray(outer_weights, dtype=fl) * np.sqrt(fl(2)) / np.sqrt(fl(self.num_features))
        scale = np.broadcast_to(scale, (self.num_features,))
        return (basis_fn * scale[None, :, None]).transpose(0, 2, 1)

    def evaluate_gradient(self, x, kernel):
        """Evaluate (grad g)(x), g a scalar GP with the kernel wrapped by kernel, for x (input_dim, N).

        Returns (input_dim, N, num_samples): every point against every sample path.
        """
        self._check_gradient_kernel(kernel)
        x = self._check_points(x, kernel)
        basis_fn_grad = self._basis_gradient(x, kernel)
        basis_weight = self._basis_weight(kernel)
        return np.einsum('iln,ls->ins', basis_fn_grad, basis_weight)

    def evaluate_gradient_batched(self, x, kernel):
        """Evaluate (grad g) for batched data x of shape (input_dim, N, num_samples).

        Sample path s is evaluated only at its own points x[:, :, s].
        """
        self._check_gradient_kernel(kernel)
        x = np.asarray(x, dtype=self.dtype)
        (in_dim, _) = self.dims
        if x.ndim != 3 or x.shape[0] != in_dim or x.shape[2] != self.num_samples:
            raise ShapeMismatch(
                f"batched x must have shape ({in_dim}, N, {self.num_samples}); got {x.shape}")
        self._check_kernel_dims(kernel)
        (d, n, s) = x.shape
        basis_fn_grad = self._basis_gradient(x.reshape(d, n * s), kernel)
        basis_fn_grad_batched = basis_fn_grad.reshape(d, self.num_features, n, s)
        basis_weight = self._basis_weight(kernel)
        return np.einsum('ilns,ls->ins', basis_fn_grad_batched, basis_weight)

    # -------------------------------- internal utils --------------------------------
    def _check_points(self, x, kernel):
        x = np.asarray(x, dtype=self.dtype)
        (in_dim, _) = self.dims
        if x.ndim != 2 or x.shape[0] != in_dim:
            raise ShapeMismatch(f"x must have shape ({in_dim}, N); got {x.shape}")
        self._check_kernel_dims(kernel)
        return x

    def _check_kernel_dims(self, kernel):
        if tuple(kernel.dims) != tuple(self.dims):
            raise ShapeMismatch(f"kernel dims {tuple(kernel.dims)} do not match features dims {tuple(self.dims)}")

    def _check_gradient_kernel(self, kernel):
        if not isinstance(kernel, GradientKernel):
            raise UnsupportedKernel(f"gradient evaluation requires a GradientKernel; got {type(kernel).__name__}")
        (_, out_dim) = kernel.dims
        if out_dim != 1:
            raise UnsupportedKernel(f"gradient evaluation requires output_dim == 1; got {out_dim}")

    def _inner_product(self, x, kernel):
        (_, inner_weights) = spectral_weights(kernel, self.frequency)
        inner_weights = np.asarray(inner_weights, dtype=self.dtype)
        rescaled_x = x / inner_weights[:, None]
        basis_fn_inner_prod = np.einsum('iol,in->oln', self.frequency, rescaled_x)
        return basis_fn_inner_prod, inner_weights

    def _basis_gradient(self, x, kernel):
        # output axis has length 1 here, drop it: (input_dim, L, N)
        basis_fn_inner_prod, inner_weights = self._inner_product(x, kernel)
        basis_fn_grad_outer = -np.sin(basis_fn_inner_prod + self.phase[:, :, None])
        frequency = self.frequency[:, 0, :] / inner_weights[:, None]
        return frequency[:, :, None] * basis_fn_grad_outer[0][None, :, :]

    def _basis_weight(self, kernel):
        fl = self.dtype
        (outer_weights, _) = spectral_weights(kernel, self.frequency)
        outer_weights = np.asarray(outer_weights, dtype=fl)
        if outer_weights.ndim == 1:
            outer_weights = outer_weights[:, None]
        return outer_weights * np.sqrt(fl(2)) / np.sqrt(fl(self.num_features)) * self.weights


def _check_positive(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer; got {value!r}")
    return int(value)


def _kernel_dims(kernel):
    (in_dim, out_dim) = kernel.dims
    if in_dim <= 0 or out_dim <= 0:
        raise InvalidArgument(f"kernel dims must be positive; got {(in_dim, out_dim)}")
    return int(in_dim), int(out_dim)


__all__ = ["EuclideanRandomFeatures"]
