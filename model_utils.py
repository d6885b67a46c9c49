"""Diagnostic helpers built on EuclideanRandomFeatures (avoid code duplication).

conditional_covariance(features, x, kernel)
  Exact covariance over the weights for a fixed frequency/phase basis.
empirical_covariance(kernel, x, num_features, ...)
  Covariance of evaluate() values pooled over fresh random-feature instances.
finite_difference_gradient(features, x, kernel, eps)
  Central differences of evaluate() with respect to each input coordinate.
"""
from __future__ import annotations
import numpy as np
from priorBasis import EuclideanRandomFeatures


def conditional_covariance(features: EuclideanRandomFeatures, x: np.ndarray, kernel):
    """Covariance of f(x) given the sampled frequencies and phases.

    Standard-normal weights give Phi @ Phi^T per output dimension; returns (output_dim, N, N).
    """
    Phi = features.feature_matrix(x, kernel)
    return np.einsum('onl,oml->onm', Phi, Phi)


def covariance_error(kernel, x: np.ndarray, num_features: int, random_state=None):
    """Max abs deviation between the fixed-basis covariance and the exact kernel at x."""
    features = EuclideanRandomFeatures(kernel, num_features, random_state=random_state)
    approx = conditional_covariance(features, x, kernel)
    exact = kernel.covariance(x)
    return float(np.max(np.abs(approx - exact[None, :, :])))


def empirical_covariance(kernel, x: np.ndarray, num_features: int, num_instances: int = 100,
                         num_samples: int = 16, random_state=None):
    """Covariance (N, N) of scalar-output sample values pooled over fresh instances.

    Instance i is seeded with random_state + i so the whole estimate is reproducible.
    """
    (_, out_dim) = kernel.dims
    if out_dim != 1:
        raise ValueError(f"empirical_covariance expects a scalar-output kernel; got output_dim={out_dim}")
    base = 0 if random_state is None else int(random_state)
    draws = []
    for i in range(num_instances):
        seed = None if random_state is None else base + i
        features = EuclideanRandomFeatures(kernel, num_features, num_samples=num_samples, random_state=seed)
        draws.append(features.evaluate(x, kernel)[0])  # (N, S)
    F = np.concatenate(draws, axis=1)
    # zero-mean process: no centering
    return F @ F.T / F.shape[1]


def finite_difference_gradient(features: EuclideanRandomFeatures, x: np.ndarray, kernel, eps: float = 1e-5):
    """Central differences of the scalar output of evaluate(); returns (input_dim, N, num_samples)."""
    x = np.asarray(x, dtype=features.dtype)
    grad = np.zeros((x.shape[0], x.shape[1], features.num_samples), dtype=features.dtype)
    for i in range(x.shape[0]):
        step = np.zeros_like(x)
        step[i, :] = eps
        f_plus = features.evaluate(x + step, kernel)[0]
        f_minus = features.evaluate(x - step, kernel)[0]
        grad[i] = (f_plus - f_minus) / (2 * eps)
    return grad


__all__ = ["conditional_covariance", "covariance_error", "empirical_covariance", "finite_difference_gradient"]
