import numpy as np
import sys
import os
from scipy import stats
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from priorBasis import EuclideanRandomFeatures, MaternKernel, SquaredExponentialKernel
from model_utils import covariance_error, empirical_covariance


def test_resample_draws_fresh_independent_basis():
    kernel = SquaredExponentialKernel(1.0)
    features = EuclideanRandomFeatures(kernel, 4096, num_samples=3, random_state=0)
    old_frequency = features.frequency.copy()
    old_phase = features.phase.copy()
    old_weights = features.weights.copy()
    features.resample(kernel)
    assert features.weights.shape == old_weights.shape
    # independence checked distributionally, not by bit equality
    assert abs(np.corrcoef(old_frequency.ravel(), features.frequency.ravel())[0, 1]) < 0.1
    assert abs(np.corrcoef(old_phase.ravel(), features.phase.ravel())[0, 1]) < 0.1
    assert abs(np.corrcoef(old_weights.ravel(), features.weights.ravel())[0, 1]) < 0.1
    assert stats.kstest(features.phase.ravel() / (2 * np.pi), 'uniform').pvalue > 1e-3
    assert stats.kstest(features.weights.ravel(), 'norm').pvalue > 1e-3
    assert stats.kstest(features.frequency.ravel(), 'norm').pvalue > 1e-3


def test_variance_at_origin_matches_kernel_variance():
    kernel = SquaredExponentialKernel(1.0, variance=1.0)
    x = np.zeros((1, 1))
    values = []
    for seed in range(1000):
        features = EuclideanRandomFeatures(kernel, 1024, num_samples=8, random_state=seed)
        values.append(features.evaluate(x, kernel)[0, 0, :])
    values = np.concatenate(values)
    assert abs(np.mean(values)) < 0.1
    assert abs(np.var(values) - 1.0) < 0.1


def test_empirical_covariance_matches_kernel():
    kernel = SquaredExponentialKernel([0.8, 1.5], variance=2.0)
    x = np.array([[0.0, 0.5, -1.0], [0.0, 1.0, 0.3]])
    cov = empirical_covariance(kernel, x, num_features=256, num_instances=200, num_samples=32, random_state=1)
    np.testing.assert_allclose(cov, kernel.covariance(x), atol=0.2)


def _mean_errors(kernel, x, counts, repetitions=10):
    return [np.mean([covariance_error(kernel, x, L, random_state=r) for r in range(repetitions)]) for L in counts]


def test_covariance_error_shrinks_with_num_features():
    x = np.random.RandomState(0).uniform(-2, 2, size=(2, 12))
    counts = (16, 256, 4096)
    for kernel in (SquaredExponentialKernel([1.0, 0.7]), MaternKernel([1.0, 0.7], nu=2.5)):
        errors = _mean_errors(kernel, x, counts)
        assert errors[0] > errors[1] > errors[2]
        assert errors[2] < 0.1
        # roughly O(1/sqrt(L)): 256x more features cuts the error by far more than 4x
        assert errors[0] / errors[2] > 4
