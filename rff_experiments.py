"""Experiments for the Euclidean random-feature GP prior.

Modes:
  paths        draw prior sample paths on a 1-D grid and compare their pointwise variance to the kernel
  convergence  covariance error of a fixed basis versus the exact kernel for increasing num_features
  gradient     analytic gradient versus central finite differences, plus batched/unbatched agreement
  all          every mode above
"""
import argparse
import logging
import sys
import numpy as np

from fig_utils import set_experiment_save_dir, set_fig_formats
from model_utils import conditional_covariance, covariance_error, finite_difference_gradient
from priorBasis import EuclideanRandomFeatures, GradientKernel, make_kernel

# ================= Constants / Global Configuration =================
DEFAULT_KERNEL = "se"
DEFAULT_NUM_FEATURES = 1024
DEFAULT_NUM_SAMPLES = 8
DEFAULT_SEED = 0
CONVERGENCE_FEATURE_COUNTS = (16, 256, 4096)
CONVERGENCE_REPETITIONS = 20
GRID_SIZE = 200
GRID_RANGE = (-3.0, 3.0)
FD_STEP = 1e-5
MODES = ("paths", "convergence", "gradient", "all")

logger = logging.getLogger(__name__)


def configure_logging(quiet: bool = False, verbose: bool = False):
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format='[%(levelname)s] %(message)s')
    logger.debug("Logging configured. quiet=%s verbose=%s", quiet, verbose)


def _grid(kernel):
    (in_dim, _) = kernel.dims
    line = np.linspace(GRID_RANGE[0], GRID_RANGE[1], GRID_SIZE)
    # 1-D grid for plotting; higher dimensions walk the diagonal
    return line, np.tile(line, (in_dim, 1))


def run_sample_paths(kernel, num_features=DEFAULT_NUM_FEATURES, num_samples=DEFAULT_NUM_SAMPLES,
                     seed=DEFAULT_SEED, plots=True):
    """Draw num_samples prior paths and report the spread of their pointwise variance."""
    line, x = _grid(kernel)
    features = EuclideanRandomFeatures(kernel, num_features, num_samples=num_samples, random_state=seed)
    values = features.evaluate(x, kernel)[0]  # (N, S)
    predicted = np.diag(conditional_covariance(features, x, kernel)[0])
    variance = float(kernel.variance)
    result = {
        'mean_predicted_variance': float(np.mean(predicted)),
        'max_variance_deviation': float(np.max(np.abs(predicted - variance))),
        'kernel_variance': variance,
    }
    logger.info("Sample paths: mean variance %.4f (kernel %.4f), max deviation %.4f",
                result['mean_predicted_variance'], variance, result['max_variance_deviation'])
    if plots:
        from visualization import plot_sample_paths
        plot_sample_paths(line, values, repr(kernel), std=np.sqrt(variance) * np.ones_like(line))
    return result


def run_convergence(kernel, feature_counts=CONVERGENCE_FEATURE_COUNTS, repetitions=CONVERGENCE_REPETITIONS,
                    seed=DEFAULT_SEED, num_points=25, plots=True):
    """Covariance error per feature count, repeated over independently seeded bases."""
    (in_dim, _) = kernel.dims
    rng = np.random.RandomState(seed)
    x = rng.uniform(GRID_RANGE[0], GRID_RANGE[1], size=(in_dim, num_points))
    errors = {}
    for L in feature_counts:
        errors[L] = [covariance_error(kernel, x, L, random_state=seed + r) for r in range(repetitions)]
        logger.info("L=%5d  mean max|K_L - K| = %.4f  (x sqrt(L) = %.3f)",
                    L, np.mean(errors[L]), np.mean(errors[L]) * np.sqrt(L))
    if plots:
        from visualization import plot_covariance_convergence, plot_covariance_heatmaps
        plot_covariance_convergence(list(feature_counts), errors, repr(kernel))
        order = np.argsort(x[0])
        xs = x[:, order]
        features = EuclideanRandomFeatures(kernel, feature_counts[-1], random_state=seed)
        plot_covariance_heatmaps(kernel.covariance(xs), conditional_covariance(features, xs, kernel)[0],
                                 repr(kernel))
    return {L: float(np.mean(e)) for L, e in errors.items()}


def run_gradient_check(kernel, num_features=DEFAULT_NUM_FEATURES, num_samples=DEFAULT_NUM_SAMPLES,
                       seed=DEFAULT_SEED, eps=FD_STEP, plots=True):
    """Compare the analytic gradient with finite differences and the batched evaluator."""
    line, x = _grid(kernel)
    grad_kernel = GradientKernel(kernel)
    features = EuclideanRandomFeatures(kernel, num_features, num_samples=num_samples, random_state=seed)
    analytic = features.evaluate_gradient(x, grad_kernel)
    numeric = finite_difference_gradient(features, x, kernel, eps=eps)
    batched = features.evaluate_gradient_batched(np.repeat(x[:, :, None], num_samples, axis=2), grad_kernel)
    result = {
        'max_fd_error': float(np.max(np.abs(analytic - numeric))),
        'max_batched_error': float(np.max(np.abs(analytic - batched))),
    }
    logger.info("Gradient: max |analytic - finite difference| = %.3e, max |unbatched - batched| = %.3e",
                result['max_fd_error'], result['max_batched_error'])
    if plots:
        from visualization import plot_gradient_check
        plot_gradient_check(line, analytic[0, :, 0], numeric[0, :, 0], repr(kernel))
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Random Fourier feature GP prior experiments")
    parser.add_argument("--mode", choices=MODES, default="all", help="Experiment to run (default: all)")
    parser.add_argument("--kernel", type=str, default=DEFAULT_KERNEL,
                        help="Kernel name: se/rbf, matern12/laplace, matern32, matern52")
    parser.add_argument("--length-scale", type=float, nargs='+', default=[1.0],
                        help="Length scale(s); one value per input dimension or a single shared value")
    parser.add_argument("--input-dim", type=int, default=None, help="Input dimension when sharing one length scale")
    parser.add_argument("--variance", type=float, default=1.0, help="Kernel variance")
    parser.add_argument("--num-features", type=int, default=DEFAULT_NUM_FEATURES)
    parser.add_argument("--num-samples", type=int, default=DEFAULT_NUM_SAMPLES)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--fig-formats", type=str, default="png",
                        help="Comma separated figure formats to save (default: png). Example: png,svg,pdf")
    parser.add_argument("--no-plots", dest="plots", action="store_false", help="Skip figure generation")
    parser.add_argument("--verbose", action="store_true", default=False, help="Verbose debug output")
    parser.add_argument("--quiet", action="store_true", default=False, help="Suppress most logs (overrides --verbose)")
    args = parser.parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    kernel = make_kernel(args.kernel, args.length_scale, args.variance, input_dim=args.input_dim)
    logger.info("Kernel: %r", kernel)
    if args.plots:
        set_fig_formats([f for f in args.fig_formats.split(',')])
        out_dir = set_experiment_save_dir(args.kernel.lower())
        logger.info("Figures will be written to %s", out_dir)

    runs = {
        "paths": lambda: run_sample_paths(kernel, args.num_features, args.num_samples, args.seed, args.plots),
        "convergence": lambda: run_convergence(kernel, seed=args.seed, plots=args.plots),
        "gradient": lambda: run_gradient_check(kernel, args.num_features, args.num_samples, args.seed,
                                               plots=args.plots),
    }
    selected = list(runs) if args.mode == "all" else [args.mode]
    summary = {}
    for name in selected:
        logger.info("%s", "=" * 60)
        logger.info("Running %s", name)
        try:
            summary[name] = runs[name]()
        except Exception as e:
            logger.warning("%s failed: %s", name, e)
            summary[name] = f"ERROR: {e}"
    failed = [name for name, res in summary.items() if isinstance(res, str)]
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
