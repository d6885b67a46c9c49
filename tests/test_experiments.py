import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import fig_utils
import rff_experiments
from priorBasis import make_kernel


def test_sample_paths_variance_close_to_kernel():
    kernel = make_kernel("matern32", 0.8, variance=2.0)
    res = rff_experiments.run_sample_paths(kernel, num_features=2048, num_samples=4, seed=0, plots=False)
    assert abs(res['mean_predicted_variance'] - 2.0) < 0.2


def test_convergence_errors_decrease():
    kernel = make_kernel("se", [1.0, 0.5])
    res = rff_experiments.run_convergence(kernel, feature_counts=(16, 1024), repetitions=5, seed=0,
                                          num_points=10, plots=False)
    assert res[16] > res[1024]


def test_gradient_check_agrees():
    kernel = make_kernel("se", 0.7)
    res = rff_experiments.run_gradient_check(kernel, num_features=128, num_samples=3, seed=1, plots=False)
    assert res['max_fd_error'] < 1e-5
    assert res['max_batched_error'] < 1e-10


def test_figures_are_written(tmp_path):
    fig_utils.set_fig_formats(["png", "bmp", "png"])
    assert fig_utils.FIG_FORMATS == ["png"]
    out_dir = fig_utils.set_experiment_save_dir("se_test", root=str(tmp_path))
    kernel = make_kernel("se", 1.0)
    rff_experiments.run_sample_paths(kernel, num_features=64, num_samples=3, seed=0)
    rff_experiments.run_convergence(kernel, feature_counts=(8, 64), repetitions=2, num_points=6)
    rff_experiments.run_gradient_check(kernel, num_features=64, num_samples=2)
    written = sorted(os.listdir(out_dir))
    assert written == ['covariance_convergence.png', 'covariance_heatmaps.png',
                       'gradient_check.png', 'prior_sample_paths.png']


def test_main_returns_zero_without_plots():
    assert rff_experiments.main(["--mode", "gradient", "--kernel", "matern52", "--num-features", "64",
                                 "--no-plots", "--quiet"]) == 0


def test_main_reports_failure_for_vector_output_gradient(monkeypatch):
    original = rff_experiments.make_kernel

    def vector_kernel(*args, **kwargs):
        kwargs['output_dim'] = 2
        return original(*args, **kwargs)

    monkeypatch.setattr(rff_experiments, "make_kernel", vector_kernel)
    assert rff_experiments.main(["--mode", "gradient", "--num-features", "16", "--no-plots", "--quiet"]) == 1
