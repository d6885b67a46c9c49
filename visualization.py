"""Plots for random-feature prior sample paths and their diagnostics.

Side-effect free except for file outputs via fig_utils.save_fig.
"""
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
from fig_utils import save_fig


def plot_sample_paths(grid, values, kernel_name, std=None, max_paths=8):
    """grid: (N,), values: (N, S) sample paths on a 1-D grid."""
    fig, ax = plt.subplots(figsize=(7, 4))
    palette = sns.color_palette("husl", min(max_paths, values.shape[1]))
    for s, color in enumerate(palette):
        ax.plot(grid, values[:, s], color=color, lw=1.2, alpha=0.85)
    if std is not None:
        ax.fill_between(grid, -2 * std, 2 * std, color='grey', alpha=0.15, label='prior ±2σ')
        ax.legend(loc='upper right', fontsize=8)
    ax.set_title(f'Prior sample paths ({kernel_name})', fontsize=12)
    ax.set_xlabel('x', fontsize=10); ax.set_ylabel('f(x)', fontsize=10)
    plt.tight_layout(); paths = save_fig('prior_sample_paths'); plt.close(fig)
    return paths


def plot_covariance_convergence(feature_counts, errors, kernel_name):
    """errors: {L: [error per repetition]}; draws the mean error and an O(1/sqrt(L)) guide."""
    counts = np.asarray(feature_counts, dtype=float)
    means = np.array([np.mean(errors[L]) for L in feature_counts])
    fig, ax = plt.subplots(figsize=(5.5, 4))
    for L in feature_counts:
        ax.scatter(np.full(len(errors[L]), L), errors[L], s=10, alpha=0.35, color='#1f77b4')
    ax.plot(counts, means, marker='o', color='#d62728', label='mean max |K_L - K|')
    ax.plot(counts, means[0] * np.sqrt(counts[0] / counts), ls='--', color='k', label='O(1/√L)')
    ax.set_xscale('log'); ax.set_yscale('log')
    ax.set_xlabel('num_features L', fontsize=10); ax.set_ylabel('covariance error', fontsize=10)
    ax.set_title(f'Covariance convergence ({kernel_name})', fontsize=12)
    ax.legend(fontsize=8)
    plt.tight_layout(); paths = save_fig('covariance_convergence'); plt.close(fig)
    return paths


def plot_covariance_heatmaps(exact, approx, kernel_name):
    fig, axes = plt.subplots(1, 3, figsize=(13, 4))
    vmax = float(np.max(np.abs(exact)))
    for ax, data, title in zip(axes, [exact, approx, approx - exact], ['exact', 'random features', 'difference']):
        sns.heatmap(data, ax=ax, cmap='RdBu_r', center=0.0,
                    vmin=-vmax if title != 'difference' else None,
                    vmax=vmax if title != 'difference' else None,
                    xticklabels=False, yticklabels=False, cbar_kws={'shrink': 0.75})
        ax.set_title(f'{title}', fontsize=11)
    fig.suptitle(f'Covariance ({kernel_name})', fontsize=12)
    plt.tight_layout(); paths = save_fig('covariance_heatmaps'); plt.close(fig)
    return paths


def plot_gradient_check(grid, analytic, numeric, kernel_name):
    """grid: (N,), analytic/numeric: (N,) derivative of one sample path."""
    fig, axes = plt.subplots(1, 2, figsize=(11, 4))
    axes[0].plot(grid, analytic, lw=1.5, label='analytic')
    axes[0].plot(grid, numeric, ls='--', lw=1.2, label='finite difference')
    axes[0].set_title(f'df/dx ({kernel_name})', fontsize=11); axes[0].legend(fontsize=8)
    axes[1].semilogy(grid, np.abs(analytic - numeric) + 1e-16, color='#9467bd')
    axes[1].set_title('absolute difference', fontsize=11)
    for ax in axes:
        ax.set_xlabel('x', fontsize=10)
    plt.tight_layout(); paths = save_fig('gradient_check'); plt.close(fig)
    return paths
