"""Figure output handling for the random-feature experiments.

Usage:
  from fig_utils import set_experiment_save_dir, save_fig, set_fig_formats
  set_fig_formats(["png", "pdf"])
  set_experiment_save_dir("se_convergence")
  ... plot ...
  save_fig("covariance_convergence")

Only paths and formats live here; plotting lives in visualization.py.
"""
from __future__ import annotations
import logging
import os
from datetime import datetime
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

RUN_TAG = datetime.now().strftime('%Y%m%d_%H%M%S')
FIG_SAVE_ROOT = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'figures')
SUPPORTED_FORMATS = ("png", "svg", "pdf")
CURRENT_FIG_SAVE_DIR: str | None = None
FIG_FORMATS = ["png"]


def set_fig_formats(formats):
    """Configure output formats, dropping unsupported entries and duplicates (order kept).
    Falls back to ['png'] when nothing valid remains.
    """
    global FIG_FORMATS
    cleaned = []
    for f in (formats or []):
        f = str(f).lower().strip()
        if f in SUPPORTED_FORMATS and f not in cleaned:
            cleaned.append(f)
    FIG_FORMATS = cleaned or ["png"]
    return FIG_FORMATS


def set_experiment_save_dir(tag: str, root: str | None = None):
    """Point figure output at <root>/<tag>_<RUN_TAG> and return that path."""
    global CURRENT_FIG_SAVE_DIR
    CURRENT_FIG_SAVE_DIR = os.path.join(root or FIG_SAVE_ROOT, f"{tag}_{RUN_TAG}")
    return CURRENT_FIG_SAVE_DIR


def save_fig(name: str, dpi: int = 200):
    """Save the current matplotlib figure once per configured format; returns written paths."""
    if CURRENT_FIG_SAVE_DIR is None:
        raise ValueError("Call set_experiment_save_dir() before saving figures.")
    os.makedirs(CURRENT_FIG_SAVE_DIR, exist_ok=True)
    base, ext = os.path.splitext(name.replace(' ', '_'))
    if ext.lstrip('.').lower() not in SUPPORTED_FORMATS:
        base = base + ext
    written = []
    for fmt in FIG_FORMATS:
        out_path = os.path.join(CURRENT_FIG_SAVE_DIR, f"{base}.{fmt}")
        plt.savefig(out_path, format=fmt, dpi=dpi, bbox_inches='tight')
        logger.info("Saved %s figure: %s", fmt.upper(), out_path)
        written.append(out_path)
    return written


__all__ = [
    'RUN_TAG', 'FIG_SAVE_ROOT', 'SUPPORTED_FORMATS', 'CURRENT_FIG_SAVE_DIR', 'FIG_FORMATS',
    'set_fig_formats', 'set_experiment_save_dir', 'save_fig'
]
