"""Shared plotting styles for trailblazer visualizations.

This module provides:
- The color scheme and a path-progress colormap
- Common axis and legend styling
- Figure creation and saving helpers
"""

import logging
from pathlib import Path
from typing import Tuple

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.figure import Figure

from .config import (
    PLOT_BLUE,
    PLOT_CREAM,
    PLOT_DARK_BLUE,
    PLOT_ORANGE,
    PLOT_TAUPE,
    PLOT_YELLOW_ORANGE,
)

__all__ = [
    "PLOT_ORANGE",
    "PLOT_BLUE",
    "PLOT_CREAM",
    "PLOT_TAUPE",
    "PLOT_YELLOW_ORANGE",
    "PLOT_DARK_BLUE",
    "PROGRESS_CMAP",
    "style_axis",
    "add_legend",
    "create_figure",
    "save_figure",
]

PROGRESS_CMAP = LinearSegmentedColormap.from_list("trailblazer", [PLOT_ORANGE, PLOT_BLUE])
"""Colormap from path start (orange) to path end (blue)."""


def style_axis(
    ax: Axes,
    title: str = "",
    xlabel: str = "",
    ylabel: str = "",
    grid: bool = True,
    dark_mode: bool = False,
    equal: bool = False,
) -> None:
    """Apply consistent styling to a matplotlib axis.

    Args:
        ax: Matplotlib axis to style.
        title: Plot title (optional).
        xlabel: X-axis label (optional).
        ylabel: Y-axis label (optional).
        grid: Whether to show grid lines (default: True).
        dark_mode: Whether to use dark mode styling (default: False).
        equal: Whether to force an equal aspect ratio, for path plots.
    """
    text_kwargs = {"color": PLOT_CREAM} if dark_mode else {}

    if title:
        ax.set_title(title, fontweight="bold", **text_kwargs)
    if xlabel:
        ax.set_xlabel(xlabel, **text_kwargs)
    if ylabel:
        ax.set_ylabel(ylabel, **text_kwargs)

    if grid:
        ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)

    if equal:
        ax.set_aspect("equal", adjustable="datalim")

    if dark_mode:
        ax.set_facecolor(PLOT_DARK_BLUE)
        ax.tick_params(colors=PLOT_CREAM)
        for spine in ax.spines.values():
            spine.set_edgecolor(PLOT_TAUPE)


def add_legend(ax: Axes, loc: str = "best", dark_mode: bool = False, **kwargs) -> None:
    """Add a legend with the package styling.

    Args:
        ax: Matplotlib axis to add legend to.
        loc: Legend location (default: "best").
        dark_mode: Whether to use dark mode styling (default: False).
        **kwargs: Additional keyword arguments passed to ax.legend().
    """
    legend_kwargs = {
        "loc": loc,
        "framealpha": 0.9,
        "edgecolor": PLOT_TAUPE,
    }
    if dark_mode:
        legend_kwargs["facecolor"] = PLOT_DARK_BLUE
        legend_kwargs["labelcolor"] = PLOT_CREAM

    # User kwargs take precedence
    legend_kwargs.update(kwargs)
    ax.legend(**legend_kwargs)


def create_figure(
    figsize: Tuple[float, float] = (10, 8), dark_mode: bool = False, title: str = "", ncols: int = 1
) -> Tuple[Figure, object]:
    """Create a figure with one row of `ncols` axes.

    Returns:
        Tuple of (figure, axes); axes is a single Axes when ncols == 1.
    """
    facecolor = PLOT_DARK_BLUE if dark_mode else None
    fig, axes = plt.subplots(1, ncols, figsize=figsize, facecolor=facecolor)
    if title:
        text_kwargs = {"color": PLOT_CREAM} if dark_mode else {}
        fig.suptitle(title, fontsize=14, fontweight="bold", **text_kwargs)
    return fig, axes


def save_figure(fig: Figure, filepath: Path, dpi: int = 150, bbox_inches: str = "tight") -> None:
    """Save figure with consistent settings.

    Args:
        fig: Matplotlib figure to save.
        filepath: Path where to save the figure.
        dpi: Resolution in dots per inch (default: 150).
        bbox_inches: Bounding box setting (default: "tight").
    """
    fig.savefig(filepath, dpi=dpi, bbox_inches=bbox_inches)
    logging.info(f"Saved figure to {filepath}")
