"""
Visualization of splines and tracking runs.

Path authors use `plot_spline` to check a control-point layout before a run;
`plot_tracking_run` compares a simulated (or logged) trajectory to the path.
"""

from pathlib import Path
from typing import Optional

import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .config import SAMPLES_PER_SEGMENT
from .plot_styles import (
    PLOT_BLUE,
    PLOT_ORANGE,
    PLOT_TAUPE,
    PLOT_YELLOW_ORANGE,
    PROGRESS_CMAP,
    add_legend,
    create_figure,
    save_figure,
    style_axis,
)
from .simulation import TrackingRun
from .spline import Spline


def plot_spline(
    spline: Spline,
    ax: Optional[Axes] = None,
    samples_per_segment: int = SAMPLES_PER_SEGMENT,
    show_control_points: bool = True,
    show_tangents: bool = False,
    dark_mode: bool = False,
) -> Axes:
    """Plot the curve, its control points and segment joins.

    Args:
        spline: Spline to draw.
        ax: Axis to draw on. Default: a new figure.
        samples_per_segment: Curve resolution.
        show_control_points: Draw the control polygon.
        show_tangents: Draw the tangent at every segment start.
        dark_mode: Use dark styling.

    Returns:
        The axis drawn on.
    """
    if ax is None:
        _, ax = create_figure(figsize=(8, 8), dark_mode=dark_mode)

    samples = spline.sample(samples_per_segment)
    ax.plot(samples[:, 0], samples[:, 1], color=PLOT_BLUE, linewidth=2, label="Path")

    joins = np.array([[p.x, p.y] for p in spline.control_points[1:-1]])
    ax.scatter(joins[:, 0], joins[:, 1], color=PLOT_ORANGE, s=25, zorder=3, label="Segment joins")

    if show_control_points:
        points = np.array([[p.x, p.y] for p in spline.control_points])
        ax.plot(
            points[:, 0],
            points[:, 1],
            linestyle="--",
            marker="o",
            color=PLOT_TAUPE,
            alpha=0.6,
            label="Control points",
        )

    if show_tangents:
        for segment in range(spline.segment_count()):
            start = spline.point(0.0, segment=segment)
            tangent = spline.tangent(0.0, segment=segment)
            ax.arrow(
                start.x,
                start.y,
                tangent.x * 0.25,
                tangent.y * 0.25,
                head_width=0.05,
                color=PLOT_YELLOW_ORANGE,
                length_includes_head=True,
            )

    style_axis(ax, title="Spline", xlabel="X", ylabel="Y", dark_mode=dark_mode, equal=True)
    add_legend(ax, dark_mode=dark_mode)
    return ax


def plot_tracking_run(
    spline: Spline,
    run: TrackingRun,
    dark_mode: bool = False,
    filepath: Optional[Path] = None,
) -> Figure:
    """Plot a tracking run next to its cross-track error over time.

    Args:
        spline: Path that was followed.
        run: Recorded trajectory.
        dark_mode: Use dark styling.
        filepath: If given, also save the figure there.

    Returns:
        Figure with two axes: trajectory and cross-track error.
    """
    fig, (ax_path, ax_error) = create_figure(figsize=(14, 6), dark_mode=dark_mode, ncols=2)

    plot_spline(spline, ax=ax_path, show_control_points=False, dark_mode=dark_mode)
    ax_path.scatter(
        run.x, run.y, c=np.linspace(0.0, 1.0, len(run)), cmap=PROGRESS_CMAP, s=8, label="Robot"
    )
    ax_path.plot(run.x[0], run.y[0], marker="s", color=PLOT_ORANGE, markersize=8, label="Start")
    style_axis(ax_path, title="Trajectory", dark_mode=dark_mode, equal=True)
    add_legend(ax_path, dark_mode=dark_mode)

    ax_error.plot(run.t, run.cross_track_error, color=PLOT_ORANGE, linewidth=1.5)
    style_axis(
        ax_error,
        title="Cross-Track Error",
        xlabel="Time (s)",
        ylabel="Distance to path",
        dark_mode=dark_mode,
    )

    fig.tight_layout()
    if filepath is not None:
        save_figure(fig, filepath)
    return fig
