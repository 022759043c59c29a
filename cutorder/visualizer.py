import logging
import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from .job_parser import Job
from .models import OptimizationResult
from .utils.geometry import tessellate_chain

logger = logging.getLogger(__name__)


def _chain_xy(chain) -> np.ndarray:
    points = tessellate_chain(chain)
    if not points:
        return np.empty((0, 2))
    return np.array([(p.x, p.y) for p in points])


def plot_cut_order(job: Job, result: OptimizationResult, output_file: Optional[str] = None,
                   show: bool = True, dpi: int = 300, font_size: int = 8):
    """
    Plot the job's chains, the cut sequence, and the rapids between cuts.

    Args:
        job: Parsed job (chains are drawn from here)
        result: Optimization result to visualize
        output_file: Optional path to save the plot
        show: Open an interactive window
        dpi: Plot resolution
        font_size: Font size for annotations

    Returns:
        The matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(10, 8), dpi=dpi)

    # Chains that are not cut in this result stay grey
    cut_chain_ids = {cut.chain_id for cut in result.ordered_cuts}
    for chain_id, chain in job.chains.items():
        xy = _chain_xy(chain)
        if xy.size == 0:
            continue
        color = 'blue' if chain_id in cut_chain_ids else 'lightgrey'
        ax.plot(xy[:, 0], xy[:, 1], color=color, linewidth=1.5)

    # Rapids as dashed arrows
    for i, rapid in enumerate(result.rapids):
        dx = rapid.end.x - rapid.start.x
        dy = rapid.end.y - rapid.start.y
        if np.hypot(dx, dy) < 1e-9:
            continue
        ax.annotate(
            '', xy=(rapid.end.x, rapid.end.y), xytext=(rapid.start.x, rapid.start.y),
            arrowprops=dict(arrowstyle='->', color='red', linestyle='--', linewidth=1, alpha=0.7)
        )
        if i == 0:
            ax.plot([], [], color='red', linestyle='--', label="Rapids")

    # Number each cut at its pierce point
    for order, (cut, rapid) in enumerate(zip(result.ordered_cuts, result.rapids), 1):
        ax.plot(rapid.end.x, rapid.end.y, 'ko', markersize=4)
        ax.text(rapid.end.x, rapid.end.y, f" {order}", fontsize=font_size,
                verticalalignment='bottom', horizontalalignment='left', color='black')

    ax.plot([], [], color='blue', label="Cut Paths")

    ax.set_xlabel("X", fontsize=font_size + 2)
    ax.set_ylabel("Y", fontsize=font_size + 2)
    ax.set_title(f"Cut Order Preview\n{len(result.ordered_cuts)} cuts, "
                 f"rapid distance {result.total_distance:.2f}", fontsize=font_size + 4)
    ax.legend(fontsize=font_size)
    ax.grid(True, alpha=0.3)
    ax.set_aspect('equal', adjustable='datalim')
    ax.margins(0.1)

    if result.dropped_cut_ids:
        ax.text(0.02, 0.02, f"Dropped cuts: {', '.join(result.dropped_cut_ids)}",
                transform=ax.transAxes, fontsize=font_size,
                verticalalignment='bottom', horizontalalignment='left',
                bbox=dict(boxstyle="round,pad=0.5", facecolor="lightyellow", alpha=0.8))

    plt.tight_layout()

    if output_file:
        try:
            fig.savefig(output_file, dpi=dpi, bbox_inches='tight')
        except OSError:
            plt.close(fig)
            raise
        logger.info("Plot saved to: %s", output_file)

    if show:
        plt.show()

    return fig


def save_plot_preview(job: Job, result: OptimizationResult, base_filename: str,
                      output_dir: str = "output") -> str:
    """
    Save a plot preview to the output directory.

    Args:
        job: Parsed job
        result: Optimization result
        base_filename: Base name for the output file (without extension)
        output_dir: Directory to write into (created if missing)

    Returns:
        Path of the written PNG
    """
    os.makedirs(output_dir, exist_ok=True)
    plot_filename = os.path.join(output_dir, f"{base_filename}_preview.png")

    plt.switch_backend('Agg')
    fig = plot_cut_order(job, result, show=False, dpi=150, font_size=10)
    try:
        fig.savefig(plot_filename, dpi=150, bbox_inches='tight')
    finally:
        plt.close(fig)
    logger.info("Plot saved to: %s", plot_filename)

    return plot_filename
