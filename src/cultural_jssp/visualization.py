import logging
import os
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from .schedule import Schedule  # noqa: E402

logger = logging.getLogger("cultural_jssp.visualization")


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def plot_gantt(
    schedule: Schedule,
    save_path: str,
    title: Optional[str] = None,
    show_legend: Optional[bool] = None,
) -> str:
    """Render a schedule as a per-machine Gantt chart and save it.

    One row per machine, one bar per operation placed at its simulated
    start/end time and coloured by job.

    - Uses constrained_layout to reduce layout warnings.
    - Disables legend automatically for many jobs unless forced.
    - Adaptive figure size based on number of machines and makespan.

    Returns:
        The path the figure was written to.
    """
    rows = schedule.timeline()
    machines = sorted({r.machine for r in rows})
    jobs = list(dict.fromkeys(r.job for r in rows))
    machine_pos = {m: i for i, m in enumerate(machines)}
    m = len(machines)

    base_w, base_h = 10, 0.5 * m + 2
    fig, ax = plt.subplots(
        figsize=(min(base_w + len(rows) * 0.02, 18), min(base_h, 16)),
        constrained_layout=True,
    )
    cmap = plt.get_cmap("tab20")
    colors = {job: cmap(i % 20) for i, job in enumerate(sorted(jobs))}
    label_bars = len(rows) <= 60
    for r in rows:
        y = machine_pos[r.machine]
        ax.barh(
            y,
            r.processing_time,
            left=r.start,
            height=0.8,
            color=colors[r.job],
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
        if label_bars:
            ax.text(
                r.start + r.processing_time / 2,
                y,
                f"J{r.job}\n{r.start}-{r.end}",
                ha="center",
                va="center",
                fontsize=7,
            )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    ax.set_title(
        title or f"Gantt Chart - Makespan = {schedule.makespan}", fontsize=14, fontweight="bold"
    )
    ax.set_yticks(range(m))
    ax.set_yticklabels([f"M{mid}" for mid in machines])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, m - 0.5)

    # auto policy: only show when jobs <= 40
    if show_legend is None:
        show_legend = len(jobs) <= 40
    if show_legend:
        legend_elements = [
            plt.Rectangle(
                (0, 0), 1, 1, facecolor=colors[j], alpha=0.85, edgecolor="black", label=f"Job {j}"
            )
            for j in sorted(jobs)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if len(jobs) <= 25 else 2,
        )

    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    logger.debug("Gantt chart saved as: %s", save_path)
    return save_path


def plot_progress(
    histories: Dict[str, List[int]],
    save_path: str,
    title: str = "Makespan per generation",
) -> str:
    """Draw several makespan histories (one value per generation) on one plot."""
    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    for label, values in histories.items():
        generations = list(range(1, len(values) + 1))
        ax.plot(
            generations,
            values,
            label=label,
            linewidth=2,
            marker="o",
            markersize=4,
            markerfacecolor="white",
            markeredgewidth=1.0,
        )
        if values:
            ax.annotate(
                f"{values[-1]}",
                xy=(generations[-1], values[-1]),
                xytext=(6, -10),
                textcoords="offset points",
                fontsize=9,
                color="black",
                bbox=dict(boxstyle="round,pad=0.2", facecolor="white", alpha=0.55),
            )
    ax.set_xlabel("Generation", fontsize=12)
    ax.set_ylabel("Makespan", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    ax.legend(loc="upper right", frameon=False, fontsize=9)
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    logger.debug("Progress plot saved as: %s", save_path)
    return save_path


class GanttSnapshotter:
    """Observer writing one Gantt chart per generation into ``out_dir``.

    Costly for large instances; ``every`` thins the output to every n-th
    generation.
    """

    def __init__(self, out_dir: str, every: int = 1):
        if every < 1:
            raise ValueError(f"every must be >= 1, got {every}")
        self.out_dir = out_dir
        self.every = every
        self.saved: List[str] = []
        _ensure_dir(out_dir)

    def __call__(self, generation: int, schedule: Schedule) -> None:
        if generation % self.every:
            return
        path = os.path.join(self.out_dir, f"gantt_gen{generation:04d}_c{schedule.makespan}.png")
        plot_gantt(
            schedule,
            save_path=path,
            title=f"Generation {generation} - Makespan = {schedule.makespan}",
        )
        self.saved.append(path)
