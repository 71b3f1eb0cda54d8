import argparse
import logging
import os
import random
import threading
from datetime import datetime
from typing import List, Optional

from .algorithm import CulturalAlgorithm, RunResult
from .config import RunConfig, build_run_config, load_config_file
from .observers import GenerationObserver, LoggingReporter
from .visualization import GanttSnapshotter, plot_gantt, plot_progress

logger = logging.getLogger("cultural_jssp")


def run(
    config: RunConfig,
    cancel_event: Optional[threading.Event] = None,
    extra_observers: Optional[List[GenerationObserver]] = None,
) -> RunResult:
    """Run the cultural algorithm for one configuration and save charts.

    Charts (final Gantt chart of the best-ever schedule plus a makespan
    progress plot, and per-generation Gantt charts when enabled) are written
    only when ``config.charts_dir`` is set.
    """
    instance = config.instance
    logger.info(
        "Instance: jobs=%d machines=%d ops=%d seed=%s params=%s",
        instance.jobs_number,
        instance.machines_number,
        instance.operations_number,
        config.seed,
        config.params,
    )
    rng = random.Random(config.seed) if config.seed is not None else random.Random()
    observers: List[GenerationObserver] = [LoggingReporter()]
    if config.charts_dir and config.gantt_every_generation:
        observers.append(GanttSnapshotter(os.path.join(config.charts_dir, "generations")))
    observers.extend(extra_observers or [])

    algorithm = CulturalAlgorithm(
        instance,
        params=config.params,
        rng=rng,
        observers=observers,
        cancel_event=cancel_event,
    )
    result = algorithm.run()

    if config.charts_dir:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        gantt_path = os.path.join(
            config.charts_dir, f"gantt_best_c{result.best.makespan}_{ts}.png"
        )
        plot_gantt(result.best, save_path=gantt_path)
        logger.info(f"Saved Gantt chart to {gantt_path}")
        progress_path = os.path.join(config.charts_dir, f"progress_{ts}.png")
        plot_progress(
            {
                "generation best": result.best_history,
                "best ever": result.best_ever_history,
            },
            save_path=progress_path,
        )
        logger.info(f"Saved progress plot to {progress_path}")

    print(f"Best Schedule: {result.best}")
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Cultural algorithm for job shop scheduling")
    parser.add_argument(
        "--config",
        required=True,
        help="Path to a YAML/JSON configuration file",
    )
    args = parser.parse_args(argv)

    cfg = load_config_file(args.config)
    log_level = cfg.get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run(build_run_config(cfg))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
