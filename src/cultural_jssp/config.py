"""Run configuration: file loading and typed parameter bundles.

Config files are YAML (``.yml`` / ``.yaml``) or JSON. Recognised keys::

    seed: 42
    log_level: INFO
    instance:            # descriptor, or {toy: true}, or {jsplib: "<text>"}
      machines: [1, 2, 3]
      jobs: {1: [[1, 3], [2, 4]], 2: [[2, 2], [1, 5]]}
    algorithm:
      population_size: 10
      mutation_probability: 0.1
      max_stagnation: 20
      max_generations: 1000
      time_limit_ms: null
      tie_break: first
    charts:
      dir: charts
      every_generation: false
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .genetic import TIE_BREAK_POLICIES
from .models import DataInstance
from .parser import load_instance, parse_jsplib_text, toy_instance


@dataclass(frozen=True)
class AlgoParams:
    """Bundle of the cultural algorithm hyper-parameters.

    Keeping them in a single dataclass simplifies passing configuration from
    the CLI into the optimizer and logging an experiment setup.
    """

    population_size: int = 10
    mutation_probability: float = 0.1
    max_stagnation: int = 20
    max_generations: Optional[int] = 1000
    time_limit_ms: Optional[int] = None
    tie_break: str = "first"
    validate_children: bool = True

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ConfigError(f"population_size must be >= 1, got {self.population_size}")
        if not (0.0 <= self.mutation_probability <= 1.0):
            raise ConfigError(
                f"mutation_probability must be in [0, 1], got {self.mutation_probability}"
            )
        if self.max_stagnation < 1:
            raise ConfigError(f"max_stagnation must be >= 1, got {self.max_stagnation}")
        if self.max_generations is not None and self.max_generations < 1:
            raise ConfigError(f"max_generations must be >= 1, got {self.max_generations}")
        if self.time_limit_ms is not None and self.time_limit_ms <= 0:
            raise ConfigError(f"time_limit_ms must be positive, got {self.time_limit_ms}")
        if self.tie_break not in TIE_BREAK_POLICIES:
            raise ConfigError(
                f"tie_break must be one of {TIE_BREAK_POLICIES}, got {self.tie_break!r}"
            )


@dataclass(frozen=True)
class RunConfig:
    instance: DataInstance
    params: AlgoParams = field(default_factory=AlgoParams)
    seed: Optional[int] = None
    charts_dir: Optional[str] = None
    gantt_every_generation: bool = False
    log_level: str = "INFO"


def load_config_file(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON config file into a dict (empty file -> ``{}``)."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if path.endswith((".yml", ".yaml")):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text) if text.strip() else {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(cfg).__name__}")
    return cfg


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return cfg.get(name, {}) if isinstance(cfg.get(name), dict) else {}


def _as_int(name: str, value: Any) -> int:
    """Integer-valued parameter; integral floats and numeric strings pass."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"{name} must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _optional_int(name: str, value: Any) -> Optional[int]:
    return None if value is None else _as_int(name, value)


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value


def instance_from_config(section: Dict[str, Any]) -> DataInstance:
    """Resolve the ``instance`` config section to a :class:`DataInstance`.

    An empty section selects the toy instance.
    """
    if not section or section.get("toy"):
        return toy_instance()
    if "jsplib" in section:
        return parse_jsplib_text(str(section["jsplib"]))
    return load_instance(section)


def build_run_config(cfg: Dict[str, Any]) -> RunConfig:
    """Turn a raw config dict into a validated :class:`RunConfig`.

    Raises:
        ConfigError: On out-of-range, non-integral or mistyped parameters,
            seed or chart flags.
        InvalidInstanceError: On an invalid instance section.
    """
    algo_cfg = _section(cfg, "algorithm")
    charts_cfg = _section(cfg, "charts")
    probability = algo_cfg.get("mutation_probability", 0.1)
    if isinstance(probability, bool):
        raise ConfigError(f"mutation_probability must be a number, got {probability!r}")
    try:
        probability = float(probability)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"mutation_probability must be a number, got {probability!r}") from e

    params = AlgoParams(
        population_size=_as_int("population_size", algo_cfg.get("population_size", 10)),
        mutation_probability=probability,
        max_stagnation=_as_int("max_stagnation", algo_cfg.get("max_stagnation", 20)),
        max_generations=_optional_int(
            "max_generations", algo_cfg.get("max_generations", 1000)
        ),
        time_limit_ms=_optional_int("time_limit_ms", algo_cfg.get("time_limit_ms")),
        tie_break=str(algo_cfg.get("tie_break", "first")),
        validate_children=_as_bool(
            "validate_children", algo_cfg.get("validate_children", True)
        ),
    )

    return RunConfig(
        instance=instance_from_config(_section(cfg, "instance")),
        params=params,
        seed=_optional_int("seed", cfg.get("seed")),
        charts_dir=charts_cfg.get("dir"),
        gantt_every_generation=_as_bool(
            "charts.every_generation", charts_cfg.get("every_generation", False)
        ),
        log_level=str(cfg.get("log_level", "INFO")),
    )


def load_run_config(path: str) -> RunConfig:
    return build_run_config(load_config_file(path))
