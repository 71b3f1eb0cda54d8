"""Cultural algorithm for job shop scheduling.

Exports the data structures, instance loaders and the optimizer.
"""

from cultural_jssp.algorithm import CulturalAlgorithm, LoopState, RunResult  # noqa: F401
from cultural_jssp.config import AlgoParams, RunConfig  # noqa: F401
from cultural_jssp.models import DataInstance, Operation  # noqa: F401
from cultural_jssp.parser import load_instance, parse_jsplib_text, toy_instance  # noqa: F401
from cultural_jssp.schedule import Schedule  # noqa: F401

__all__ = [
    "AlgoParams",
    "CulturalAlgorithm",
    "DataInstance",
    "LoopState",
    "Operation",
    "RunConfig",
    "RunResult",
    "Schedule",
    "load_instance",
    "parse_jsplib_text",
    "toy_instance",
]
