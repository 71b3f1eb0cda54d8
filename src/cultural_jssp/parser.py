"""Problem instance loading and validation.

Two input shapes are supported, both in memory:

* a descriptor mapping (typically the ``instance`` section of a YAML/JSON
  config)::

      {"machines": [1, 2, 3],
       "jobs": {1: [[1, 3], [2, 4]], 2: [[2, 2], [1, 5]]}}

  ``jobs`` may also be a list, in which case job ids are ``0..n-1``.
  ``machines`` is optional; when omitted the set of machines used by the
  jobs is taken as declared.

* JSPLIB / Taillard text: a ``J M`` header followed by one line per job
  with ``M`` ``machine processing_time`` pairs. Lines starting with ``#``
  are ignored. One-based machine indices are normalised to zero-based.

Every malformed input raises :class:`InvalidInstanceError` at load time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from .errors import InvalidInstanceError
from .models import DataInstance, Job

# Built-in 3 jobs x 3 machines demonstration instance.
TOY_JOBS: dict[int, list[list[int]]] = {
    1: [[1, 3], [2, 4]],
    2: [[2, 2], [1, 5]],
    3: [[3, 6], [2, 3]],
}
TOY_MACHINES = [1, 2, 3]


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidInstanceError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidInstanceError(f"{what} must be an integer, got {value!r}") from e


def _parse_steps(job_id: int, raw_steps: Any) -> tuple[Job, ...]:
    if not isinstance(raw_steps, (list, tuple)) or not raw_steps:
        raise InvalidInstanceError(f"Job {job_id} has no operations")
    steps: list[Job] = []
    for k, step in enumerate(raw_steps):
        if not isinstance(step, (list, tuple)) or len(step) != 2:
            raise InvalidInstanceError(
                f"Job {job_id} operation {k}: expected [machine, processing_time], got {step!r}"
            )
        machine = _as_int(step[0], f"Job {job_id} operation {k} machine")
        processing_time = _as_int(step[1], f"Job {job_id} operation {k} processing time")
        if processing_time <= 0:
            raise InvalidInstanceError(
                f"Job {job_id} operation {k}: processing time must be positive, got "
                f"{processing_time}"
            )
        steps.append((machine, processing_time))
    return tuple(steps)


def build_instance(
    jobs: Mapping[int, Any],
    machines: Any = None,
) -> DataInstance:
    """Validate raw job steps and build a :class:`DataInstance`.

    Args:
        jobs: Mapping job_id -> list of ``(machine, processing_time)`` pairs.
        machines: Optional iterable of declared machine ids.

    Raises:
        InvalidInstanceError: On an empty instance, a job without operations,
            a malformed step, a non-positive processing time, a duplicate
            machine declaration, or a step on an undeclared machine.
    """
    if not jobs:
        raise InvalidInstanceError("Instance has no jobs")
    parsed: dict[int, tuple[Job, ...]] = {}
    for raw_id, raw_steps in jobs.items():
        job_id = _as_int(raw_id, "Job id")
        if job_id in parsed:
            raise InvalidInstanceError(f"Duplicate job id {job_id}")
        parsed[job_id] = _parse_steps(job_id, raw_steps)

    used = sorted({machine for steps in parsed.values() for machine, _ in steps})
    if machines is None:
        declared = tuple(used)
    else:
        if isinstance(machines, (str, bytes)) or not hasattr(machines, "__iter__"):
            raise InvalidInstanceError(f"machines must be a list of ids, got {machines!r}")
        declared = tuple(_as_int(m, "Machine id") for m in machines)
        if len(set(declared)) != len(declared):
            raise InvalidInstanceError(f"Duplicate machine ids in {list(declared)}")
        undefined = [m for m in used if m not in declared]
        if undefined:
            raise InvalidInstanceError(f"Operations reference undefined machines: {undefined}")
    return DataInstance(jobs=MappingProxyType(parsed), machines=declared)


def load_instance(descriptor: Mapping[str, Any]) -> DataInstance:
    """Load an instance from an in-memory descriptor mapping.

    Raises:
        InvalidInstanceError: If the descriptor is not a mapping with a
            ``jobs`` entry, or any check of :func:`build_instance` fails.
    """
    if not isinstance(descriptor, Mapping):
        raise InvalidInstanceError(f"Instance descriptor must be a mapping, got {descriptor!r}")
    if "jobs" not in descriptor:
        raise InvalidInstanceError("Instance descriptor has no 'jobs' entry")
    jobs = descriptor["jobs"]
    if isinstance(jobs, (list, tuple)):
        jobs = dict(enumerate(jobs))
    elif not isinstance(jobs, Mapping):
        raise InvalidInstanceError(f"'jobs' must be a mapping or a list, got {type(jobs).__name__}")
    return build_instance(jobs, descriptor.get("machines"))


def parse_jsplib_text(text: str) -> DataInstance:
    """Parse a JSPLIB / Taillard formatted instance from a string.

    Returns:
        Instance with job ids ``0..J-1`` and machines ``0..M-1``.

    Raises:
        InvalidInstanceError: On an invalid header, missing job lines, wrong
            token count, non-positive processing time or machine index out
            of range.
    """
    lines = [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    if not lines:
        raise InvalidInstanceError("Empty instance text")
    header = lines[0].split()
    if len(header) != 2:
        raise InvalidInstanceError(f"Invalid header (expected 'jobs machines'): {lines[0]!r}")
    jobs_number = _as_int(header[0], "Number of jobs")
    machines_number = _as_int(header[1], "Number of machines")
    if jobs_number <= 0 or machines_number <= 0:
        raise InvalidInstanceError("Number of jobs and machines must be positive")
    if len(lines) - 1 < jobs_number:
        raise InvalidInstanceError(
            f"Expected {jobs_number} job lines, found {len(lines) - 1}"
        )

    rows: list[list[int]] = []
    for j in range(jobs_number):
        tokens = lines[1 + j].split()
        if len(tokens) != 2 * machines_number:
            raise InvalidInstanceError(
                f"Job {j}: expected {2 * machines_number} tokens, got {len(tokens)}"
            )
        rows.append([_as_int(t, f"Job {j} token") for t in tokens])

    machine_ids = {row[k] for row in rows for k in range(0, len(row), 2)}
    one_based = 0 not in machine_ids and max(machine_ids) == machines_number
    offset = 1 if one_based else 0

    jobs: dict[int, list[list[int]]] = {}
    for j, row in enumerate(rows):
        steps = []
        for k in range(0, len(row), 2):
            machine = row[k] - offset
            if not (0 <= machine < machines_number):
                raise InvalidInstanceError(f"Job {j}: machine index out of range: {row[k]}")
            steps.append([machine, row[k + 1]])
        jobs[j] = steps
    return build_instance(jobs, range(machines_number))


def toy_instance() -> DataInstance:
    """Return the 3-job / 3-machine demonstration instance."""
    return build_instance(TOY_JOBS, TOY_MACHINES)
