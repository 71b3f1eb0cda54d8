"""Pytest configuration, shared fixtures and a per-module summary hook.

Also ensures the ``src`` directory (src layout) is on sys.path so the
package imports without an editable install.
"""

from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path

import pytest

_src = Path(__file__).resolve().parents[1] / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from cultural_jssp.models import DataInstance, Operation  # noqa: E402
from cultural_jssp.parser import parse_jsplib_text, toy_instance  # noqa: E402

FT06 = """\
# Fisher and Thompson 6x6
6 6
2 1 0 3 1 6 3 7 5 3 4 6
1 8 2 5 4 10 5 10 0 10 3 4
2 5 3 4 5 8 0 9 1 1 4 7
1 5 0 5 2 5 3 3 4 8 5 9
2 9 1 3 4 5 5 4 0 3 3 1
1 3 3 3 5 9 0 10 4 4 2 1
"""


class ScriptedRng:
    """Stand-in for random.Random replaying fixed draws (tests only)."""

    def __init__(self, ranges=(), randoms=()):
        self.ranges = list(ranges)
        self.randoms = list(randoms)

    def randrange(self, n):
        value = self.ranges.pop(0)
        assert 0 <= value < n
        return value

    def random(self):
        return self.randoms.pop(0)

    def shuffle(self, seq):
        pass


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def toy() -> DataInstance:
    return toy_instance()


@pytest.fixture
def ft06() -> DataInstance:
    return parse_jsplib_text(FT06)


@pytest.fixture
def toy_ops(toy: DataInstance) -> dict[str, Operation]:
    """Toy operations by short name, e.g. ``j1m2`` = job 1 on machine 2."""
    return {f"j{op.job}m{op.machine}": op for op in toy.operations()}


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:
    """Print pass/fail counts per test module, then any failing node ids."""
    per_module: dict[str, Counter] = {}
    for outcome in ("passed", "failed", "error", "skipped"):
        for rep in terminalreporter.stats.get(outcome, []):
            module = rep.nodeid.split("::", 1)[0]
            per_module.setdefault(module, Counter())[outcome] += 1
    if not per_module:
        return

    terminalreporter.section("cultural_jssp suite", sep="-")
    width = max(len(m) for m in per_module)
    for module in sorted(per_module):
        counts = per_module[module]
        terminalreporter.write_line(
            f"{module:<{width}}  ok={counts['passed']:<4} fail={counts['failed']:<3} "
            f"err={counts['error']:<3} skip={counts['skipped']}"
        )
    for rep in terminalreporter.stats.get("failed", []):
        terminalreporter.write_line(f"FAILED {rep.nodeid}")
