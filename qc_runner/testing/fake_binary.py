"""A scriptable stand-in for a libtest binary, for tests."""

import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

SCRIPT = """\
#!{python}
import json
import os
import subprocess
import sys
import time
from pathlib import Path

here = Path(__file__).resolve().parent
setup = json.loads((here / "cases.json").read_text())
state = Path(setup["state_dir"])
args = sys.argv[1:]

if args == ["--list"]:
    if setup["list_exit"]:
        print("cannot list cases", file=sys.stderr)
        sys.exit(setup["list_exit"])
    for case_id in setup["cases"]:
        print(f"{{case_id}}: test")
    print()
    print(f"{{len(setup['cases'])}} tests, 0 benchmarks")
    sys.exit(0)

case_id = args[0]
case = setup["cases"][case_id]
marker = state / "running" / str(os.getpid())
marker.touch()
started = time.time()
peak = len(list((state / "running").iterdir()))

print(f"running {{case_id}}", flush=True)
print(f"diagnostics for {{case_id}}", file=sys.stderr, flush=True)
if case.get("spawn_child"):
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
    with open(state / "children.txt", "a") as children:
        children.write(f"{{child.pid}}\\n")
time.sleep(case.get("sleep", 0))

marker.unlink()
record = {{"case": case_id, "start": started, "end": time.time(), "peak": peak}}
with open(state / "timeline.jsonl", "a") as timeline:
    timeline.write(json.dumps(record) + "\\n")
sys.exit(case.get("exit", 0))
"""


@dataclass(frozen=True, kw_only=True)
class FakeBinary:
    """A fake test binary and the state it records while running.

    Every invocation drops a marker named after its PID in ``running/`` while
    it is alive and appends a record to ``timeline.jsonl`` when it finishes.
    The record's ``peak`` is the number of markers seen right after start.
    """

    path: Path
    state_dir: Path

    @property
    def build_dir(self) -> Path:
        """Directory holding the binary."""
        return self.path.parent

    def timeline(self) -> list[dict[str, Any]]:
        """Start/end records of every case that ran to completion."""
        timeline_file = self.state_dir / "timeline.jsonl"
        if not timeline_file.exists():
            return []
        return [json.loads(line) for line in timeline_file.read_text().splitlines()]

    def running_pids(self) -> list[int]:
        """PIDs of invocations that started but never finished."""
        return [int(marker.name) for marker in (self.state_dir / "running").iterdir()]

    def child_pids(self) -> list[int]:
        """PIDs of processes spawned by invocations with ``spawn_child``."""
        children_file = self.state_dir / "children.txt"
        if not children_file.exists():
            return []
        return [int(line) for line in children_file.read_text().split()]


class FakeBinaryFn(Protocol):
    """Protocol for fake binary creation function."""

    def __call__(
        self, cases: Mapping[str, Mapping[str, Any]], *, list_exit: int = 0
    ) -> FakeBinary:
        """Create a fake binary exposing the given cases."""


def create_fake_binary(
    root: Path,
    cases: Mapping[str, Mapping[str, Any]],
    *,
    list_exit: int = 0,
    name: str = "emu-tests",
) -> FakeBinary:
    """Write a fake binary into ``root/build`` exposing the given cases.

    Each case maps to options: ``exit`` (status, default 0), ``sleep``
    (seconds, default 0) and ``spawn_child`` (start a long-sleeping child
    before sleeping). A non-zero ``list_exit`` makes listing fail.
    """
    build_dir = root / "build"
    state_dir = root / "state"
    build_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / "running").mkdir(parents=True, exist_ok=True)

    (build_dir / "cases.json").write_text(
        json.dumps(
            {"cases": dict(cases), "list_exit": list_exit, "state_dir": str(state_dir)}
        )
    )
    binary = build_dir / name
    binary.write_text(SCRIPT.format(python=sys.executable))
    binary.chmod(0o755)
    return FakeBinary(path=binary, state_dir=state_dir)
