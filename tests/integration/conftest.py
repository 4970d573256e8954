"""Fixtures for integration tests using a fake test binary."""

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from qc_runner.testing.fake_binary import FakeBinary, FakeBinaryFn, create_fake_binary


@pytest.fixture
def fake_binary(tmp_path: Path) -> FakeBinaryFn:
    """Return a function creating a fake binary under the test directory."""

    def _create(
        cases: Mapping[str, Mapping[str, Any]], *, list_exit: int = 0
    ) -> FakeBinary:
        return create_fake_binary(tmp_path, cases, list_exit=list_exit)

    return _create


@pytest.fixture
def is_alive() -> Callable[[int], bool]:
    """Return a function checking if a PID is still running.

    Zombies count as dead: orphans are reaped by init, not by the test.
    """

    def _is_alive(pid: int) -> bool:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        if not Path("/proc/self").exists():
            return True
        try:
            stat = Path(f"/proc/{pid}/stat").read_text()
        except FileNotFoundError:
            return False
        except OSError:
            return True
        return stat.rsplit(")", 1)[1].split()[0] != "Z"

    return _is_alive
