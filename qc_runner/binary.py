"""Select the test binary to run."""

import logging
import os
from pathlib import Path

from qc_runner.errors import NoBinaryFoundError

log = logging.getLogger(__name__)


def select_test_binary(build_dir: Path) -> Path:
    """Pick the most recently modified executable in a build directory.

    Only direct children are considered. The scan is never cached because the
    binary may be rebuilt between runs.

    Raises:
        NoBinaryFoundError: If the directory holds no executable file

    """
    if not build_dir.is_dir():
        raise NoBinaryFoundError(f"Build directory not found: {build_dir}")

    candidates = [path for path in build_dir.iterdir() if is_executable(path)]
    if not candidates:
        raise NoBinaryFoundError(f"No executable test binary in {build_dir}")

    binary = max(candidates, key=lambda path: path.stat().st_mtime)
    log.debug("Selected %s out of %d candidate(s)", binary, len(candidates))
    return binary


def resolve_test_binary(build_dir: Path, explicit: Path | None = None) -> Path:
    """Return the explicit binary when given, else fall back to the freshness scan."""
    if explicit is None:
        return select_test_binary(build_dir)

    if not is_executable(explicit):
        raise NoBinaryFoundError(f"Test binary is not an executable file: {explicit}")
    return explicit


def is_executable(path: Path) -> bool:
    """Check if path is a regular file the current user may execute."""
    return path.is_file() and os.access(path, os.X_OK)
