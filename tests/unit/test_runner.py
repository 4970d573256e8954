"""Tests for the runner wiring."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from qc_runner.errors import DiscoveryError
from qc_runner.formats.plain import plain_format
from qc_runner.models.config import RunnerConfig
from qc_runner.models.result import RunSummary
from qc_runner.runner import QcRunner


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """Create a build directory holding one executable."""
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    binary = build_dir / "emu-tests"
    binary.write_text("#!/bin/sh\nexit 0\n")
    binary.chmod(0o755)
    return build_dir


async def test_dispatches_filtered_cases_with_config(build_dir: Path) -> None:
    """Passes discovered and filtered cases to a configured dispatcher."""
    config = RunnerConfig(build_dir=build_dir, jobs=4, timeout=2.5, filters=("a",))
    runner = QcRunner(config=config, listing_format=plain_format)
    summary = RunSummary(total=1, passed=1, failures=[])

    with (
        patch(
            "qc_runner.runner.discover_cases",
            new_callable=AsyncMock,
            return_value=["alpha", "beta"],
        ) as mock_discover,
        patch(
            "qc_runner.runner.reduce_results",
            new_callable=AsyncMock,
            return_value=summary,
        ) as mock_reduce,
        patch("qc_runner.runner.Dispatcher") as mock_dispatcher_cls,
    ):
        report = await runner.run()

    mock_discover.assert_called_once_with(build_dir / "emu-tests", plain_format)
    dispatcher_kwargs = mock_dispatcher_cls.call_args.kwargs
    assert dispatcher_kwargs["binary"] == build_dir / "emu-tests"
    assert dispatcher_kwargs["jobs"] == 4
    assert dispatcher_kwargs["timeout"] == 2.5
    assert dispatcher_kwargs["store"].path == build_dir / "qc-results"
    mock_dispatcher_cls.return_value.dispatch.assert_called_once_with(["alpha"])
    mock_reduce.assert_called_once()

    assert report.summary is summary
    assert report.binary == build_dir / "emu-tests"
    assert report.elapsed >= 0


async def test_discovery_error_leaves_store_empty(build_dir: Path) -> None:
    """Propagates discovery errors after resetting the store."""
    stale_log = build_dir / "qc-results" / "old.log"
    stale_log.parent.mkdir()
    stale_log.write_text("stale")
    config = RunnerConfig(build_dir=build_dir)
    runner = QcRunner(config=config, listing_format=plain_format)

    with (
        patch(
            "qc_runner.runner.discover_cases",
            new_callable=AsyncMock,
            side_effect=DiscoveryError("listing failed"),
        ),
        pytest.raises(DiscoveryError),
    ):
        await runner.run()

    assert list((build_dir / "qc-results").iterdir()) == []


async def test_cancel_before_dispatch_is_forwarded(build_dir: Path) -> None:
    """Cancels the dispatcher when cancellation was requested during discovery."""
    config = RunnerConfig(build_dir=build_dir)
    runner = QcRunner(config=config, listing_format=plain_format)

    async def discover_and_cancel(*_: object) -> list[str]:
        runner.cancel()
        return ["alpha"]

    with (
        patch("qc_runner.runner.discover_cases", side_effect=discover_and_cancel),
        patch(
            "qc_runner.runner.reduce_results",
            new_callable=AsyncMock,
            return_value=RunSummary(total=0, passed=0, failures=[]),
        ),
        patch("qc_runner.runner.Dispatcher") as mock_dispatcher_cls,
    ):
        await runner.run()

    mock_dispatcher_cls.return_value.cancel.assert_called_once_with()
