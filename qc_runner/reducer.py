"""Decide which logs to keep as results stream in."""

import logging
from collections.abc import AsyncIterable

from qc_runner.models.result import RunResult, RunSummary
from qc_runner.result_store import ResultStore

log = logging.getLogger(__name__)


async def reduce_results(
    results: AsyncIterable[RunResult], store: ResultStore
) -> RunSummary:
    """Discard logs of passing cases and keep those of failing ones.

    Results are handled one by one as they arrive, so the store reflects
    progress while the run is still going. Cancelled cases have no verdict and
    their partial logs are discarded too.

    Returns:
        Counts for the run plus the failing and cancelled results

    """
    total = 0
    passed = 0
    failures: list[RunResult] = []
    cancelled: list[RunResult] = []

    async for result in results:
        total += 1
        if result.status == "failure":
            log.info(
                "FAIL %s (%.2fs): %s -> %s",
                result.case_id,
                result.duration,
                result.error,
                result.log_path,
            )
            failures.append(result)
            continue

        store.discard(result.case_id)
        if result.passed:
            passed += 1
            log.debug("PASS %s (%.2fs)", result.case_id, result.duration)
        else:
            cancelled.append(result)

    return RunSummary(
        total=total, passed=passed, failures=failures, cancelled=cancelled
    )
