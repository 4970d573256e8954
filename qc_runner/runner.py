"""Runner wiring discovery, dispatch and log retention together."""

import logging
import time
from dataclasses import dataclass, field

from qc_runner.binary import resolve_test_binary
from qc_runner.discovery import discover_cases, filter_cases
from qc_runner.dispatcher import Dispatcher
from qc_runner.formats.base import ListingFormat
from qc_runner.models.config import RunnerConfig
from qc_runner.models.result import RunReport
from qc_runner.reducer import reduce_results
from qc_runner.result_store import ResultStore

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class QcRunner:
    """Runs every case of the freshest test binary once."""

    config: RunnerConfig
    listing_format: ListingFormat
    dispatcher: Dispatcher | None = field(default=None, init=False)
    _cancel_requested: bool = field(default=False, init=False)

    def cancel(self) -> None:
        """Stop the current run, killing in-flight cases."""
        self._cancel_requested = True
        if self.dispatcher is not None:
            self.dispatcher.cancel()

    async def run(self) -> RunReport:
        """Run all cases and return the report.

        The result store is reset before anything else, so even a run that
        aborts early leaves no stale logs behind.

        Raises:
            NoBinaryFoundError: If no test binary can be selected
            DiscoveryError: If the binary cannot list its cases

        """
        started = time.perf_counter()
        store = ResultStore(path=self.config.store_path)
        store.reset()

        binary = resolve_test_binary(self.config.build_dir, self.config.binary)
        log.info("Using test binary %s", binary)

        case_ids = filter_cases(
            await discover_cases(binary, self.listing_format), self.config.filters
        )
        log.info(
            "Running %d case(s) with %d job(s)...", len(case_ids), self.config.jobs
        )

        self.dispatcher = Dispatcher(
            binary=binary,
            listing_format=self.listing_format,
            store=store,
            jobs=self.config.jobs,
            timeout=self.config.timeout,
        )
        if self._cancel_requested:
            self.dispatcher.cancel()
        summary = await reduce_results(self.dispatcher.dispatch(case_ids), store)

        elapsed = time.perf_counter() - started
        log.info("Run finished in %.2fs", elapsed)
        return RunReport(
            binary=binary, results_dir=store.path, summary=summary, elapsed=elapsed
        )
