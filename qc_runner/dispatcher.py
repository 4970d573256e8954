"""Run test cases as isolated processes with bounded parallelism."""

import asyncio
import logging
import os
import signal
from collections.abc import AsyncIterator, Sequence
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from typing_extensions import TypeAliasType

from qc_runner.errors import CaseFailure, LaunchError
from qc_runner.formats.base import ListingFormat
from qc_runner.models.result import RunResult, RunStatus
from qc_runner.result_store import ResultStore

log = logging.getLogger(__name__)

WaitOutcome = TypeAliasType("WaitOutcome", Literal["exited", "timeout", "cancelled"])


@dataclass(kw_only=True)
class Dispatcher:
    """Launches one invocation of the test binary per case.

    At most ``jobs`` invocations run at the same time; the others wait for a
    free slot. Each invocation writes its combined output to the case's log
    file in the result store. A failing case never stops its siblings.
    """

    binary: Path
    listing_format: ListingFormat
    store: ResultStore
    jobs: int = 1
    timeout: float | None = None
    _cancelled: asyncio.Event = field(default_factory=asyncio.Event, init=False)

    def __post_init__(self) -> None:
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")

    @property
    def cancelled(self) -> bool:
        """Whether the dispatch was cancelled."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Kill in-flight invocations and skip the ones not started yet."""
        if not self._cancelled.is_set():
            log.warning("Cancelling remaining test cases")
        self._cancelled.set()

    async def dispatch(self, case_ids: Sequence[str]) -> AsyncIterator[RunResult]:
        """Run every case and yield its result as soon as it completes.

        Results arrive in completion order, not in the order of ``case_ids``.
        Exactly one result is yielded per case. Closing the iterator early
        kills whatever is still running.
        """
        if not case_ids:
            return

        slots = asyncio.Semaphore(self.jobs)
        tasks = [
            asyncio.create_task(self._run_case(case_id, slots), name=case_id)
            for case_id in case_ids
        ]
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_case(self, case_id: str, slots: asyncio.Semaphore) -> RunResult:
        async with slots:
            if self.cancelled:
                return RunResult(case_id=case_id, status="cancelled", duration=0.0)
            result = await self._invoke(case_id, self.store.log_path_for(case_id))

        log.debug(
            "Case %s finished: %s (%.2fs)", case_id, result.status, result.duration
        )
        return result

    async def _invoke(self, case_id: str, log_path: Path) -> RunResult:
        """Run one case with its combined output written to ``log_path``."""
        loop = asyncio.get_running_loop()
        started = loop.time()

        def finish(
            status: RunStatus,
            returncode: int | None = None,
            error: LaunchError | TimeoutError | CaseFailure | None = None,
            *,
            log_path: Path | None = log_path,
        ) -> RunResult:
            return RunResult(
                case_id=case_id,
                status=status,
                duration=loop.time() - started,
                log_path=log_path,
                returncode=returncode,
                error=error,
            )

        try:
            log_file = log_path.open("wb")
        except OSError as e:
            log.error("Case %s has no usable log file: %s", case_id, e)
            return finish(
                "failure",
                error=LaunchError(f"Cannot create log {log_path}: {e}"),
                log_path=None,
            )

        with log_file:
            try:
                # Own session so the whole process group can be killed
                process = await asyncio.create_subprocess_exec(
                    self.binary,
                    *self.listing_format.run_args(case_id),
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=asyncio.subprocess.STDOUT,
                    start_new_session=True,
                )
            except OSError as e:
                log.error("Case %s could not be launched: %s", case_id, e)
                launch_error = LaunchError(f"Cannot start {self.binary}: {e}")
                log_file.write(f"{launch_error}\n".encode())
                return finish("failure", error=launch_error)

            try:
                outcome = await self._wait(process)
            finally:
                if process.returncode is None:
                    await terminate(process)

            if outcome == "cancelled":
                return finish("cancelled", process.returncode)

            if outcome == "timeout":
                log.warning("Case %s timed out after %ss", case_id, self.timeout)
                timeout_error = TimeoutError(f"Timed out after {self.timeout} seconds")
                log_file.write(f"\n{timeout_error}\n".encode())
                return finish("failure", process.returncode, timeout_error)

        returncode = process.returncode
        if returncode != 0:
            return finish("failure", returncode, CaseFailure(returncode))
        return finish("success", returncode)

    async def _wait(self, process: asyncio.subprocess.Process) -> WaitOutcome:
        """Wait for the process to exit, time out, or the dispatch to be cancelled."""
        exited = asyncio.create_task(process.wait())
        cancelled = asyncio.create_task(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {exited, cancelled},
                timeout=self.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            exited.cancel()
            cancelled.cancel()

        if exited in done:
            return "exited"
        if cancelled in done:
            return "cancelled"
        return "timeout"


async def terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a process together with everything it spawned, then reap it.

    The process leads its own session, so its pid is also the id of the
    process group holding its descendants.
    """
    with suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)
    with suppress(ProcessLookupError):
        process.kill()
    await process.wait()
