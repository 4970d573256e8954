"""Rust libtest binaries (``cargo test`` harness)."""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from qc_runner.formats.base import ListingFormat

# "<name>: test" or "<name>: bench"
CASE_LINE = re.compile(r"^(?P<case_id>.+): (?P<kind>test|bench)$")
# "12 tests, 0 benchmarks"
SUMMARY_LINE = re.compile(r"^\d+ tests?, \d+ benchmarks?$")


@dataclass(frozen=True, kw_only=True)
class LibtestFormat(ListingFormat):
    """Listing format of binaries built by ``cargo test --no-run``.

    ``--list`` prints one ``<name>: <kind>`` line per case followed by a blank
    line and a count summary.
    """

    include_benches: bool = False

    def list_args(self) -> Sequence[str]:
        return ("--list",)

    def run_args(self, case_id: str) -> Sequence[str]:
        return (case_id, "--exact", "--nocapture", "--test-threads=1")

    def parse_listing(self, output: str) -> Sequence[str]:
        lines = output.splitlines()
        while lines and not lines[-1].strip():
            lines.pop()
        if lines and SUMMARY_LINE.match(lines[-1].strip()):
            lines.pop()

        case_ids: list[str] = []
        for line_num, line in enumerate(lines, 1):
            if not line.strip():
                continue
            if (match := CASE_LINE.match(line.rstrip())) is None:
                raise ValueError(f"Unexpected listing line {line_num}: {line!r}")
            if match["kind"] == "bench" and not self.include_benches:
                continue
            case_ids.append(match["case_id"])
        return case_ids


libtest_format = LibtestFormat()
