"""Binaries listing one bare case identifier per line."""

from collections.abc import Sequence
from dataclasses import dataclass

from qc_runner.formats.base import ListingFormat


@dataclass(frozen=True, kw_only=True)
class PlainFormat(ListingFormat):
    """List with ``--list``, run a case by passing its identifier."""

    list_flag: str = "--list"

    def list_args(self) -> Sequence[str]:
        return (self.list_flag,)

    def run_args(self, case_id: str) -> Sequence[str]:
        return (case_id,)

    def parse_listing(self, output: str) -> Sequence[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]


plain_format = PlainFormat()
