"""Abstract base class for test binary listing formats."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class ListingFormat(ABC):
    """Describes how to talk to one kind of test binary.

    A format knows how to put the binary in "list, do not run" mode, how to
    turn that listing into case identifiers, and how to run exactly one case.
    """

    @abstractmethod
    def list_args(self) -> Sequence[str]:
        """Arguments that make the binary list its cases without running them."""

    @abstractmethod
    def run_args(self, case_id: str) -> Sequence[str]:
        """Arguments that make the binary run only the given case."""

    @abstractmethod
    def parse_listing(self, output: str) -> Sequence[str]:
        """Extract case identifiers from the listing output.

        Args:
            output: Decoded standard output of the list invocation

        Returns:
            Case identifiers in listing order

        Raises:
            ValueError: If the output does not follow the format

        """
