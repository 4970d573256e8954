"""Listing formats registered under the ``qc_runner.formats`` entry point group."""

from collections.abc import Sequence
from importlib.metadata import entry_points

from qc_runner.formats.base import ListingFormat

ENTRY_POINT_GROUP = "qc_runner.formats"


class ListingFormatNotFoundError(Exception):
    """Raised when no listing format is registered under a name."""


def available_formats() -> Sequence[str]:
    """Names of every registered listing format, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_listing_format(name: str) -> ListingFormat:
    """Load the listing format registered as ``name``.

    Raises:
        ListingFormatNotFoundError: If nothing is registered under ``name``

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=name)
    if not matches:
        raise ListingFormatNotFoundError(
            f"Unknown listing format {name!r}, "
            f"choose one of: {', '.join(available_formats())}"
        )

    listing_format: ListingFormat = next(iter(matches)).load()
    return listing_format
