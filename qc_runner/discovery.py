"""Enumerate the cases exposed by a test binary."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from qc_runner.errors import DiscoveryError
from qc_runner.formats.base import ListingFormat

log = logging.getLogger(__name__)


async def discover_cases(binary: Path, listing_format: ListingFormat) -> Sequence[str]:
    """List the case identifiers of a test binary without running them.

    Args:
        binary: Test binary to query
        listing_format: Format describing the binary's list mode

    Returns:
        Case identifiers in the order the binary lists them (may be empty)

    Raises:
        DiscoveryError: If the binary cannot be started, fails, or prints a
            listing that cannot be parsed

    """
    try:
        process = await asyncio.create_subprocess_exec(
            binary,
            *listing_format.list_args(),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise DiscoveryError(f"Cannot start {binary}: {e}") from e

    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        raise DiscoveryError(
            f"Listing cases of {binary} failed with status {process.returncode}: "
            f"{stderr.decode(errors='replace').strip()}"
        )

    try:
        case_ids = listing_format.parse_listing(stdout.decode(errors="replace"))
    except ValueError as e:
        raise DiscoveryError(f"Cannot parse listing of {binary}: {e}") from e

    if duplicates := find_duplicates(case_ids):
        raise DiscoveryError(f"Duplicate case identifiers: {', '.join(duplicates)}")

    log.info("Discovered %d case(s) in %s", len(case_ids), binary.name)
    return case_ids


def filter_cases(case_ids: Sequence[str], filters: Sequence[str]) -> Sequence[str]:
    """Keep cases containing any of the substrings, or all of them without filters."""
    if not filters:
        return case_ids
    return [case_id for case_id in case_ids if any(f in case_id for f in filters)]


def find_duplicates(case_ids: Sequence[str]) -> Sequence[str]:
    """Return identifiers listed more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: dict[str, None] = {}
    for case_id in case_ids:
        if case_id in seen:
            duplicates[case_id] = None
        seen.add(case_id)
    return list(duplicates)
