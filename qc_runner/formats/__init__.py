"""Listing formats understood by the harness."""

from qc_runner.formats.base import ListingFormat
from qc_runner.formats.libtest import LibtestFormat, libtest_format
from qc_runner.formats.plain import PlainFormat, plain_format

__all__ = [
    "LibtestFormat",
    "ListingFormat",
    "PlainFormat",
    "libtest_format",
    "plain_format",
]
