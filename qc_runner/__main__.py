"""Allow running the harness with ``python -m qc_runner``."""

from qc_runner.cli import main

main()
