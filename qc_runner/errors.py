"""Errors raised while selecting, listing and running test cases."""


class NoBinaryFoundError(Exception):
    """Raised when no executable test binary can be selected."""


class DiscoveryError(Exception):
    """Raised when the test binary cannot list its cases."""


class LaunchError(Exception):
    """A case invocation could not be started."""


class CaseFailure(Exception):
    """A case invocation exited with a non-zero status."""

    def __init__(self, returncode: int) -> None:
        super().__init__(f"Exited with status {returncode}")
        self.returncode = returncode
