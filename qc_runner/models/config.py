"""Runner configuration."""

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_BUILD_DIR = Path("target/debug/deps")
RESULTS_DIR_NAME = "qc-results"


def default_jobs() -> int:
    """Number of parallel invocations when none is configured."""
    return os.cpu_count() or 1


class RunnerConfig(BaseModel):
    """Configuration of a single harness run."""

    model_config = ConfigDict(frozen=True)

    build_dir: Path = Field(
        default=DEFAULT_BUILD_DIR, description="Directory holding built test binaries"
    )
    binary: Path | None = Field(
        default=None, description="Explicit test binary (skips the freshness scan)"
    )
    results_dir: Path | None = Field(
        default=None, description="Result store (None means <build_dir>/qc-results)"
    )
    jobs: int = Field(default_factory=default_jobs, ge=1)
    timeout: float | None = Field(
        default=None, gt=0, description="Per-case timeout in seconds"
    )
    listing_format: str = Field(default="libtest", min_length=1)
    filters: Sequence[str] = Field(
        default=(), description="Keep only case ids containing one of these"
    )

    @property
    def store_path(self) -> Path:
        """Resolved result store directory."""
        if self.results_dir is not None:
            return self.results_dir
        return self.build_dir / RESULTS_DIR_NAME

    @model_validator(mode="after")
    def check_store_path(self) -> Self:
        """Reject a result store that would wipe the build dir or the binary."""
        store = self.store_path.resolve()
        for kept in (self.build_dir, self.binary):
            if kept is None:
                continue
            target = kept.resolve()
            if store == target or store in target.parents:
                raise ValueError(
                    f"Results directory {self.store_path} would remove {kept}"
                )
        return self
