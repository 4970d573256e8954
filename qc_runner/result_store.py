"""Directory holding the logs of failing cases."""

import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

log = logging.getLogger(__name__)

LOG_SUFFIX = ".log"


@dataclass(frozen=True, kw_only=True)
class ResultStore:
    """Per-run store with one log file per case.

    Logs of passing cases are discarded as they complete, so after a run the
    directory holds exactly the logs of the cases that failed.
    """

    path: Path

    def reset(self) -> None:
        """Remove any previous store and recreate it empty."""
        if self.path.exists():
            log.debug("Removing previous result store %s", self.path)
            shutil.rmtree(self.path)
        self.path.mkdir(parents=True, exist_ok=True)

    def log_path_for(self, case_id: str) -> Path:
        """Map a case identifier to its log file.

        Identifiers are percent-encoded, which is reversible, so two distinct
        identifiers never share a file.
        """
        return self.path / f"{quote(case_id, safe='')}{LOG_SUFFIX}"

    def discard(self, case_id: str) -> None:
        """Delete the log of a case, ignoring logs that are already gone."""
        log_path = self.log_path_for(case_id)
        try:
            log_path.unlink(missing_ok=True)
        except OSError as e:
            log.warning("Could not remove log %s: %s", log_path, e)

    def retained_logs(self) -> Sequence[Path]:
        """Log files currently in the store."""
        if not self.path.is_dir():
            return []
        return sorted(self.path.glob(f"*{LOG_SUFFIX}"))
