"""Per-request working context.

Each in-flight request owns one RequestContext: a private scratch
directory with a unique name, the ledger of every temporary file the
request created, and an optional deadline. Nothing here is shared
between requests.

Cleanup is best-effort. A file that cannot be deleted is logged and
reported as a ResourceCleanupWarning; it never turns a success into a
failure or replaces the error a failed request is already raising.
"""

import logging
import time
import uuid
import warnings
from pathlib import Path

from .common import unique_name
from .errors import ConversionError, ResourceCleanupWarning

logger = logging.getLogger(__name__)


class RequestContext:
    def __init__(self, scratch_root: str | Path, timeout: float | None = None):
        self.request_id = str(uuid.uuid4())
        self.scratch_dir = Path(scratch_root) / f"request-{self.request_id}"
        self.temp_files: list[Path] = []
        self._deadline = time.monotonic() + timeout if timeout else None
        self._created_dir = False

    # ── Scratch namespace ─────────────────────────────────────────

    def temp_path(self, prefix: str, suffix: str) -> Path:
        """Reserve a unique path in the scratch namespace and record it."""
        if not self._created_dir:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
            self._created_dir = True
        path = self.scratch_dir / unique_name(prefix, suffix)
        self.temp_files.append(path)
        return path

    # ── Deadline ──────────────────────────────────────────────────

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded.

        Raises:
            ConversionError: The deadline has already passed.
        """
        if self._deadline is None:
            return None
        left = self._deadline - time.monotonic()
        if left <= 0:
            raise ConversionError(f"Request {self.request_id} exceeded its deadline")
        return left

    # ── Cleanup ───────────────────────────────────────────────────

    def cleanup(self) -> list[Path]:
        """Delete every recorded temp file and the scratch directory.

        Returns the paths that could not be removed.
        """
        failed = []
        for path in self.temp_files:
            try:
                path.unlink(missing_ok=True)
                logger.debug("Deleted temp file %s", path)
            except OSError as exc:
                failed.append(path)
                _warn_cleanup(f"Failed to delete temp file {path}: {exc}")
        self.temp_files = failed

        if self._created_dir:
            try:
                self.scratch_dir.rmdir()
                self._created_dir = False
            except FileNotFoundError:
                self._created_dir = False
            except OSError as exc:
                _warn_cleanup(f"Failed to remove scratch dir {self.scratch_dir}: {exc}")
        return failed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False


def _warn_cleanup(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, ResourceCleanupWarning, stacklevel=3)


def discard_output(path: str | Path) -> None:
    """Remove a partially written output file, best-effort."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        _warn_cleanup(f"Failed to delete partial output {path}: {exc}")
