"""Error taxonomy for grid composition.

Every hard failure a request can hit is one of the three CompositorError
subclasses. Cleanup problems are reported as a warning category and
never raised.
"""


class CompositorError(Exception):
    """Base class for composition failures surfaced to callers."""


class InvalidLayoutError(CompositorError, ValueError):
    """Unknown layout, bad canvas size, or slot index out of range.

    Raised before any file is read or written.
    """


class ProbeError(CompositorError):
    """A source media file could not be inspected."""


class ConversionError(CompositorError):
    """A resize, encode, scale or synthesis step failed.

    Carries the tail of the external tool's stderr when there is one.
    """

    def __init__(self, message: str, stderr: str | None = None):
        super().__init__(message)
        self.stderr = stderr

    def __str__(self):
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr}"
        return base


class ResourceCleanupWarning(UserWarning):
    """A temporary artifact could not be deleted."""
