"""
Error types raised by the PixelGuard core.
"""


class PixelGuardError(Exception):
    """Base class for all PixelGuard failures."""


class LoadError(PixelGuardError):
    """The input could not be opened as a PDF (malformed, empty or encrypted)."""


class TransformError(PixelGuardError):
    """A viewport or rectangle is degenerate or outside the page."""


class RenderError(PixelGuardError):
    """A page could not be rasterized."""


class ExportConflict(PixelGuardError):
    """An export is already running for the same session."""


class EncodeError(PixelGuardError):
    """An effect result could not be encoded as an embeddable image."""
