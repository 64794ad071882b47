"""Exception hierarchy shared by the host model and the conventions."""

from __future__ import annotations

__all__ = [
    "ConventionsError",
    "ResolutionError",
    "StagingError",
    "RenderError",
    "TaskGraphError",
]


class ConventionsError(RuntimeError):
    """Base class for every failure raised by asciidoctor_conventions."""


class ResolutionError(ConventionsError):
    """Raised when an artifact coordinate cannot be resolved or fetched."""


class StagingError(ConventionsError):
    """Raised when copying or extracting files into the build tree fails."""


class RenderError(ConventionsError):
    """Raised when the Asciidoctor process fails or emits a fatal warning."""


class TaskGraphError(ConventionsError):
    """Raised for unknown task names and dependency cycles."""
