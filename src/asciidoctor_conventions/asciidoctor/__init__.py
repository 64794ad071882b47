"""Asciidoctor render plugin for the in-process host."""

from __future__ import annotations

from .plugin import (
    ASCIIDOCTOR_PLUGIN_ID,
    AbstractAsciidoctorTask,
    AsciidoctorExtension,
    AsciidoctorPdfTask,
    AsciidoctorPlugin,
    AsciidoctorTask,
    BaseDirStrategy,
    normalize_backends,
    task_type_for,
)
from .runner import (
    RenderRequest,
    RenderResult,
    build_command,
    format_attribute,
    render,
)

__all__ = [
    "ASCIIDOCTOR_PLUGIN_ID",
    "AbstractAsciidoctorTask",
    "AsciidoctorExtension",
    "AsciidoctorPdfTask",
    "AsciidoctorPlugin",
    "AsciidoctorTask",
    "BaseDirStrategy",
    "RenderRequest",
    "RenderResult",
    "build_command",
    "format_attribute",
    "normalize_backends",
    "render",
    "task_type_for",
]
