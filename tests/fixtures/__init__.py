"""Shared testing fixtures for the asciidoctor_conventions test suite."""

from .maven import (  # noqa: F401
    BLOCK_SWITCH_COORDINATE,
    RESOURCES_COORDINATE,
    MavenRepoBuilder,
    zip_bytes,
)
from .projects import ProjectHarness  # noqa: F401
from .renderer import FakeRenderer, RenderCall  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "BLOCK_SWITCH_COORDINATE",
    "FakeRenderer",
    "MavenRepoBuilder",
    "ProjectHarness",
    "RESOURCES_COORDINATE",
    "RenderCall",
    "WorkspaceBuilder",
    "build_tree",
    "zip_bytes",
]
