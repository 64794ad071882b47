"""Minimal in-process build host: projects, tasks and artifact resolution."""

from __future__ import annotations

from .artifacts import ArtifactResolver, Coordinate, MavenRepository
from .executor import (
    BuildSummary,
    TaskOutcome,
    TaskStatus,
    execution_plan,
    run_tasks,
)
from .project import (
    Configuration,
    ConfigurationContainer,
    ExtensionContainer,
    Plugin,
    PluginContainer,
    Project,
    RepositoryHandler,
)
from .tasks import SyncTask, Task, TaskContainer, ZipTree

__all__ = [
    "ArtifactResolver",
    "BuildSummary",
    "Configuration",
    "ConfigurationContainer",
    "Coordinate",
    "ExtensionContainer",
    "MavenRepository",
    "Plugin",
    "PluginContainer",
    "Project",
    "RepositoryHandler",
    "SyncTask",
    "Task",
    "TaskContainer",
    "TaskOutcome",
    "TaskStatus",
    "ZipTree",
    "execution_plan",
    "run_tasks",
]
