"""Build a :class:`Project` from a ``docs-project.toml`` descriptor.

A descriptor looks like::

    [project]
    name = "guide"
    build_dir = "build"
    plugins = ["asciidoctor"]

    [[repositories]]
    url = "https://repo.spring.io/libs-release"

    [[tasks]]
    name = "asciidoctor"
    type = "html"
    source_dir = "src/docs/asciidoc"
    backends = ["html5"]

    [tasks.attributes]
    stylesheet = "css/custom.css"

Without any ``[[tasks]]`` entry a single HTML task named ``asciidoctor``
is declared; ``tasks = []`` declares none.

Render tasks are registered after the conventions plugin, so conventions
see every task; attributes and options declared here are applied after the
conventions and therefore win.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from asciidoctor_conventions.asciidoctor.plugin import (
    ASCIIDOCTOR_PLUGIN_ID,
    AbstractAsciidoctorTask,
    AsciidoctorPlugin,
    normalize_backends,
    task_type_for,
)
from asciidoctor_conventions.core import config as core_config
from asciidoctor_conventions.host.artifacts import ArtifactResolver
from asciidoctor_conventions.host.project import Project

from .config import ConventionSettings
from .plugin import AsciidoctorConventionPlugin

__all__ = [
    "DESCRIPTOR_FILENAME",
    "DescriptorError",
    "ProjectDescriptor",
    "TaskDescriptor",
    "build_project",
    "load_descriptor",
]

DESCRIPTOR_FILENAME = "docs-project.toml"

_TASK_KEYS = frozenset(
    {
        "name",
        "type",
        "source_dir",
        "output_dir",
        "backends",
        "attributes",
        "options",
    }
)
_PROJECT_KEYS = frozenset({"name", "build_dir", "plugins"})


class DescriptorError(RuntimeError):
    """Raised when a project descriptor is missing or malformed."""


@dataclass(frozen=True)
class TaskDescriptor:
    name: str
    type: str = "html"
    source_dir: Optional[str] = None
    output_dir: Optional[str] = None
    backends: tuple[str, ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=dict)
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectDescriptor:
    name: str
    project_dir: Path
    build_dir: str = "build"
    plugins: tuple[str, ...] = (ASCIIDOCTOR_PLUGIN_ID,)
    repositories: tuple[str, ...] = ()
    tasks: tuple[TaskDescriptor, ...] = (
        TaskDescriptor(name="asciidoctor"),
    )


def load_descriptor(project_dir: Path) -> ProjectDescriptor:
    """Read ``docs-project.toml`` from ``project_dir``."""

    root = project_dir.expanduser().resolve()
    path = root / DESCRIPTOR_FILENAME
    try:
        document = core_config.load_toml(path)
        project_table = core_config.require_table(document, "project")
    except core_config.TomlConfigError as exc:
        raise DescriptorError(str(exc)) from exc

    _reject_unknown(project_table, _PROJECT_KEYS, "project")
    repositories = tuple(
        _string(entry.get("url"), "repositories.url")
        for entry in _tables(document.get("repositories"), "repositories")
    )
    declared_tasks = document.get("tasks")
    tasks = tuple(
        _task_descriptor(entry) for entry in _tables(declared_tasks, "tasks")
    )

    descriptor = ProjectDescriptor(
        name=_string(project_table.get("name", root.name), "project.name"),
        project_dir=root,
        build_dir=_string(
            project_table.get("build_dir", "build"), "project.build_dir"
        ),
        plugins=_strings(
            project_table.get("plugins", [ASCIIDOCTOR_PLUGIN_ID]),
            "project.plugins",
        ),
        repositories=repositories,
    )
    if declared_tasks is not None:
        descriptor = replace(descriptor, tasks=tasks)
    names = [task.name for task in descriptor.tasks]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise DescriptorError(
            "Duplicate task names in descriptor: "
            + ", ".join(duplicates)
        )
    return descriptor


def build_project(
    descriptor: ProjectDescriptor,
    *,
    settings: ConventionSettings,
    resolver: ArtifactResolver,
    logger: Optional[logging.Logger] = None,
    conventions: Optional[AsciidoctorConventionPlugin] = None,
) -> Project:
    """Create the project, apply plugins and register the render tasks."""

    project = Project(
        descriptor.name,
        descriptor.project_dir,
        build_dir=descriptor.build_dir,
        resolver=resolver,
        logger=logger,
    )
    for url in descriptor.repositories:
        project.repositories.maven(url)

    project.plugins.apply(conventions or AsciidoctorConventionPlugin(settings))
    for plugin_id in descriptor.plugins:
        if plugin_id != ASCIIDOCTOR_PLUGIN_ID:
            raise DescriptorError(f"Unknown plugin '{plugin_id}'.")
        project.plugins.apply(
            AsciidoctorPlugin(
                html_executable=settings.html_executable,
                pdf_executable=settings.pdf_executable,
                jvm_executable=settings.jvm_executable,
            )
        )

    for task in descriptor.tasks:
        _register_task(project, task)
    return project


def _register_task(
    project: Project, spec: TaskDescriptor
) -> AbstractAsciidoctorTask:
    try:
        task_type = task_type_for(spec.type)
        backends = normalize_backends(spec.backends) if spec.backends else None
    except ValueError as exc:
        raise DescriptorError(f"Task '{spec.name}': {exc}") from exc

    def configure(job: AbstractAsciidoctorTask) -> None:
        if spec.source_dir is not None:
            job.set_source_dir(spec.source_dir)
        if spec.output_dir is not None:
            job.set_output_dir(spec.output_dir)
        if backends is not None:
            job.backends = backends

    job = project.tasks.create(spec.name, task_type, configure)
    job.attributes(spec.attributes)
    job.options(spec.options)
    return job


def _task_descriptor(entry: Mapping[str, Any]) -> TaskDescriptor:
    _reject_unknown(entry, _TASK_KEYS, "tasks")
    name = _string(entry.get("name"), "tasks.name")
    attributes = entry.get("attributes", {})
    options = entry.get("options", {})
    for key, value in (("attributes", attributes), ("options", options)):
        if not isinstance(value, Mapping):
            raise DescriptorError(
                f"tasks.{key} must be a table (task '{name}')."
            )
    return TaskDescriptor(
        name=name,
        type=_string(entry.get("type", "html"), "tasks.type"),
        source_dir=_optional_string(
            entry.get("source_dir"), "tasks.source_dir"
        ),
        output_dir=_optional_string(
            entry.get("output_dir"), "tasks.output_dir"
        ),
        backends=_strings(entry.get("backends", []), "tasks.backends"),
        attributes=dict(attributes),
        options=dict(options),
    )


def _tables(value: object, key: str) -> Sequence[Mapping[str, Any]]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(
        isinstance(item, Mapping) for item in value
    ):
        raise DescriptorError(f"'{key}' must be an array of tables.")
    return value


def _reject_unknown(
    table: Mapping[str, Any], known: frozenset[str], where: str
) -> None:
    unknown = sorted(set(table) - known)
    if unknown:
        raise DescriptorError(
            "Unknown key(s) in [{0}]: {1}".format(where, ", ".join(unknown))
        )


def _string(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise DescriptorError(f"{key} must be a non-empty string.")
    return value.strip()


def _optional_string(value: object, key: str) -> Optional[str]:
    if value is None:
        return None
    return _string(value, key)


def _strings(value: object, key: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise DescriptorError(f"{key} must be a list of strings.")
    return tuple(_string(item, key) for item in value)
