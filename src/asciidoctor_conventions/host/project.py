"""The project model the conventions are applied to."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import (
    Any,
    Callable,
    Iterator,
    MutableSequence,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    Union,
)

from asciidoctor_conventions.core.files import copy_directory
from asciidoctor_conventions.errors import ConventionsError

from .artifacts import ArtifactResolver, Coordinate, MavenRepository
from .executor import BuildSummary, run_tasks
from .tasks import TaskContainer

__all__ = [
    "Configuration",
    "ConfigurationContainer",
    "ExtensionContainer",
    "Plugin",
    "PluginContainer",
    "Project",
    "RepositoryHandler",
]

E = TypeVar("E")


class Plugin(Protocol):
    """Anything with an id that can configure a project."""

    plugin_id: str

    def apply(self, project: "Project") -> None: ...


class RepositoryHandler:
    """Ordered artifact repositories of a project."""

    def __init__(self) -> None:
        self._repositories: list[MavenRepository] = []

    def maven(self, url: str) -> MavenRepository:
        repository = MavenRepository(url)
        if repository not in self._repositories:
            self._repositories.append(repository)
        return repository

    def is_empty(self) -> bool:
        return not self._repositories

    def __iter__(self) -> Iterator[MavenRepository]:
        return iter(tuple(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)


DefaultDependencies = Callable[[MutableSequence[str]], None]


class Configuration:
    """A named bucket of dependency coordinates.

    Default-dependency actions only contribute when nothing was declared
    explicitly, so a project can replace the defaults wholesale.
    """

    def __init__(self, name: str, project: "Project") -> None:
        self.name = name
        self._project = project
        self.dependencies: list[str] = []
        self._defaults: list[DefaultDependencies] = []
        self._resolved: Optional[tuple[Path, ...]] = None

    def default_dependencies(self, action: DefaultDependencies) -> None:
        self._defaults.append(action)

    def all_dependencies(self) -> tuple[str, ...]:
        if self.dependencies:
            return tuple(self.dependencies)
        declared: list[str] = []
        for action in self._defaults:
            action(declared)
        return tuple(dict.fromkeys(declared))

    def resolve(self) -> tuple[Path, ...]:
        """Resolve every dependency to a file; memoized per build."""

        if self._resolved is None:
            self._resolved = tuple(
                self._project.resolver.resolve(
                    Coordinate.parse(notation), self._project.repositories
                )
                for notation in self.all_dependencies()
            )
        return self._resolved


class ConfigurationContainer:
    def __init__(self, project: "Project") -> None:
        self._project = project
        self._configurations: dict[str, Configuration] = {}

    def maybe_create(self, name: str) -> Configuration:
        existing = self._configurations.get(name)
        if existing is None:
            existing = Configuration(name, self._project)
            self._configurations[name] = existing
        return existing

    def get(self, name: str) -> Configuration:
        try:
            return self._configurations[name]
        except KeyError as exc:
            raise ConventionsError(f"Configuration '{name}' not found.") from exc

    def __contains__(self, name: object) -> bool:
        return name in self._configurations


class PluginContainer:
    """Applied plugins, queried by id.

    :meth:`with_id` is the activation gate: its action runs once the named
    plugin is applied, whether that happened before or after the call.
    """

    def __init__(self, project: "Project") -> None:
        self._project = project
        self._applied: dict[str, Plugin] = {}
        self._pending: list[tuple[str, Callable[[Plugin], None]]] = []

    def apply(self, plugin: Plugin) -> Plugin:
        existing = self._applied.get(plugin.plugin_id)
        if existing is not None:
            return existing
        self._applied[plugin.plugin_id] = plugin
        plugin.apply(self._project)
        for plugin_id, action in list(self._pending):
            if plugin_id == plugin.plugin_id:
                action(plugin)
        return plugin

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self._applied

    def with_id(self, plugin_id: str, action: Callable[[Plugin], None]) -> None:
        self._pending.append((plugin_id, action))
        applied = self._applied.get(plugin_id)
        if applied is not None:
            action(applied)


class ExtensionContainer:
    """Named configuration objects contributed by plugins."""

    def __init__(self) -> None:
        self._extensions: dict[str, Any] = {}

    def add(self, name: str, extension: E) -> E:
        if name in self._extensions:
            raise ConventionsError(f"Extension '{name}' already exists.")
        self._extensions[name] = extension
        return extension

    def get_by_type(self, extension_type: type[E]) -> E:
        for extension in self._extensions.values():
            if isinstance(extension, extension_type):
                return extension
        raise ConventionsError(
            f"Extension of type {extension_type.__name__} has not been added."
        )

    def find(self, name: str) -> Any:
        return self._extensions.get(name)


class Project:
    """A documentation project rooted at ``project_dir``."""

    def __init__(
        self,
        name: str,
        project_dir: Path,
        *,
        build_dir: Union[str, Path] = "build",
        resolver: ArtifactResolver,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.name = name
        self.project_dir = project_dir.resolve()
        self.build_dir = self.file(build_dir)
        self.resolver = resolver
        self.logger = logger or logging.getLogger("asciidoctor_conventions")
        self.repositories = RepositoryHandler()
        self.configurations = ConfigurationContainer(self)
        self.extensions = ExtensionContainer()
        self.plugins = PluginContainer(self)
        self.tasks = TaskContainer(self)

    def file(self, path: Union[str, Path]) -> Path:
        """Resolve ``path`` against the project directory."""

        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.project_dir / candidate
        return candidate

    def relative_path(self, path: Union[str, Path]) -> str:
        """Return ``path`` relative to the project directory, POSIX style."""

        return Path(os.path.relpath(self.file(path), self.project_dir)).as_posix()

    def copy(
        self,
        source: Path,
        destination: Path,
        *,
        includes: Sequence[str] = (),
    ) -> list[Path]:
        """Copy files from ``source`` into ``destination``, overwriting."""

        return copy_directory(
            self.file(source), self.file(destination), includes=includes
        )

    def run(self, *task_names: str) -> BuildSummary:
        return run_tasks(self.tasks, task_names, logger=self.logger)
