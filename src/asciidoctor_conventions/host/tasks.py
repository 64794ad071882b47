"""Named build tasks, the sync task and the live task container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Callable,
    Generic,
    Iterable,
    Iterator,
    Optional,
    TypeVar,
    Union,
)

from asciidoctor_conventions.core.files import (
    DuplicatesStrategy,
    clear_directory,
    copy_directory,
    extract_archive,
)
from asciidoctor_conventions.errors import StagingError, TaskGraphError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .project import Project

__all__ = [
    "CopySource",
    "SyncTask",
    "Task",
    "TaskAction",
    "TaskContainer",
    "ZipTree",
]

TaskAction = Callable[["Task"], None]
T = TypeVar("T", bound="Task")


class Task:
    """A unit of work with declared predecessors.

    Subclasses implement :meth:`run`; callers may wrap it with
    :meth:`do_first` / :meth:`do_last` hooks.
    """

    def __init__(self, name: str, project: "Project") -> None:
        self.name = name
        self.project = project
        self._depends_on: list[Union[str, "Task"]] = []
        self._first: list[TaskAction] = []
        self._last: list[TaskAction] = []

    def depends_on(self, *tasks: Union[str, "Task"]) -> None:
        for task in tasks:
            if task not in self._depends_on:
                self._depends_on.append(task)

    def dependency_names(self) -> tuple[str, ...]:
        names: list[str] = []
        for task in self._depends_on:
            name = task if isinstance(task, str) else task.name
            if name not in names:
                names.append(name)
        return tuple(names)

    def do_first(self, action: TaskAction) -> None:
        self._first.insert(0, action)

    def do_last(self, action: TaskAction) -> None:
        self._last.append(action)

    def execute(self) -> None:
        for action in self._first:
            action(self)
        self.run()
        for action in self._last:
            action(self)

    def run(self) -> None:
        """Task body; the base task only runs its hooks."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


@dataclass(frozen=True)
class ZipTree:
    """The contents of a zip archive, used as a copy source."""

    archive: Path


CopySource = Union[Path, ZipTree, Task]
LazySources = Callable[[], Iterable[Union[Path, ZipTree]]]


@dataclass(frozen=True)
class _CopySpec:
    sources: Union[CopySource, LazySources]
    into: str
    duplicates: DuplicatesStrategy


class SyncTask(Task):
    """Make ``destination_dir`` hold exactly the files of its sources.

    The destination is cleared before copying. Sources are copied in the
    order they were declared; a relative path claimed by an earlier source
    is subject to the later source's :class:`DuplicatesStrategy`.
    """

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self.destination_dir: Optional[Path] = None
        self._specs: list[_CopySpec] = []

    def into(self, destination: Path) -> None:
        self.destination_dir = self.project.file(destination)

    def from_(
        self,
        sources: Union[CopySource, LazySources],
        *,
        into: str = "",
        duplicates: DuplicatesStrategy = DuplicatesStrategy.INCLUDE,
    ) -> None:
        """Add a copy source.

        A task source copies that task's ``destination_dir`` and makes this
        task depend on it. A callable is evaluated at execution time and may
        return directories and :class:`ZipTree` entries.
        """

        if isinstance(sources, Task):
            self.depends_on(sources)
        self._specs.append(_CopySpec(sources, into, duplicates))

    def run(self) -> None:
        if self.destination_dir is None:
            raise StagingError(f"Task '{self.name}' has no destination.")
        clear_directory(self.destination_dir)
        claimed: set[str] = set()
        for spec in self._specs:
            for source in self._expand(spec.sources):
                if isinstance(source, ZipTree):
                    extract_archive(
                        source.archive,
                        self.destination_dir,
                        into=spec.into,
                        duplicates=spec.duplicates,
                        claimed=claimed,
                    )
                else:
                    copy_directory(
                        source,
                        self.destination_dir,
                        into=spec.into,
                        duplicates=spec.duplicates,
                        claimed=claimed,
                    )

    def _expand(
        self, sources: Union[CopySource, LazySources]
    ) -> Iterator[Union[Path, ZipTree]]:
        if isinstance(sources, Task):
            destination = getattr(sources, "destination_dir", None)
            if destination is None:
                raise StagingError(
                    f"Task '{sources.name}' has no output directory to copy."
                )
            yield destination
        elif isinstance(sources, (Path, ZipTree)):
            yield sources
        else:
            yield from sources()


class TaskContainer:
    """Tasks of one project, keyed by name.

    :meth:`with_type` callbacks apply to matching tasks already registered
    and to every matching task registered later.
    """

    def __init__(self, project: "Project") -> None:
        self._project = project
        self._tasks: dict[str, Task] = {}
        self._callbacks: list[_TypeCallback] = []

    def create(
        self,
        name: str,
        task_type: type[T],
        configure: Optional[Callable[[T], None]] = None,
    ) -> T:
        task = task_type(name, self._project)
        if configure is not None:
            configure(task)
        self.register(task)
        return task

    def register(self, task: Task) -> Task:
        if task.name in self._tasks:
            raise TaskGraphError(f"Task '{task.name}' already exists.")
        self._tasks[task.name] = task
        for callback in list(self._callbacks):
            callback.offer(task)
        return task

    def with_type(self, task_type: type[T], action: Callable[[T], None]) -> None:
        callback = _TypeCallback(task_type, action)
        self._callbacks.append(callback)
        for task in list(self._tasks.values()):
            callback.offer(task)

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError as exc:
            raise TaskGraphError(f"Task '{name}' not found.") from exc

    def find(self, name: str) -> Optional[Task]:
        return self._tasks.get(name)

    def of_type(self, task_type: type[T]) -> tuple[T, ...]:
        return tuple(t for t in self._tasks.values() if isinstance(t, task_type))

    def names(self) -> tuple[str, ...]:
        return tuple(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)


@dataclass
class _TypeCallback(Generic[T]):
    task_type: type[T]
    action: Callable[[T], None]

    def offer(self, task: Task) -> None:
        if isinstance(task, self.task_type):
            self.action(task)
