"""The Asciidoctor render plugin: its extension object and render tasks."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional, Sequence, Union

from asciidoctor_conventions.host.tasks import Task

from .runner import AttributeValue, ProcessRunner, RenderRequest, render

if TYPE_CHECKING:  # pragma: no cover - typing only
    from asciidoctor_conventions.host.project import Configuration, Project

__all__ = [
    "ASCIIDOCTOR_PLUGIN_ID",
    "AbstractAsciidoctorTask",
    "AsciidoctorExtension",
    "AsciidoctorPdfTask",
    "AsciidoctorPlugin",
    "AsciidoctorTask",
    "BaseDirStrategy",
    "DEFAULT_SOURCE_DIR",
    "EXTENSION_NAME",
    "normalize_backends",
    "task_type_for",
]

ASCIIDOCTOR_PLUGIN_ID = "asciidoctor"
EXTENSION_NAME = "asciidoctorj"

DEFAULT_SOURCE_DIR = "src/docs/asciidoc"


class AsciidoctorExtension:
    """Project-wide render settings shared by every render task."""

    def __init__(
        self,
        *,
        html_executable: str = "asciidoctor",
        pdf_executable: str = "asciidoctor-pdf",
        jvm_executable: str = "asciidoctorj",
    ) -> None:
        self.html_executable = html_executable
        self.pdf_executable = pdf_executable
        self.jvm_executable = jvm_executable
        self.fatal_warning_patterns: list[str] = []
        self.process_runner: Optional[ProcessRunner] = None

    def fatal_warnings(self, *patterns: str) -> None:
        """Treat renderer warnings matching any of ``patterns`` as failures."""

        for pattern in patterns:
            if pattern not in self.fatal_warning_patterns:
                self.fatal_warning_patterns.append(pattern)


class AsciidoctorPlugin:
    """Adds :class:`AsciidoctorExtension`; render tasks are declared separately."""

    plugin_id = ASCIIDOCTOR_PLUGIN_ID

    def __init__(
        self,
        *,
        html_executable: str = "asciidoctor",
        pdf_executable: str = "asciidoctor-pdf",
        jvm_executable: str = "asciidoctorj",
    ) -> None:
        self._html_executable = html_executable
        self._pdf_executable = pdf_executable
        self._jvm_executable = jvm_executable

    def apply(self, project: "Project") -> None:
        project.extensions.add(
            EXTENSION_NAME,
            AsciidoctorExtension(
                html_executable=self._html_executable,
                pdf_executable=self._pdf_executable,
                jvm_executable=self._jvm_executable,
            ),
        )


class BaseDirStrategy(Enum):
    """Where include directives and relative paths are resolved from."""

    PROJECT_DIR = "project"
    SOURCE_FILE = "source-file"


class AbstractAsciidoctorTask(Task):
    """One render job: sources, per-backend outputs, attributes and options."""

    default_backends: tuple[str, ...] = ()
    is_html = False

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self._source_dir: Path = project.file(DEFAULT_SOURCE_DIR)
        self.output_dir: Path = project.build_dir / "docs" / "asciidoc"
        self.backends: tuple[str, ...] = self.default_backends
        self._attributes: dict[str, AttributeValue] = {}
        self._options: dict[str, object] = {}
        self._configurations: list["Configuration"] = []
        self.base_dir_strategy = BaseDirStrategy.PROJECT_DIR

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    def set_source_dir(self, path: Union[str, Path]) -> None:
        self._source_dir = self.project.file(path)

    def set_output_dir(self, path: Union[str, Path]) -> None:
        self.output_dir = self.project.file(path)

    @property
    def attributes_map(self) -> Mapping[str, AttributeValue]:
        return dict(self._attributes)

    @property
    def options_map(self) -> Mapping[str, object]:
        return dict(self._options)

    @property
    def extension_configurations(self) -> tuple["Configuration", ...]:
        return tuple(self._configurations)

    def attributes(self, values: Mapping[str, AttributeValue]) -> None:
        self._attributes.update(values)

    def options(self, values: Mapping[str, object]) -> None:
        self._options.update(values)

    def configurations(self, *configurations: "Configuration") -> None:
        for configuration in configurations:
            if configuration not in self._configurations:
                self._configurations.append(configuration)

    def base_dir_follows_source_file(self) -> None:
        self.base_dir_strategy = BaseDirStrategy.SOURCE_FILE

    def backend_output_directories(self) -> tuple[Path, ...]:
        """One directory per backend; nested only when there are several."""

        if len(self.backends) == 1:
            return (self.output_dir,)
        return tuple(self.output_dir / backend for backend in self.backends)

    def source_files(self) -> tuple[Path, ...]:
        """``*.adoc`` files below the source dir, skipping ``_``-prefixed parts."""

        root = self.source_dir
        if not root.is_dir():
            return ()
        return tuple(
            path
            for path in sorted(root.rglob("*.adoc"))
            if not any(
                part.startswith("_") for part in path.relative_to(root).parts
            )
        )

    def executable(self, extension: AsciidoctorExtension) -> str:
        raise NotImplementedError

    def run(self) -> None:
        extension = self.project.extensions.get_by_type(AsciidoctorExtension)
        sources = self.source_files()
        if not sources:
            self.project.logger.info(
                "No Asciidoctor sources found",
                extra={"task": self.name, "source_dir": self.source_dir},
            )
            return
        requires, classpath = self._extension_libraries()
        # Ruby Asciidoctor cannot load jars.
        executable = (
            extension.jvm_executable if classpath else self.executable(extension)
        )
        for backend, output_dir in zip(
            self.backends, self.backend_output_directories()
        ):
            request = RenderRequest(
                executable=executable,
                backend=backend,
                sources=sources,
                source_dir=self.source_dir,
                output_dir=output_dir,
                attributes=self.attributes_map,
                options=self.options_map,
                base_dir=self._base_dir(),
                requires=requires,
                classpath=classpath,
                fatal_warnings=tuple(extension.fatal_warning_patterns),
            )
            render(
                request,
                run=extension.process_runner,
                logger=self.project.logger,
            )
            self.project.logger.info(
                "Rendered documentation",
                extra={
                    "task": self.name,
                    "backend": backend,
                    "output_dir": output_dir,
                    "source_count": len(sources),
                },
            )

    def _base_dir(self) -> Optional[Path]:
        # Asciidoctor resolves relative to each source file when no base dir
        # is given on the command line.
        if self.base_dir_strategy is BaseDirStrategy.SOURCE_FILE:
            return None
        return self.project.project_dir

    def _extension_libraries(self) -> tuple[tuple[Path, ...], tuple[Path, ...]]:
        requires: list[Path] = []
        classpath: list[Path] = []
        for configuration in self._configurations:
            for library in configuration.resolve():
                target = requires if library.suffix == ".rb" else classpath
                if library not in target:
                    target.append(library)
        return tuple(requires), tuple(classpath)


class AsciidoctorTask(AbstractAsciidoctorTask):
    """HTML render task."""

    default_backends = ("html5",)
    is_html = True

    def executable(self, extension: AsciidoctorExtension) -> str:
        return extension.html_executable


class AsciidoctorPdfTask(AbstractAsciidoctorTask):
    """PDF render task."""

    default_backends = ("pdf",)

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self.output_dir = project.build_dir / "docs" / "asciidocPdf"

    def executable(self, extension: AsciidoctorExtension) -> str:
        return extension.pdf_executable


def task_type_for(kind: str) -> type[AbstractAsciidoctorTask]:
    """Map a descriptor ``type`` value to a render task class."""

    normalized = kind.strip().lower()
    if normalized in ("html", "html5"):
        return AsciidoctorTask
    if normalized == "pdf":
        return AsciidoctorPdfTask
    raise ValueError(f"Unknown render task type '{kind}'. Expected html or pdf.")


def normalize_backends(values: Sequence[str]) -> tuple[str, ...]:
    backends = tuple(dict.fromkeys(v.strip() for v in values if v.strip()))
    if not backends:
        raise ValueError("At least one backend must be declared.")
    return backends
