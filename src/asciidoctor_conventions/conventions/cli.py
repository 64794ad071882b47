"""Command handlers for building documentation projects with the conventions."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from asciidoctor_conventions.asciidoctor.plugin import AbstractAsciidoctorTask
from asciidoctor_conventions.core import config_templates
from asciidoctor_conventions.core import workspace as workspace_mod
from asciidoctor_conventions.core.config_templates import ConfigTemplateError
from asciidoctor_conventions.core.logging import configure_logger
from asciidoctor_conventions.core.workspace import WorkspaceError
from asciidoctor_conventions.errors import ConventionsError
from asciidoctor_conventions.host.artifacts import ArtifactResolver
from asciidoctor_conventions.host.executor import BuildSummary
from asciidoctor_conventions.host.project import Project

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ConventionsConfigError,
    LoadResult,
    load_config,
)
from .descriptor import (
    DESCRIPTOR_FILENAME,
    DescriptorError,
    build_project,
    load_descriptor,
)

_LOGGER_NAME = "asciidoctor_conventions.build"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        type=Path,
        help=f"Directory holding {DESCRIPTOR_FILENAME}.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a conventions.toml file (defaults to the workspace "
            "config directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config, logs and cache.",
    )
    parser.add_argument(
        "--repository",
        help="Repository URL used when the project declares none.",
    )
    parser.add_argument(
        "--html-executable",
        help="Executable used for HTML render tasks.",
    )
    parser.add_argument(
        "--pdf-executable",
        help="Executable used for PDF render tasks.",
    )
    parser.add_argument(
        "--jvm-executable",
        help="AsciidoctorJ executable used when Java extensions are configured.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciidoctor-conventions build",
        description=(
            "Render a documentation project with the Asciidoctor "
            "conventions applied."
        ),
        epilog=(
            "Run `asciidoctor-conventions config init` to scaffold the "
            "default conventions.toml template."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "tasks",
        nargs="*",
        help="Tasks to run (defaults to every render task).",
    )
    return parser


def _build_tasks_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciidoctor-conventions tasks",
        description="List the tasks of a documentation project.",
    )
    _add_common_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``asciidoctor-conventions build``."""

    parser = _build_parser()
    # Task names may follow options: `build docs --verbose asciidoctor`.
    args = parser.parse_intermixed_args(
        list(argv) if argv is not None else None
    )
    load_result = _load_settings(parser, args)

    logger, log_path = configure_logger(
        _LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.settings.log_level,
        verbose=args.verbose,
    )
    logger.debug("build CLI invoked", extra={"project_dir": args.project_dir})

    try:
        project = _load_project(args.project_dir, load_result, logger)
    except DescriptorError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 2
    except ConventionsError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    requested = list(args.tasks) or list(_render_task_names(project))
    if not requested:
        sys.stdout.write("No render tasks declared; nothing to do.\n")
        return 0

    try:
        summary = project.run(*requested)
    except ConventionsError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    _print_summary(summary, log_path)
    return summary.exit_code


def tasks_main(
    argv: Sequence[str] | None = None, *, console: Optional[Console] = None
) -> int:
    """Entry point for ``asciidoctor-conventions tasks``."""

    parser = _build_tasks_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    load_result = _load_settings(parser, args)

    logger, _ = configure_logger(
        _LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.settings.log_level,
        verbose=args.verbose,
    )
    try:
        project = _load_project(args.project_dir, load_result, logger)
    except DescriptorError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 2
    except ConventionsError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    (console or Console()).print(_task_table(project))
    return 0


def _load_settings(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> LoadResult:
    overrides = ConfigOverrides(
        default_repository=args.repository,
        html_executable=args.html_executable,
        pdf_executable=args.pdf_executable,
        jvm_executable=args.jvm_executable,
        log_level=args.log_level,
    )
    try:
        return load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except (ConventionsConfigError, WorkspaceError) as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def _load_project(
    project_dir: Path, load_result: LoadResult, logger: logging.Logger
) -> Project:
    descriptor = load_descriptor(project_dir)
    resolver = ArtifactResolver(
        load_result.layout.path_for("artifacts"), logger=logger
    )
    return build_project(
        descriptor,
        settings=load_result.settings,
        resolver=resolver,
        logger=logger,
    )


def _render_task_names(project: Project) -> tuple[str, ...]:
    return tuple(
        task.name for task in project.tasks.of_type(AbstractAsciidoctorTask)
    )


def _task_table(project: Project) -> Table:
    table = Table(title=f"Tasks of {project.name}", box=box.SIMPLE)
    table.add_column("Task", style="bold", no_wrap=True)
    table.add_column("Type")
    table.add_column("Depends on", overflow="fold")
    for task in project.tasks:
        table.add_row(
            task.name,
            type(task).__name__,
            ", ".join(task.dependency_names()) or "-",
        )
    return table


def _print_summary(summary: BuildSummary, log_path: Path) -> None:
    lines = [
        "build summary:",
        "  succeeded: {0}".format(summary.success_count),
        "  failed:    {0}".format(summary.failure_count),
        "  skipped:   {0}".format(summary.skipped_count),
        "  log file:  {0}".format(log_path),
    ]
    sys.stdout.write("\n".join(lines) + "\n")
    for failure in summary.failures:
        sys.stderr.write(f"Task '{failure.task}' failed: {failure.reason}\n")


def config_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``asciidoctor-conventions config``."""

    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciidoctor-conventions config",
        description="Manage configuration files for the conventions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write a packaged configuration template.",
    )
    init_parser.add_argument(
        "--template",
        choices=[template.name for template in config_templates.iter_templates()],
        default="conventions",
        help=(
            "Template to write: tool settings (conventions) or a starter "
            f"{DESCRIPTOR_FILENAME} (project)."
        ),
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination file (defaults to the workspace config directory, "
            f"or ./{DESCRIPTOR_FILENAME} for the project template)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if it already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        template = config_templates.get_template(args.template)
        written = template.write(target, overwrite=args.force, mode=0o644)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote {template.name} template to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    if args.template == "project":
        return Path.cwd() / DESCRIPTOR_FILENAME

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
