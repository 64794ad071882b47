"""``asciidoctor-conventions init``: prepare the per-user workspace.

Besides creating the ``config``, ``logs`` and ``artifacts`` directories the
command reports what each one already holds, so a second run doubles as a
quick look at the settings file and the artifact cache.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from asciidoctor_conventions.conventions.config import CONFIG_FILENAME
from asciidoctor_conventions.core import config_templates
from asciidoctor_conventions.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciidoctor-conventions init",
        description=(
            "Create the workspace holding settings, logs and the artifact "
            "cache, then show what it contains."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Workspace root to use instead of ASCIIDOCTOR_CONVENTIONS_HOME "
            "or ~/.asciidoctor-conventions."
        ),
    )
    parser.add_argument(
        "--with-config",
        action="store_true",
        help=(
            f"Also write the default {CONFIG_FILENAME} into the config "
            "directory when it is missing."
        ),
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print nothing when the workspace is ready.",
    )
    return parser


def main(
    argv: Sequence[str] | None = None, *, console: Optional[Console] = None
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    settings_path = layout.path_for("config") / CONFIG_FILENAME
    settings_status = "present" if settings_path.is_file() else "missing"
    if args.with_config and settings_status == "missing":
        try:
            config_templates.get_template("conventions").write(
                settings_path, mode=0o644
            )
        except config_templates.ConfigTemplateError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1
        settings_status = "written"

    if args.quiet:
        return 0

    console = console or Console()
    state = "created" if layout.created.get("home", False) else "exists"
    console.print(
        f"Workspace ready at {layout.home} ({state})",
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
    console.print(_layout_table(layout, settings_path, settings_status))
    return 0


def _layout_table(
    layout: workspace_mod.WorkspaceLayout, settings_path: Path, settings: str
) -> Table:
    table = Table(box=box.SIMPLE)
    table.add_column("Entry", style="bold", no_wrap=True)
    table.add_column("Path", overflow="fold")
    table.add_column("Status", no_wrap=True)
    table.add_column("Files", justify="right")

    for name, directory in layout.items():
        status = "created" if layout.created.get(name, False) else "exists"
        table.add_row(name, str(directory), status, str(_file_count(directory)))
    table.add_row("settings", str(settings_path), settings, "")
    return table


def _file_count(directory: Path) -> int:
    return sum(1 for entry in directory.rglob("*") if entry.is_file())


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
