"""Command-line invocation of the ``asciidoctor`` family of executables.

The render engine is external; this module only translates a render request
into an argument vector, runs it, and classifies what the process reported.
Warnings printed by Asciidoctor are matched against the fatal-warning
patterns so a warning such as a missing attribute reference fails the render
exactly like a non-zero exit would.

Java extension libraries are handed over with ``--classpath``, which only the
AsciidoctorJ command line understands; render tasks switch to it whenever
such libraries are configured.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from asciidoctor_conventions.errors import RenderError

__all__ = [
    "AttributeValue",
    "ProcessRunner",
    "RenderRequest",
    "RenderResult",
    "build_command",
    "format_attribute",
    "render",
]

AttributeValue = Union[str, bool, int]
ProcessRunner = Callable[..., "subprocess.CompletedProcess[str]"]

_WARNING_RE = re.compile(r"^asciidoctor:\s+(WARNING|ERROR|FATAL):\s*(?P<message>.*)$")

# Options understood by the CLI and the flag each one maps to.
_OPTION_FLAGS = {
    "doctype": "--doctype",
    "safe": "--safe-mode",
    "template_dirs": "--template-dir",
    "template_engine": "--template-engine",
}

# Converters the plain ``asciidoctor`` executable must load for a backend.
_BACKEND_LIBRARIES = {
    "pdf": "asciidoctor-pdf",
    "epub3": "asciidoctor-epub3",
}


@dataclass(frozen=True)
class RenderRequest:
    """Everything needed to render one backend of one render task."""

    executable: str
    backend: str
    sources: tuple[Path, ...]
    source_dir: Path
    output_dir: Path
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    options: Mapping[str, object] = field(default_factory=dict)
    base_dir: Optional[Path] = None
    requires: tuple[Path, ...] = ()
    classpath: tuple[Path, ...] = ()
    fatal_warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderResult:
    returncode: int
    warnings: tuple[str, ...]
    stdout: str = ""
    stderr: str = ""


def format_attribute(key: str, value: AttributeValue) -> str:
    """Render ``key``/``value`` as an ``-a`` argument.

    ``True`` sets the attribute with an empty value, ``False`` unsets it.
    """

    if value is True:
        return key
    if value is False:
        return f"{key}!"
    return f"{key}={value}"


def build_command(request: RenderRequest) -> list[str]:
    command = [request.executable, "--backend", request.backend]
    for key, value in request.options.items():
        flag = _OPTION_FLAGS.get(key)
        if flag is None:
            raise RenderError(f"Unsupported Asciidoctor option '{key}'.")
        values = value if isinstance(value, (list, tuple)) else (value,)
        for item in values:
            command.extend([flag, str(item)])
    for key, value in request.attributes.items():
        command.extend(["--attribute", format_attribute(key, value)])
    if request.base_dir is not None:
        command.extend(["--base-dir", str(request.base_dir)])
    converter = _BACKEND_LIBRARIES.get(request.backend)
    if converter and Path(request.executable).name == "asciidoctor":
        command.extend(["--require", converter])
    for library in request.requires:
        command.extend(["--require", str(library)])
    if request.classpath:
        command.extend(
            ["--classpath", os.pathsep.join(str(p) for p in request.classpath)]
        )
    command.extend(["--source-dir", str(request.source_dir)])
    command.extend(["--destination-dir", str(request.output_dir)])
    command.extend(str(source) for source in request.sources)
    return command


def render(
    request: RenderRequest,
    *,
    run: Optional[ProcessRunner] = None,
    logger: Optional[logging.Logger] = None,
) -> RenderResult:
    """Run the renderer for ``request``.

    Raises :class:`RenderError` when the executable is missing, exits
    non-zero, or prints a warning matching ``request.fatal_warnings``.
    """

    log = logger or logging.getLogger(__name__)
    runner = run or subprocess.run
    command = build_command(request)

    request.output_dir.mkdir(parents=True, exist_ok=True)
    log.debug("Invoking renderer", extra={"command": command})
    try:
        completed = runner(
            command,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise RenderError(
            f"Renderer '{request.executable}' was not found on PATH."
        ) from exc

    warnings = tuple(_iter_warnings(completed.stderr or ""))
    for message in warnings:
        log.warning(
            "Asciidoctor reported a problem",
            extra={"backend": request.backend, "detail": message},
        )

    if completed.returncode != 0:
        detail = (completed.stderr or completed.stdout or "").strip()
        raise RenderError(
            "{0} exited with status {1}{2}".format(
                request.executable,
                completed.returncode,
                f": {detail}" if detail else "",
            )
        )

    fatal = [m for m in warnings if _is_fatal(m, request.fatal_warnings)]
    if fatal:
        raise RenderError(
            "Asciidoctor warnings are fatal:\n  " + "\n  ".join(fatal)
        )

    return RenderResult(
        returncode=completed.returncode,
        warnings=warnings,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


def _iter_warnings(stderr: str):
    for line in stderr.splitlines():
        match = _WARNING_RE.match(line.strip())
        if match:
            yield match.group("message")


def _is_fatal(message: str, patterns: Sequence[str]) -> bool:
    return any(re.search(pattern, message) for pattern in patterns)
