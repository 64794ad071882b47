"""Tool settings for the conventions, loaded from ``conventions.toml``."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from asciidoctor_conventions.core import config as core_config
from asciidoctor_conventions.core import workspace as workspace_mod

from .resources import DEFAULT_RESOURCES_COORDINATE

CONFIG_FILENAME = "conventions.toml"
CONFIG_ENV = "ASCIIDOCTOR_CONVENTIONS_CONFIG"
ENV_PREFIX = "ASCIIDOCTOR_CONVENTIONS_"

DEFAULT_REPOSITORY = "https://repo.spring.io/libs-release"
DEFAULT_EXTENSION_COORDINATES: tuple[str, ...] = (
    "io.spring.asciidoctor:spring-asciidoctor-extensions-block-switch:"
    "0.3.0.RELEASE",
)
DEFAULT_FATAL_WARNINGS: tuple[str, ...] = (".*",)
_DEFAULT_LOG_LEVEL = "INFO"


class ConventionsConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ConventionSettings:
    """Fully resolved settings for one build."""

    default_repository: str = DEFAULT_REPOSITORY
    resources_coordinate: str = DEFAULT_RESOURCES_COORDINATE
    extension_coordinates: tuple[str, ...] = DEFAULT_EXTENSION_COORDINATES
    html_executable: str = "asciidoctor"
    pdf_executable: str = "asciidoctor-pdf"
    jvm_executable: str = "asciidoctorj"
    fatal_warnings: tuple[str, ...] = DEFAULT_FATAL_WARNINGS
    log_level: str = _DEFAULT_LOG_LEVEL


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    default_repository: Optional[str] = None
    html_executable: Optional[str] = None
    pdf_executable: Optional[str] = None
    jvm_executable: Optional[str] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Loaded settings together with the workspace they came from."""

    settings: ConventionSettings
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load settings applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested_path)
            )
        except core_config.TomlConfigError as exc:
            raise ConventionsConfigError(str(exc)) from exc
        loaded_path = requested_path
    elif config_path is not None or _env_config(env_map):
        raise ConventionsConfigError(
            f"Config file not found: {requested_path}"
        )

    settings = ConventionSettings(
        default_repository=_require_string(
            "repositories.default_url",
            _pick_first(
                overrides.default_repository,
                _env_string(env_map, "DEFAULT_REPOSITORY"),
                table["repositories"]["default_url"],
            ),
        ),
        resources_coordinate=_require_string(
            "resources.coordinate",
            _pick_first(
                _env_string(env_map, "RESOURCES_COORDINATE"),
                table["resources"]["coordinate"],
            ),
        ),
        extension_coordinates=_string_tuple(
            "extensions.coordinates",
            _pick_first(
                _env_list(env_map, "EXTENSIONS"),
                table["extensions"]["coordinates"],
            ),
        ),
        html_executable=_require_string(
            "asciidoctor.html_executable",
            _pick_first(
                overrides.html_executable,
                _env_string(env_map, "HTML_EXECUTABLE"),
                table["asciidoctor"]["html_executable"],
            ),
        ),
        pdf_executable=_require_string(
            "asciidoctor.pdf_executable",
            _pick_first(
                overrides.pdf_executable,
                _env_string(env_map, "PDF_EXECUTABLE"),
                table["asciidoctor"]["pdf_executable"],
            ),
        ),
        jvm_executable=_require_string(
            "asciidoctor.jvm_executable",
            _pick_first(
                overrides.jvm_executable,
                _env_string(env_map, "JVM_EXECUTABLE"),
                table["asciidoctor"]["jvm_executable"],
            ),
        ),
        fatal_warnings=_patterns(table["asciidoctor"]["fatal_warnings"]),
        log_level=_require_string(
            "logging.level",
            _pick_first(
                overrides.log_level,
                _env_string(env_map, "LOG_LEVEL"),
                table["logging"]["level"],
            ),
        ).upper(),
    )
    return LoadResult(
        settings=settings, layout=layout, config_path=loaded_path
    )


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    defaults = ConventionSettings()
    return {
        "repositories": {"default_url": defaults.default_repository},
        "resources": {"coordinate": defaults.resources_coordinate},
        "extensions": {"coordinates": list(defaults.extension_coordinates)},
        "asciidoctor": {
            "html_executable": defaults.html_executable,
            "pdf_executable": defaults.pdf_executable,
            "jvm_executable": defaults.jvm_executable,
            "fatal_warnings": list(defaults.fatal_warnings),
        },
        "logging": {"level": defaults.log_level},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_config(env_map)
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _require_string(key: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConventionsConfigError(f"{key} must be a non-empty string.")
    return value.strip()


def _string_tuple(key: str, value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ConventionsConfigError(f"{key} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConventionsConfigError(
                f"{key} entries must be non-empty strings."
            )
        if item.strip() not in items:
            items.append(item.strip())
    return tuple(items)


def _patterns(value: object) -> tuple[str, ...]:
    patterns = _string_tuple("asciidoctor.fatal_warnings", value)
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConventionsConfigError(
                f"Invalid fatal warning pattern '{pattern}': {exc}"
            ) from exc
    return patterns


def _env_list(env_map: Mapping[str, str], key: str) -> Optional[Sequence[str]]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    parts = [part for part in raw.replace(",", " ").split() if part]
    return parts or None


def _env_config(env_map: Mapping[str, str]) -> Optional[str]:
    raw = (env_map.get(CONFIG_ENV) or "").strip()
    return raw or None


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
