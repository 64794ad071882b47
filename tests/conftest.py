from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed.
ROOT = TESTS_DIR.parent
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from fixtures import (  # noqa: E402
    FakeRenderer,
    MavenRepoBuilder,
    ProjectHarness,
    WorkspaceBuilder,
)

_ENV_KEYS = (
    "ASCIIDOCTOR_CONVENTIONS_CONFIG",
    "ASCIIDOCTOR_CONVENTIONS_DEFAULT_REPOSITORY",
    "ASCIIDOCTOR_CONVENTIONS_RESOURCES_COORDINATE",
    "ASCIIDOCTOR_CONVENTIONS_EXTENSIONS",
    "ASCIIDOCTOR_CONVENTIONS_HTML_EXECUTABLE",
    "ASCIIDOCTOR_CONVENTIONS_PDF_EXECUTABLE",
    "ASCIIDOCTOR_CONVENTIONS_JVM_EXECUTABLE",
    "ASCIIDOCTOR_CONVENTIONS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch) -> None:
    """Keep every test away from the real workspace and user settings."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv(
        "ASCIIDOCTOR_CONVENTIONS_HOME", str(tmp_path / "conventions-home")
    )


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def maven_repo(tmp_path: Path) -> MavenRepoBuilder:
    return MavenRepoBuilder(tmp_path / "maven")


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def harness(tmp_path: Path, renderer: FakeRenderer) -> ProjectHarness:
    """Project with the default resources and extension published locally."""

    harness = ProjectHarness(tmp_path / "harness", renderer=renderer)
    harness.repo.publish_defaults()
    return harness
