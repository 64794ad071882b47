from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from asciidoctor_conventions.asciidoctor import runner
from asciidoctor_conventions.conventions import cli
from asciidoctor_conventions.conventions.descriptor import DESCRIPTOR_FILENAME

from fixtures import FakeRenderer, MavenRepoBuilder
from fixtures.projects import SIMPLE_DOC

DESCRIPTOR = """
[project]
name = "guide"

[[tasks]]
name = "asciidoctor"

[[tasks]]
name = "asciidoctorPdf"
type = "pdf"
"""


@pytest.fixture
def fake(monkeypatch) -> FakeRenderer:
    renderer = FakeRenderer()
    monkeypatch.setattr(runner.subprocess, "run", renderer)
    return renderer


@pytest.fixture
def repo(tmp_path) -> MavenRepoBuilder:
    return MavenRepoBuilder(tmp_path / "repo").publish_defaults()


@pytest.fixture
def project_dir(workspace):
    return workspace.create(
        {
            "guide": {
                DESCRIPTOR_FILENAME: DESCRIPTOR,
                "src/docs/asciidoc": {"index.adoc": SIMPLE_DOC},
            }
        }
    ) / "guide"


def test_build_renders_every_task(project_dir, repo, fake, capsys):
    code = cli.main([str(project_dir), "--repository", repo.url])

    captured = capsys.readouterr()
    assert code == 0
    assert "build summary:" in captured.out
    assert "succeeded: 5" in captured.out
    assert "failed:    0" in captured.out
    assert captured.err == ""
    assert (project_dir / "build/docs/asciidoc/index.html").is_file()
    assert (project_dir / "build/docs/asciidocPdf/index.pdf").is_file()
    assert [call.backend for call in fake.calls] == ["html5", "pdf"]


@pytest.mark.parametrize(
    "order",
    [
        ("{project}", "--repository", "{repo}", "asciidoctor"),
        ("{project}", "asciidoctor", "--verbose", "--repository", "{repo}"),
        ("--repository", "{repo}", "{project}", "asciidoctor"),
    ],
)
def test_build_selected_task(project_dir, repo, fake, capsys, order):
    argv = [
        item.format(project=project_dir, repo=repo.url) for item in order
    ]

    code = cli.main(argv)

    captured = capsys.readouterr()
    assert code == 0
    assert "succeeded: 3" in captured.out
    assert [call.backend for call in fake.calls] == ["html5"]


def test_build_loads_java_extensions_with_asciidoctorj(project_dir, repo, fake):
    code = cli.main(
        [
            str(project_dir),
            "--repository",
            repo.url,
            "--jvm-executable",
            "/opt/asciidoctorj/bin/asciidoctorj",
        ]
    )

    assert code == 0
    for call in fake.calls:
        assert call.executable == "/opt/asciidoctorj/bin/asciidoctorj"
        assert "block-switch" in call.classpath


def test_build_uses_configured_executables(project_dir, repo, fake, tmp_path):
    config = tmp_path / "no-extensions.toml"
    config.write_text("[extensions]\ncoordinates = []\n", encoding="utf-8")

    code = cli.main(
        [
            str(project_dir),
            "--config",
            str(config),
            "--repository",
            repo.url,
            "--pdf-executable",
            "asciidoctor",
        ]
    )

    assert code == 0
    (html_call, pdf_call) = fake.calls
    assert html_call.executable == "asciidoctor"
    assert pdf_call.executable == "asciidoctor"
    assert pdf_call.requires == ["asciidoctor-pdf"]
    assert pdf_call.classpath == ""


def test_build_reports_failures(project_dir, repo, fake, capsys):
    (project_dir / "src/docs/asciidoc/index.adoc").write_text(
        "= Broken\n\nSee {nowhere}.\n", encoding="utf-8"
    )

    code = cli.main([str(project_dir), "--repository", repo.url])

    captured = capsys.readouterr()
    assert code == 1
    assert "failed:    2" in captured.out
    assert "Task 'asciidoctor' failed:" in captured.err
    assert "missing attribute: nowhere" in captured.err


def test_build_skips_dependents_when_resolution_fails(
    project_dir, tmp_path, fake, capsys
):
    empty = (tmp_path / "empty-repo").as_uri()

    code = cli.main([str(project_dir), "--repository", empty])

    captured = capsys.readouterr()
    assert code == 1
    assert "failed:    1" in captured.out
    assert "skipped:   4" in captured.out
    assert "Could not find" in captured.err
    assert fake.calls == []


def test_build_writes_log_file(project_dir, repo, fake, tmp_path, capsys):
    home = tmp_path / "conventions-home"

    cli.main([str(project_dir), "--repository", repo.url])

    captured = capsys.readouterr()
    log_file = home / "logs" / "build.log"
    assert f"log file:  {log_file}" in captured.out
    assert "Completed build" in log_file.read_text(encoding="utf-8")


def test_build_unknown_task(project_dir, repo, fake, capsys):
    code = cli.main([str(project_dir), "--repository", repo.url, "publish"])

    captured = capsys.readouterr()
    assert code == 1
    assert "Task 'publish' not found." in captured.err


def test_build_without_render_tasks(workspace, capsys):
    project_dir = workspace.create(
        {"empty": {DESCRIPTOR_FILENAME: "tasks = []\n\n[project]\n"}}
    ) / "empty"

    code = cli.main([str(project_dir)])

    captured = capsys.readouterr()
    assert code == 0
    assert "nothing to do" in captured.out


def test_build_missing_descriptor(tmp_path, capsys):
    code = cli.main([str(tmp_path)])

    captured = capsys.readouterr()
    assert code == 2
    assert DESCRIPTOR_FILENAME in captured.err


def test_build_invalid_config_is_usage_error(project_dir, tmp_path, capsys):
    config = tmp_path / "conventions.toml"
    config.write_text("[unknown]\nkey = 1\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(project_dir), "--config", str(config)])

    assert excinfo.value.code == 2
    assert "Unknown configuration key 'unknown'" in capsys.readouterr().err


def test_tasks_lists_graph(project_dir):
    buffer = StringIO()
    console = Console(file=buffer, width=200)

    code = cli.tasks_main([str(project_dir)], console=console)

    output = buffer.getvalue()
    assert code == 0
    assert "Tasks of guide" in output
    assert "unzipDocumentationResources" in output
    assert "syncDocumentationSourceForAsciidoctorPdf" in output
    assert "AsciidoctorPdfTask" in output
    assert (
        "unzipDocumentationResources, syncDocumentationSourceForAsciidoctor"
        in output
    )


def test_config_init_writes_conventions_template(tmp_path, capsys):
    code = cli.config_main(["init"])

    captured = capsys.readouterr()
    target = tmp_path / "conventions-home" / "config" / "conventions.toml"
    assert code == 0
    assert target.is_file()
    assert "[repositories]" in target.read_text(encoding="utf-8")
    assert f"Wrote conventions template to {target}" in captured.out


def test_config_init_refuses_overwrite(tmp_path, capsys):
    target = tmp_path / "custom.toml"
    target.write_text("keep", encoding="utf-8")

    code = cli.config_main(["init", "--path", str(target)])

    assert code == 1
    assert "already exists" in capsys.readouterr().err
    assert target.read_text(encoding="utf-8") == "keep"

    code = cli.config_main(["init", "--path", str(target), "--force"])

    assert code == 0
    assert "[asciidoctor]" in target.read_text(encoding="utf-8")


def test_config_init_project_template(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    code = cli.config_main(["init", "--template", "project"])

    target = tmp_path / DESCRIPTOR_FILENAME
    assert code == 0
    assert target.is_file()
    assert "[[tasks]]" in target.read_text(encoding="utf-8")
    assert "project template" in capsys.readouterr().out
