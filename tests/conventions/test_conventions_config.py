from __future__ import annotations

import pytest

from asciidoctor_conventions.conventions import config as cfg

from fixtures import BLOCK_SWITCH_COORDINATE, RESOURCES_COORDINATE


def test_defaults_without_config_file(tmp_path):
    result = cfg.load_config(env={}, workspace_path=tmp_path / "ws")

    settings = result.settings
    assert result.config_path is None
    assert settings.default_repository == "https://repo.spring.io/libs-release"
    assert settings.resources_coordinate == RESOURCES_COORDINATE
    assert settings.extension_coordinates == (BLOCK_SWITCH_COORDINATE,)
    assert settings.fatal_warnings == (".*",)
    assert settings.html_executable == "asciidoctor"
    assert settings.pdf_executable == "asciidoctor-pdf"
    assert settings.jvm_executable == "asciidoctorj"
    assert settings.log_level == "INFO"
    assert result.layout.path_for("config").is_dir()


def test_workspace_config_file_is_picked_up(tmp_path):
    workspace = tmp_path / "ws"
    path = workspace / "config" / cfg.CONFIG_FILENAME
    path.parent.mkdir(parents=True)
    path.write_text(
        "\n".join(
            [
                "[repositories]",
                'default_url = "https://mirror.example/maven"',
                "[extensions]",
                "coordinates = []",
                "[asciidoctor]",
                'fatal_warnings = ["missing attribute"]',
                "[logging]",
                'level = "debug"',
            ]
        ),
        encoding="utf-8",
    )

    result = cfg.load_config(env={}, workspace_path=workspace)

    assert result.config_path == path
    assert result.settings.default_repository == "https://mirror.example/maven"
    assert result.settings.extension_coordinates == ()
    assert result.settings.fatal_warnings == ("missing attribute",)
    assert result.settings.log_level == "DEBUG"


def test_precedence_cli_over_env_over_file(tmp_path, workspace):
    config_path = workspace.write(
        "custom.toml",
        '[asciidoctor]\nhtml_executable = "from-file"\n'
        'pdf_executable = "pdf-from-file"\n'
        'jvm_executable = "jvm-from-file"\n',
    )
    env = {
        "ASCIIDOCTOR_CONVENTIONS_HTML_EXECUTABLE": "from-env",
        "ASCIIDOCTOR_CONVENTIONS_PDF_EXECUTABLE": "pdf-from-env",
        "ASCIIDOCTOR_CONVENTIONS_JVM_EXECUTABLE": "jvm-from-env",
        "ASCIIDOCTOR_CONVENTIONS_EXTENSIONS": "a:b:1, c:d:2",
        "ASCIIDOCTOR_CONVENTIONS_RESOURCES_COORDINATE": "x:y:1@zip",
    }

    result = cfg.load_config(
        config_path=config_path,
        overrides=cfg.ConfigOverrides(
            html_executable="from-cli", jvm_executable="jvm-from-cli"
        ),
        env=env,
        workspace_path=tmp_path / "ws",
    )

    assert result.settings.html_executable == "from-cli"
    assert result.settings.pdf_executable == "pdf-from-env"
    assert result.settings.jvm_executable == "jvm-from-cli"
    assert result.settings.extension_coordinates == ("a:b:1", "c:d:2")
    assert result.settings.resources_coordinate == "x:y:1@zip"


def test_config_path_from_environment(tmp_path, workspace):
    config_path = workspace.write("env.toml", '[logging]\nlevel = "WARNING"\n')

    result = cfg.load_config(
        env={cfg.CONFIG_ENV: str(config_path)},
        workspace_path=tmp_path / "ws",
    )

    assert result.settings.log_level == "WARNING"


def test_explicit_missing_config_errors(tmp_path):
    with pytest.raises(cfg.ConventionsConfigError, match="not found"):
        cfg.load_config(
            config_path=tmp_path / "absent.toml",
            env={},
            workspace_path=tmp_path / "ws",
        )


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("[logging]\ncolour = true\n", "logging.colour"),
        ('[repositories]\ndefault_url = ""\n', "repositories.default_url"),
        ('[extensions]\ncoordinates = "a:b:1"\n', "list of strings"),
        ("[extensions]\ncoordinates = [1]\n", "non-empty strings"),
        ('[asciidoctor]\nfatal_warnings = ["("]\n', "Invalid fatal warning"),
        ("[logging\n", "Failed to parse"),
    ],
)
def test_invalid_config_values(tmp_path, workspace, content, message):
    config_path = workspace.write("bad.toml", content)

    with pytest.raises(cfg.ConventionsConfigError, match=message):
        cfg.load_config(
            config_path=config_path, env={}, workspace_path=tmp_path / "ws"
        )


def test_blank_environment_values_are_ignored(tmp_path):
    result = cfg.load_config(
        env={"ASCIIDOCTOR_CONVENTIONS_DEFAULT_REPOSITORY": "   "},
        workspace_path=tmp_path / "ws",
    )

    assert result.settings.default_repository == cfg.DEFAULT_REPOSITORY
