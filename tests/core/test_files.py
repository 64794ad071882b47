from __future__ import annotations

import pytest

from asciidoctor_conventions.core import files
from asciidoctor_conventions.core.files import DuplicatesStrategy
from asciidoctor_conventions.errors import StagingError

from fixtures import zip_bytes


@pytest.mark.parametrize(
    ("relative", "patterns", "expected"),
    [
        ("css/spring.css", ("css/**",), True),
        ("css/nested/a.css", ("css/**",), True),
        ("js/toc.js", ("css/**", "js/**"), True),
        ("cssx/a.css", ("css/**",), False),
        ("index.adoc", ("css/**", "js/**"), False),
        ("index.adoc", ("*.adoc",), True),
        ("anything", (), True),
    ],
)
def test_matches_patterns(relative, patterns, expected):
    assert files.matches_patterns(relative, patterns) is expected


def test_copy_directory_honours_includes_and_into(workspace):
    workspace.create(
        {
            "src": {
                "index.adoc": "= Doc",
                "css": {"site.css": "body {}"},
                "js": {"toc.js": "//"},
            }
        }
    )

    written = files.copy_directory(
        workspace.root / "src",
        workspace.root / "out",
        into="assets",
        includes=("css/**", "js/**"),
    )

    assert len(written) == 2
    assert workspace.relative_files("out") == {
        "assets/css/site.css",
        "assets/js/toc.js",
    }


def test_copy_directory_missing_source(tmp_path):
    with pytest.raises(StagingError, match="not found"):
        files.copy_directory(tmp_path / "absent", tmp_path / "out")


def test_duplicate_strategies_share_claimed_paths(workspace):
    workspace.create(
        {
            "docs": {"css": {"spring.css": "from docs"}},
            "resources": {
                "css": {"spring.css": "from resources"},
                "js": {"a.js": "//"},
            },
        }
    )
    destination = workspace.root / "out"
    claimed: set[str] = set()

    files.copy_directory(workspace.root / "docs", destination, claimed=claimed)
    files.copy_directory(
        workspace.root / "resources",
        destination,
        duplicates=DuplicatesStrategy.EXCLUDE,
        claimed=claimed,
    )

    assert (destination / "css" / "spring.css").read_text() == "from docs"
    assert (destination / "js" / "a.js").exists()

    with pytest.raises(StagingError, match="Duplicate"):
        files.copy_directory(
            workspace.root / "resources",
            destination,
            duplicates=DuplicatesStrategy.FAIL,
            claimed=claimed,
        )


def test_include_strategy_overwrites(workspace):
    workspace.create(
        {"first": {"a.txt": "first"}, "second": {"a.txt": "second"}}
    )
    destination = workspace.root / "out"
    claimed: set[str] = set()

    files.copy_directory(workspace.root / "first", destination, claimed=claimed)
    files.copy_directory(workspace.root / "second", destination, claimed=claimed)

    assert (destination / "a.txt").read_text() == "second"


def test_extract_archive_into_subdirectory(workspace):
    archive = workspace.write(
        "bundle.zip",
        zip_bytes({"css/spring.css": "css", "js/toc.js": "js"}),
    )

    written = files.extract_archive(
        archive, workspace.root / "out", into="asciidoc"
    )

    assert len(written) == 2
    assert workspace.relative_files("out") == {
        "asciidoc/css/spring.css",
        "asciidoc/js/toc.js",
    }


def test_extract_archive_rejects_escaping_entries(workspace):
    archive = workspace.write("evil.zip", zip_bytes({"../escape.txt": "x"}))

    with pytest.raises(StagingError, match="escapes"):
        files.extract_archive(archive, workspace.root / "out")
    assert not (workspace.root / "escape.txt").exists()


def test_extract_archive_bad_zip(workspace):
    archive = workspace.write("broken.zip", b"not a zip")

    with pytest.raises(StagingError, match="broken.zip"):
        files.extract_archive(archive, workspace.root / "out")


def test_clear_directory_empties_and_recreates(workspace):
    workspace.create({"out": {"stale.txt": "old", "sub": {"x": "y"}}})

    files.clear_directory(workspace.root / "out")

    assert (workspace.root / "out").is_dir()
    assert not any((workspace.root / "out").iterdir())
