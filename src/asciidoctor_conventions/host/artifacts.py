"""Maven-style artifact coordinates, repositories and a caching resolver."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional
from urllib.parse import unquote, urlparse

import httpx

from asciidoctor_conventions.errors import ResolutionError

__all__ = [
    "ArtifactResolver",
    "Coordinate",
    "MavenRepository",
]

_DEFAULT_EXTENSION = "jar"
_DOWNLOAD_TIMEOUT = 30.0


@dataclass(frozen=True)
class Coordinate:
    """``group:artifact:version[:classifier][@extension]``."""

    group: str
    artifact: str
    version: str
    classifier: Optional[str] = None
    extension: str = _DEFAULT_EXTENSION

    @classmethod
    def parse(cls, notation: str) -> "Coordinate":
        raw = notation.strip()
        extension = _DEFAULT_EXTENSION
        if "@" in raw:
            raw, extension = raw.rsplit("@", 1)
        parts = raw.split(":")
        if len(parts) not in (3, 4) or not all(parts) or not extension:
            raise ResolutionError(
                f"Invalid artifact coordinate '{notation}'. Expected "
                "group:artifact:version[:classifier][@extension]."
            )
        classifier = parts[3] if len(parts) == 4 else None
        return cls(parts[0], parts[1], parts[2], classifier, extension)

    @property
    def filename(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact}-{self.version}{suffix}.{self.extension}"

    @property
    def relative_path(self) -> str:
        """Path of the artifact inside a Maven-layout repository."""

        return "/".join(
            (*self.group.split("."), self.artifact, self.version, self.filename)
        )

    def __str__(self) -> str:
        notation = f"{self.group}:{self.artifact}:{self.version}"
        if self.classifier:
            notation += f":{self.classifier}"
        if self.extension != _DEFAULT_EXTENSION:
            notation += f"@{self.extension}"
        return notation


@dataclass(frozen=True)
class MavenRepository:
    """A repository addressed by an ``http(s)://`` or ``file://`` URL."""

    url: str

    def artifact_url(self, coordinate: Coordinate) -> str:
        return f"{self.url.rstrip('/')}/{coordinate.relative_path}"

    @property
    def is_local(self) -> bool:
        return urlparse(self.url).scheme in ("", "file")

    def local_root(self) -> Path:
        parsed = urlparse(self.url)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        return Path(self.url).expanduser()


ClientFactory = Callable[[], httpx.Client]


def _default_client() -> httpx.Client:
    return httpx.Client(timeout=_DOWNLOAD_TIMEOUT, follow_redirects=True)


class ArtifactResolver:
    """Resolve coordinates to files, caching downloads under ``cache_dir``.

    Repositories are tried in order; the first one holding the artifact
    wins. Failures are not retried.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        client_factory: ClientFactory = _default_client,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.cache_dir = cache_dir
        self._client_factory = client_factory
        self._logger = logger or logging.getLogger(__name__)

    def cached_path(self, coordinate: Coordinate) -> Path:
        return self.cache_dir.joinpath(*coordinate.relative_path.split("/"))

    def resolve(
        self,
        coordinate: Coordinate,
        repositories: Iterable[MavenRepository],
    ) -> Path:
        cached = self.cached_path(coordinate)
        if cached.is_file():
            self._logger.debug(
                "Using cached artifact",
                extra={"coordinate": str(coordinate), "path": cached},
            )
            return cached

        candidates = tuple(repositories)
        if not candidates:
            raise ResolutionError(
                f"Cannot resolve {coordinate}: no repositories are configured."
            )

        tried: list[str] = []
        for repository in candidates:
            location = repository.artifact_url(coordinate)
            tried.append(location)
            if repository.is_local:
                found = self._copy_local(repository, coordinate, cached)
            else:
                found = self._download(location, cached)
            if found:
                self._logger.info(
                    "Resolved artifact",
                    extra={"coordinate": str(coordinate), "source": location},
                )
                return cached

        raise ResolutionError(
            "Could not find {0}. Searched in:\n  {1}".format(
                coordinate, "\n  ".join(tried)
            )
        )

    def _copy_local(
        self, repository: MavenRepository, coordinate: Coordinate, target: Path
    ) -> bool:
        source = repository.local_root().joinpath(
            *coordinate.relative_path.split("/")
        )
        if not source.is_file():
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        return True

    def _download(self, url: str, target: Path) -> bool:
        partial = target.with_name(target.name + ".part")
        try:
            with self._client_factory() as client:
                with client.stream("GET", url) as response:
                    if response.status_code == 404:
                        return False
                    response.raise_for_status()
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with partial.open("wb") as handle:
                        for chunk in response.iter_bytes():
                            handle.write(chunk)
        except httpx.HTTPError as exc:
            partial.unlink(missing_ok=True)
            raise ResolutionError(f"Failed to download {url}: {exc}") from exc
        partial.replace(target)
        return True
