"""
Per-revision directory layout and build records.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import List, Optional
from urllib.parse import quote, unquote

from pydantic import BaseModel, Field

from .cmake import CMakeBuilder
from .config import BuildConfig, CMakeSetting, Settings
from .errors import FileSystemError, InvalidRevisionError
from .targets import Target

logger = logging.getLogger("tvm_build")

MANIFEST_NAME = "tvm-build.json"


def resolve_build_root(output_path: Optional[str], settings: Settings) -> Path:
    return Path(output_path or settings.build_root).expanduser()


def directory_name(revision: str) -> str:
    """
    Map a revision name to a single directory name under the build root.

    Branch names such as ``feature/x`` are percent-encoded so that every
    revision occupies exactly one level of the build root.
    """
    if (
        not revision
        or revision in (".", "..")
        or "\0" in revision
        or PurePosixPath(revision).is_absolute()
        or PureWindowsPath(revision).is_absolute()
        or PureWindowsPath(revision).drive
    ):
        raise InvalidRevisionError(revision)
    return quote(revision, safe="")


def revision_name(directory: str) -> str:
    return unquote(directory)


class Manifest(BaseModel):
    """Record of a finished build, stored next to its source and build trees."""
    revision: str
    repository: Optional[str] = None
    commit: Optional[str] = None
    cmake: List[CMakeSetting] = Field(default_factory=list)
    built_at: Optional[datetime] = None

    model_config = {
        "extra": "ignore",
    }


class Revision:
    """A named TVM revision and its directories under the build root."""

    def __init__(
        self,
        revision: str,
        output_path: Optional[str] = None,
        settings: Optional[Settings] = None,
        directory: Optional[Path] = None,
    ):
        self.revision = revision
        self.dirname = directory_name(revision)
        self.output_path = output_path
        self.settings = settings or Settings()
        # Set when the user supplies their own checkout; never cleaned.
        self.directory = directory

    def __repr__(self) -> str:
        return f"Revision({self.revision!r})"

    @property
    def build_root(self) -> Path:
        return resolve_build_root(self.output_path, self.settings)

    def path(self) -> Path:
        if self.directory is not None:
            return self.directory
        root = self.build_root
        path = root / self.dirname
        if path.resolve().parent != root.resolve():
            raise InvalidRevisionError(self.revision)
        return path

    def source_path(self) -> Path:
        return self.path() / "source"

    def build_path(self) -> Path:
        return self.path() / "build"

    def manifest_path(self) -> Path:
        return self.path() / MANIFEST_NAME

    def build_for(self, build_config: BuildConfig, target: Target) -> Path:
        """Run CMake for this revision on ``target``."""
        build_path = self.build_path()
        try:
            build_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"could not create {build_path}: {e}", build_path) from e

        builder = CMakeBuilder(
            self.source_path(),
            build_path,
            executable=self.settings.cmake_executable,
            generator=self.settings.generator or target.generator,
            profile=self.settings.profile,
            jobs=self.settings.jobs,
            verbose=build_config.verbose,
        )
        builder.define(*target.cmake_args())
        builder.define(*build_config.settings.cmake_args())
        logger.debug(f"Building {self} for {target.target_str} (host {target.host})")
        return builder.build()

    def write_manifest(self, build_config: BuildConfig, commit: Optional[str]) -> Manifest:
        manifest = Manifest(
            revision=self.revision,
            repository=build_config.repository_url,
            commit=commit,
            cmake=build_config.settings.cmake,
            built_at=datetime.now(timezone.utc),
        )
        try:
            self.manifest_path().write_text(manifest.model_dump_json(indent=2))
        except OSError as e:
            raise FileSystemError(
                f"could not write {self.manifest_path()}: {e}", self.manifest_path()
            ) from e
        logger.debug(f"Manifest written to {self.manifest_path()}")
        return manifest

    def read_manifest(self) -> Manifest:
        path = self.manifest_path()
        if not path.exists():
            return Manifest(revision=self.revision)
        try:
            return Manifest.model_validate(json.loads(path.read_text()))
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable manifest {path}: {e}")
            return Manifest(revision=self.revision)


class BuildResult(BaseModel):
    revision: Revision
    install_path: Path
    manifest: Optional[Manifest] = None

    model_config = {
        "arbitrary_types_allowed": True,
    }
