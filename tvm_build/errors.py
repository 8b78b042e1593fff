"""
Exceptions raised by tvm-build.
"""

from typing import List, Optional


class TVMBuildError(Exception):
    """Base class for all tvm-build errors."""


class GitError(TVMBuildError):
    """A git command failed."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr


class DirectoryNotFoundError(TVMBuildError):
    def __init__(self, directory):
        super().__init__(f"the directory does not exist: {directory}")
        self.directory = directory


class RevisionNotFoundError(TVMBuildError):
    def __init__(self, revision: str, repository: str):
        super().__init__(
            f"the requested revision ({revision}) and repository ({repository}) "
            "combination does not exist."
        )
        self.revision = revision
        self.repository = repository


class BuildError(TVMBuildError):
    """CMake exited with a non-zero status."""

    def __init__(self, command: List[str], returncode: int):
        super().__init__(
            f"command failed with exit code {returncode}: {' '.join(command)}"
        )
        self.command = command
        self.returncode = returncode


class UnsupportedPlatformError(TVMBuildError):
    def __init__(self, platform: str):
        super().__init__(
            f"Platform {platform} unsupported, please check the issue tracker."
        )
        self.platform = platform


class InvalidRevisionError(TVMBuildError):
    """The revision name cannot be used as a directory under the build root."""

    def __init__(self, revision: str):
        super().__init__(f"invalid revision name: {revision!r}")
        self.revision = revision


class FileSystemError(TVMBuildError):
    """A filesystem operation on a revision directory failed."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
