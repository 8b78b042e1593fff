"""
tvm-build - install and manage source builds of Apache TVM.
"""

__version__ = "0.1.0"

from .config import BuildConfig, CMakeSetting, Settings, UserSettings, VersionConfig
from .core import build, get_revision, installed, uninstall, version_config
from .errors import (
    BuildError,
    DirectoryNotFoundError,
    FileSystemError,
    GitError,
    InvalidRevisionError,
    RevisionNotFoundError,
    TVMBuildError,
    UnsupportedPlatformError,
)
from .revision import BuildResult, Manifest, Revision

__all__ = [
    'BuildConfig',
    'CMakeSetting',
    'Settings',
    'UserSettings',
    'VersionConfig',
    'build',
    'get_revision',
    'installed',
    'uninstall',
    'version_config',
    'BuildError',
    'DirectoryNotFoundError',
    'FileSystemError',
    'GitError',
    'InvalidRevisionError',
    'RevisionNotFoundError',
    'TVMBuildError',
    'UnsupportedPlatformError',
    'BuildResult',
    'Manifest',
    'Revision',
]
