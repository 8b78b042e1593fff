"""
Library entry points: install, uninstall and inspect TVM revisions.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from .config import BuildConfig, Settings, VersionConfig
from .errors import DirectoryNotFoundError, FileSystemError, GitError, InvalidRevisionError
from .git import Git
from .revision import BuildResult, Manifest, Revision, resolve_build_root, revision_name
from .targets import local_target

logger = logging.getLogger("tvm_build")


def _remove_tree(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FileSystemError(f"could not remove {path}: {e}", path) from e


def get_revision(build_config: BuildConfig, settings: Optional[Settings] = None) -> Revision:
    """
    Make sure the source tree for the configured revision exists.

    Clones the repository at the requested branch when the source tree
    is missing, then brings its submodules up to date. With ``clean`` set, a
    managed revision directory is removed first; a user-supplied
    ``repository_path`` is never removed.

    Args:
        build_config: Build configuration
        settings: Environment settings, read from the environment when omitted

    Returns:
        The resolved Revision
    """
    settings = settings or Settings()
    repository_url = build_config.repository_url
    directory = Path(build_config.repository_path) if build_config.repository_path else None
    revision = Revision(
        build_config.revision_name,
        output_path=build_config.output_path,
        settings=settings,
        directory=directory,
    )

    revision_path = revision.path()
    if revision_path.exists() and build_config.clean and directory is None:
        logger.info(f"Cleaning {revision_path}")
        _remove_tree(revision_path)

    git = Git(settings.git_executable)
    if not revision.source_path().exists():
        git.clone(repository_url, revision.source_path(), revision.revision)
    else:
        logger.info(f"Using existing source tree at {revision.source_path()}")
    # Re-run on existing trees too, so an interrupted update is completed.
    git.update_submodules(revision.source_path())

    return revision


def build(build_config: BuildConfig, settings: Optional[Settings] = None) -> BuildResult:
    """Build TVM given a build configuration."""
    settings = settings or Settings()
    logger.debug(f"Build configuration: {build_config}")
    revision = get_revision(build_config, settings)
    target = local_target()

    install_path = revision.build_for(build_config, target)

    commit = None
    try:
        commit = Git(settings.git_executable).head_commit(revision.source_path())
    except GitError as e:
        logger.warning(f"Could not determine commit for {revision.revision}: {e}")
    manifest = revision.write_manifest(build_config, commit)

    logger.info(f"Installed {revision.revision} into {install_path}")
    return BuildResult(revision=revision, install_path=install_path, manifest=manifest)


def uninstall(
    revision: str,
    output_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Remove an installed revision and everything under its directory."""
    directory = Revision(revision, output_path, settings).path()
    if not directory.is_dir():
        raise DirectoryNotFoundError(str(directory))
    logger.info(f"Removing {directory}")
    _remove_tree(directory)


def version_config(
    revision: str,
    output_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> VersionConfig:
    rev = Revision(revision, output_path, settings)
    return VersionConfig(tvm_python_path=rev.source_path() / "python" / "tvm")


def installed(
    output_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> List[Manifest]:
    """List installed revisions, sorted by name."""
    settings = settings or Settings()
    root = resolve_build_root(output_path, settings)
    if not root.is_dir():
        return []
    manifests = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        try:
            revision = Revision(revision_name(entry.name), output_path, settings)
            manifests.append(revision.read_manifest())
        except InvalidRevisionError:
            logger.warning(f"Skipping unrecognised directory {entry}")
    return sorted(manifests, key=lambda manifest: manifest.revision)
