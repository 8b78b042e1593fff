"""
Thin wrapper over the git executable.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import FileSystemError, GitError, RevisionNotFoundError

logger = logging.getLogger("tvm_build")

# Fragments git prints when the branch, tag or repository cannot be found.
_NOT_FOUND_MARKERS = (
    "not found in upstream",
    "could not find remote branch",
    "repository not found",
    "does not appear to be a git repository",
    "does not exist",
)


class Git:
    """Runs git commands for cloning and inspecting TVM checkouts."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def _run(self, args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            return subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise GitError(f"git executable not found: {self.executable}") from e

    def clone(self, url: str, dest: Path, branch: str) -> None:
        """Clone a single branch or tag of ``url`` into ``dest``."""
        logger.info(f"Cloning {url} ({branch}) into {dest}")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"could not create {dest.parent}: {e}", dest.parent) from e
        try:
            self._run(["clone", "--branch", branch, "--single-branch", url, str(dest)])
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").lower()
            if any(marker in stderr for marker in _NOT_FOUND_MARKERS):
                raise RevisionNotFoundError(revision=branch, repository=url) from e
            # Unrecognised message: ask the remote directly.
            try:
                exists = self.remote_has_revision(url, branch)
            except GitError:
                exists = True
            if not exists:
                raise RevisionNotFoundError(revision=branch, repository=url) from e
            raise GitError(f"git clone of {url} failed", stderr=e.stderr) from e

    def update_submodules(self, repo: Path) -> None:
        """Initialise and update every submodule of ``repo``."""
        logger.info(f"Updating submodules in {repo}")
        try:
            self._run(["submodule", "update", "--init", "--recursive"], cwd=repo)
        except subprocess.CalledProcessError as e:
            raise GitError(f"submodule update in {repo} failed", stderr=e.stderr) from e

    def head_commit(self, repo: Path) -> str:
        try:
            result = self._run(["rev-parse", "HEAD"], cwd=repo)
        except subprocess.CalledProcessError as e:
            raise GitError(f"could not resolve HEAD in {repo}", stderr=e.stderr) from e
        return result.stdout.strip()

    def remote_has_revision(self, url: str, revision: str) -> bool:
        """Check whether ``url`` advertises a branch or tag named ``revision``."""
        try:
            result = self._run(["ls-remote", "--heads", "--tags", url, revision])
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").lower()
            if any(marker in stderr for marker in _NOT_FOUND_MARKERS):
                return False
            raise GitError(f"git ls-remote of {url} failed", stderr=e.stderr) from e
        return bool(result.stdout.strip())
