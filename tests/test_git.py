"""
Tests for the git wrapper.
"""

import subprocess
from unittest.mock import Mock, patch

import pytest

from tvm_build.errors import GitError, RevisionNotFoundError
from tvm_build.git import Git

REPO = "https://github.com/apache/tvm"


@pytest.fixture
def git():
    """Fixture providing a Git wrapper."""
    return Git()


def _failure(stderr):
    return subprocess.CalledProcessError(128, ["git"], output="", stderr=stderr)


@patch("tvm_build.git.subprocess.run")
def test_clone_single_branch(mock_run, git, tmp_path):
    """Test clone runs a single-branch clone of the revision."""
    dest = tmp_path / "main" / "source"

    git.clone(REPO, dest, "main")

    command = mock_run.call_args[0][0]
    assert command == ["git", "clone", "--branch", "main", "--single-branch", REPO, str(dest)]
    assert mock_run.call_args[1]["check"] is True
    assert dest.parent.exists()


@patch("tvm_build.git.subprocess.run")
def test_clone_missing_branch(mock_run, git, tmp_path):
    """Test that an unknown branch maps to RevisionNotFoundError."""
    mock_run.side_effect = _failure(
        "warning: Could not find remote branch nope to clone.\n"
        "fatal: Remote branch nope not found in upstream origin\n"
    )

    with pytest.raises(RevisionNotFoundError) as excinfo:
        git.clone(REPO, tmp_path / "source", "nope")

    assert excinfo.value.revision == "nope"
    assert excinfo.value.repository == REPO


@patch("tvm_build.git.subprocess.run")
def test_clone_other_failure(mock_run, git, tmp_path):
    """Test that other clone failures raise GitError with stderr."""
    mock_run.side_effect = _failure("fatal: unable to access: Could not resolve host\n")

    with pytest.raises(GitError) as excinfo:
        git.clone(REPO, tmp_path / "source", "main")

    assert "resolve host" in excinfo.value.stderr


@patch("tvm_build.git.subprocess.run")
def test_clone_unrecognised_failure_probes_remote(mock_run, git, tmp_path):
    """Test that an unrecognised clone error falls back to ls-remote."""
    mock_run.side_effect = [
        _failure("fatal: something unexpected\n"),
        Mock(stdout=""),
    ]

    with pytest.raises(RevisionNotFoundError):
        git.clone(REPO, tmp_path / "source", "nope")

    assert mock_run.call_args[0][0][:2] == ["git", "ls-remote"]


@patch("tvm_build.git.subprocess.run")
def test_missing_executable(mock_run, tmp_path):
    """Test that a missing git binary raises GitError."""
    mock_run.side_effect = FileNotFoundError("git")

    with pytest.raises(GitError):
        Git("/nonexistent/git").clone(REPO, tmp_path / "source", "main")


@patch("tvm_build.git.subprocess.run")
def test_update_submodules(mock_run, git, tmp_path):
    """Test submodules are updated recursively inside the checkout."""
    git.update_submodules(tmp_path)

    assert mock_run.call_args[0][0] == ["git", "submodule", "update", "--init", "--recursive"]
    assert mock_run.call_args[1]["cwd"] == tmp_path


@patch("tvm_build.git.subprocess.run")
def test_head_commit(mock_run, git, tmp_path):
    """Test head_commit strips git output."""
    mock_run.return_value = Mock(stdout="0123abcd\n")

    assert git.head_commit(tmp_path) == "0123abcd"


@patch("tvm_build.git.subprocess.run")
def test_remote_has_revision(mock_run, git):
    """Test ls-remote probing for a revision."""
    mock_run.return_value = Mock(stdout="0123abcd\trefs/heads/main\n")
    assert git.remote_has_revision(REPO, "main") is True

    mock_run.return_value = Mock(stdout="")
    assert git.remote_has_revision(REPO, "nope") is False

    mock_run.side_effect = _failure("remote: Repository not found.\n")
    assert git.remote_has_revision("https://github.com/apache/missing", "main") is False
