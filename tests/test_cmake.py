"""
Tests for the CMake driver.
"""

from unittest.mock import Mock, patch

import pytest

from tvm_build.cmake import CMakeBuilder
from tvm_build.errors import BuildError, FileSystemError


@pytest.fixture
def builder(tmp_path):
    """Fixture providing a builder for a temporary tree."""
    return CMakeBuilder(tmp_path / "source", tmp_path / "build")


def test_configure_command(builder, tmp_path):
    """Test the configure command line."""
    builder.define("-DUSE_LLVM=ON")

    command = builder.configure_command()

    assert command[:7] == [
        "cmake",
        "-S", str(tmp_path / "source"),
        "-B", str(tmp_path / "build" / "build"),
        "-G", "Unix Makefiles",
    ]
    assert "-DCMAKE_BUILD_TYPE=Debug" in command
    assert f"-DCMAKE_INSTALL_PREFIX={tmp_path / 'build'}" in command
    assert command[-1] == "-DUSE_LLVM=ON"
    assert "-DCMAKE_VERBOSE_MAKEFILE:BOOL=ON" not in command


def test_build_command_options(tmp_path):
    """Test verbose, jobs and profile on the build command line."""
    builder = CMakeBuilder(
        tmp_path / "source",
        tmp_path / "build",
        generator="Ninja",
        profile="Release",
        jobs=8,
        verbose=True,
    )

    assert "-DCMAKE_VERBOSE_MAKEFILE:BOOL=ON" in builder.configure_command()
    assert "Ninja" in builder.configure_command()
    assert builder.build_command() == [
        "cmake",
        "--build", str(tmp_path / "build" / "build"),
        "--target", "install",
        "--config", "Release",
        "--parallel", "8",
        "--verbose",
    ]


@patch("tvm_build.cmake.subprocess.run")
def test_build_runs_configure_then_build(mock_run, builder, tmp_path):
    """Test build configures, then builds the install target."""
    mock_run.return_value = Mock(returncode=0)

    assert builder.build() == tmp_path / "build"

    assert mock_run.call_count == 2
    assert "-S" in mock_run.call_args_list[0][0][0]
    assert "--build" in mock_run.call_args_list[1][0][0]
    assert builder.binary_dir.exists()


@patch("tvm_build.cmake.subprocess.run")
def test_build_failure(mock_run, builder):
    """Test a failing CMake step raises BuildError."""
    mock_run.return_value = Mock(returncode=2)

    with pytest.raises(BuildError) as excinfo:
        builder.build()

    assert excinfo.value.returncode == 2
    assert mock_run.call_count == 1


@patch("tvm_build.cmake.subprocess.run")
def test_missing_cmake(mock_run, builder):
    """Test a missing cmake executable raises BuildError."""
    mock_run.side_effect = FileNotFoundError("cmake")

    with pytest.raises(BuildError):
        builder.build()


def test_unwritable_build_directory(tmp_path):
    """Test a build directory that cannot be created raises FileSystemError."""
    (tmp_path / "build").write_text("not a directory")
    builder = CMakeBuilder(tmp_path / "source", tmp_path / "build")

    with pytest.raises(FileSystemError):
        builder.build()
