"""
CMake configure/build driver.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import BuildError, FileSystemError

logger = logging.getLogger("tvm_build")

DEFAULT_GENERATOR = "Unix Makefiles"


class CMakeBuilder:
    """
    Configures a source tree into ``out_dir/build`` and installs it into
    ``out_dir``.
    """

    def __init__(
        self,
        source_dir: Path,
        out_dir: Path,
        executable: str = "cmake",
        generator: Optional[str] = None,
        profile: str = "Debug",
        jobs: Optional[int] = None,
        verbose: bool = False,
    ):
        self.source_dir = source_dir
        self.out_dir = out_dir
        self.executable = executable
        self.generator = generator or DEFAULT_GENERATOR
        self.profile = profile
        self.jobs = jobs
        self.verbose = verbose
        self.defines: List[str] = []

    @property
    def binary_dir(self) -> Path:
        return self.out_dir / "build"

    def define(self, *args: str) -> "CMakeBuilder":
        self.defines.extend(args)
        return self

    def configure_command(self) -> List[str]:
        command = [
            self.executable,
            "-S", str(self.source_dir),
            "-B", str(self.binary_dir),
            "-G", self.generator,
            f"-DCMAKE_BUILD_TYPE={self.profile}",
            f"-DCMAKE_INSTALL_PREFIX={self.out_dir}",
        ]
        if self.verbose:
            command.append("-DCMAKE_VERBOSE_MAKEFILE:BOOL=ON")
        command.extend(self.defines)
        return command

    def build_command(self) -> List[str]:
        command = [
            self.executable,
            "--build", str(self.binary_dir),
            "--target", "install",
            "--config", self.profile,
        ]
        if self.jobs:
            command.extend(["--parallel", str(self.jobs)])
        if self.verbose:
            command.append("--verbose")
        return command

    def _run(self, command: List[str]) -> None:
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(command)
        except FileNotFoundError as e:
            raise BuildError(command, 127) from e
        if result.returncode != 0:
            raise BuildError(command, result.returncode)

    def build(self) -> Path:
        """Configure, build and install. Returns the install prefix."""
        try:
            self.binary_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"could not create {self.binary_dir}: {e}", self.binary_dir) from e
        logger.info(f"Configuring {self.source_dir} with {self.generator} ({self.profile})")
        self._run(self.configure_command())
        logger.info(f"Building into {self.out_dir}")
        self._run(self.build_command())
        return self.out_dir
