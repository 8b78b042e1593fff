"""
Platform targets for building TVM.
"""

import platform
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from .errors import UnsupportedPlatformError

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


class Target(BaseModel):
    """
    A target for installing TVM, contains all target specific
    information needed for locating tool chains and running CMake.
    """
    host: str
    target_str: str
    cmake_defines: List[Tuple[str, str]] = Field(default_factory=list)
    generator: Optional[str] = Field(
        None,
        description="Generator to prefer over the configured default"
    )

    def cmake_args(self) -> List[str]:
        return [f"-D{name}={value}" for name, value in self.cmake_defines]


def _normalize_arch(machine: str) -> str:
    machine = machine.lower()
    return _ARCH_ALIASES.get(machine, machine)


def local_target(system: Optional[str] = None, machine: Optional[str] = None) -> Target:
    """Return the target for the running (or given) platform."""
    system = system or platform.system()
    arch = _normalize_arch(machine or platform.machine())

    if system == "Darwin":
        # Apple spells 64-bit ARM "arm64" in its triples.
        apple_arch = "arm64" if arch == "aarch64" else arch
        return Target(
            host="Darwin",
            target_str=f"{apple_arch}-apple-darwin",
            cmake_defines=[("CMAKE_OSX_ARCHITECTURES", apple_arch)],
        )
    if system == "Linux":
        return Target(
            host="Linux",
            target_str=f"{arch}-unknown-linux-gnu",
        )
    if system == "Windows":
        return Target(
            host="Windows",
            target_str=f"{arch}-pc-windows-msvc",
            generator="Visual Studio 17 2022",
        )
    raise UnsupportedPlatformError(system)
