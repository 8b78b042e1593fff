"""
Configuration management for tvm-build.
"""

from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TVM_REPO = "https://github.com/apache/tvm"
DEFAULT_BRANCH = "main"


class CMakeSetting(BaseModel):
    """A single CMake cache entry passed as a -D define."""
    name: str = Field(..., min_length=1, description="CMake variable name")
    value: Union[bool, str] = Field(..., description="CMake variable value")

    @classmethod
    def parse(cls, text: str) -> "CMakeSetting":
        """Parse a KEY=VALUE string as given on the command line."""
        name, sep, value = text.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"expected KEY=VALUE, got {text!r}")
        return cls(name=name, value=value.strip())

    def rendered_value(self) -> str:
        if isinstance(self.value, bool):
            return "ON" if self.value else "OFF"
        return self.value

    def as_define(self) -> str:
        return f"-D{self.name}={self.rendered_value()}"


class UserSettings(BaseModel):
    """Extra CMake settings supplied by the user."""
    cmake: List[CMakeSetting] = Field(
        default_factory=list,
        description="CMake settings applied on top of the target defaults"
    )

    def cmake_args(self) -> List[str]:
        return [setting.as_define() for setting in self.cmake]


class BuildConfig(BaseModel):
    """Build configuration for a single TVM revision."""
    repository: Optional[str] = Field(
        None,
        description="Git URL to clone (defaults to the Apache TVM repository)"
    )
    repository_path: Optional[str] = Field(
        None,
        description="Existing directory to build in instead of the managed one"
    )
    output_path: Optional[str] = Field(
        None,
        description="Alternate build root"
    )
    branch: Optional[str] = Field(
        None,
        description="Branch or tag to build (defaults to main)"
    )
    verbose: bool = Field(False, description="Run CMake in very verbose mode")
    clean: bool = Field(False, description="Remove the revision directory before building")
    settings: UserSettings = Field(default_factory=UserSettings)

    model_config = {
        "validate_assignment": True,
    }

    @property
    def repository_url(self) -> str:
        return self.repository or TVM_REPO

    @property
    def revision_name(self) -> str:
        return self.branch or DEFAULT_BRANCH


class VersionConfig(BaseModel):
    """Paths an environment needs to use an installed revision."""
    tvm_python_path: Path


class Settings(BaseSettings):
    """Main configuration settings."""
    build_root: Path = Field(
        Path.home() / ".tvm_build",
        description="Directory holding one subdirectory per revision"
    )
    generator: Optional[str] = Field(
        None,
        description="CMake generator (defaults to the target's, then Unix Makefiles)"
    )
    profile: str = Field("Debug", description="CMake build type")
    jobs: Optional[int] = Field(None, ge=1, description="Parallel build jobs")
    git_executable: str = Field("git", description="Git executable")
    cmake_executable: str = Field("cmake", description="CMake executable")
    github_api_url: str = Field(
        "https://api.github.com",
        description="GitHub API base URL"
    )
    github_token: Optional[str] = Field(None, description="GitHub API token")

    model_config = SettingsConfigDict(
        env_prefix="TVM_BUILD_",
        extra="ignore",
    )

    @field_validator("build_root")
    @classmethod
    def expand_build_root(cls, value: Path) -> Path:
        return value.expanduser()
