"""
Action variants and the Invocation result — the execution contract.

A step's action is one of a closed set of variants, tagged by ``kind``.
Each kind is handled by exactly one adapter registered under the same
name. Adapters return an Invocation (exit code + captured output),
never exceptions.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def summary(self) -> str:
        """Short human-readable form for logs."""
        return self.kind  # type: ignore[attr-defined]


class PackageAction(_ActionBase):
    """Package-manager operation (apt-get)."""

    kind: Literal["package"] = "package"
    operation: Literal["install", "update", "upgrade"] = "install"
    packages: tuple[str, ...] = ()

    def summary(self) -> str:
        if self.operation == "install":
            return f"apt-get install {' '.join(self.packages)}"
        return f"apt-get {self.operation}"


class ShellAction(_ActionBase):
    """Arbitrary command string run through ``sh -c``."""

    kind: Literal["shell"] = "shell"
    command: str = Field(min_length=1)

    def summary(self) -> str:
        return self.command


class FilePatchAction(_ActionBase):
    """Append lines to a file unless ``pattern`` already matches it."""

    kind: Literal["file_patch"] = "file_patch"
    path: str = Field(min_length=1)
    pattern: str = Field(min_length=1)
    lines: tuple[str, ...] = Field(min_length=1)

    def summary(self) -> str:
        return f"patch {self.path}"


class CloneRepoAction(_ActionBase):
    kind: Literal["clone_repo"] = "clone_repo"
    url: str = Field(min_length=1)
    dest: str = Field(min_length=1)
    depth: int | None = 1

    def summary(self) -> str:
        return f"git clone {self.url} {self.dest}"


class ContainerLaunchAction(_ActionBase):
    """Bring up a docker compose project in the background."""

    kind: Literal["container_launch"] = "container_launch"
    compose_file: str = Field(min_length=1)
    project: str = ""

    def summary(self) -> str:
        return f"docker compose -f {self.compose_file} up -d"


class VenvCreateAction(_ActionBase):
    kind: Literal["venv_create"] = "venv_create"
    path: str = Field(min_length=1)
    upgrade_pip: bool = True

    def summary(self) -> str:
        return f"python3 -m venv {self.path}"


class PipInstallAction(_ActionBase):
    kind: Literal["pip_install"] = "pip_install"
    venv: str = Field(min_length=1)
    packages: tuple[str, ...] = Field(min_length=1)

    def summary(self) -> str:
        return f"pip install {' '.join(self.packages)} (venv {self.venv})"


Action = Annotated[
    Union[
        PackageAction,
        ShellAction,
        FilePatchAction,
        CloneRepoAction,
        ContainerLaunchAction,
        VenvCreateAction,
        PipInstallAction,
    ],
    Field(discriminator="kind"),
]

ACTION_KINDS: tuple[str, ...] = (
    "package",
    "shell",
    "file_patch",
    "clone_repo",
    "container_launch",
    "venv_create",
    "pip_install",
)


class Invocation(BaseModel):
    """Terminal status of one action invocation.

    exit_code follows shell conventions: 0 is success, 124 a timeout,
    126 a permission problem, 127 a missing command.
    """

    exit_code: int
    output: str = ""
    command: str = ""
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def success(cls, output: str = "", **kwargs: Any) -> Invocation:
        return cls(exit_code=0, output=output, **kwargs)

    @classmethod
    def failure(cls, exit_code: int, output: str, **kwargs: Any) -> Invocation:
        # a failure must never look like success
        return cls(exit_code=exit_code or 1, output=output, **kwargs)
