"""
Step model — one named provisioning unit.

A Step couples a read-only precondition probe with a side-effecting
action. Steps are declared once when the catalog is built and are
never mutated afterwards (all models here are frozen).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catana.core.models.action import Action

ProbeKind = Literal[
    "binary_on_path",
    "file_exists",
    "directory_exists",
    "file_contains",
    "process_or_session_active",
    "any_of",
    "all_of",
]

_LEAF_KINDS = frozenset({
    "binary_on_path",
    "file_exists",
    "directory_exists",
    "file_contains",
    "process_or_session_active",
})
_COMPOSITE_KINDS = frozenset({"any_of", "all_of"})


class Probe(BaseModel):
    """A capability probe: "is the target state already there?".

    Catalog files may use a one-key shorthand::

        precondition: {binary_on_path: nmap}
        precondition: {file_contains: {path: ~/.bashrc, pattern: "export GOPATH"}}
        precondition: {any_of: [{file_exists: a}, {file_exists: b, negate: true}]}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ProbeKind
    target: str = ""                 # binary, path or process name
    pattern: str = ""                # regex, file_contains only
    negate: bool = False
    probes: tuple[Probe, ...] = ()   # composite kinds only

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "kind" in data:
            return data

        kinds = [k for k in data if k in _LEAF_KINDS or k in _COMPOSITE_KINDS]
        if len(kinds) != 1:
            return data

        kind = kinds[0]
        value = data[kind]
        expanded: dict[str, Any] = {k: v for k, v in data.items() if k != kind}
        expanded["kind"] = kind

        if kind in _COMPOSITE_KINDS:
            expanded["probes"] = value
        elif isinstance(value, dict):
            expanded["target"] = value.get("path") or value.get("name") or value.get("target", "")
            expanded["pattern"] = value.get("pattern", "")
        else:
            expanded["target"] = value
        return expanded

    @model_validator(mode="after")
    def _check_shape(self) -> Probe:
        if self.kind in _COMPOSITE_KINDS:
            if not self.probes:
                raise ValueError(f"'{self.kind}' probe needs at least one sub-probe")
        elif not self.target:
            raise ValueError(f"'{self.kind}' probe needs a target")
        if self.kind == "file_contains" and not self.pattern:
            raise ValueError("'file_contains' probe needs a pattern")
        return self

    # ── Constructors ────────────────────────────────────────────

    @classmethod
    def binary_on_path(cls, name: str) -> Probe:
        return cls(kind="binary_on_path", target=name)

    @classmethod
    def file_exists(cls, path: str) -> Probe:
        return cls(kind="file_exists", target=path)

    @classmethod
    def directory_exists(cls, path: str) -> Probe:
        return cls(kind="directory_exists", target=path)

    @classmethod
    def file_contains(cls, path: str, pattern: str) -> Probe:
        return cls(kind="file_contains", target=path, pattern=pattern)

    @classmethod
    def process_or_session_active(cls, name: str) -> Probe:
        return cls(kind="process_or_session_active", target=name)

    def describe(self) -> str:
        if self.kind in _COMPOSITE_KINDS:
            joiner = " or " if self.kind == "any_of" else " and "
            text = "(" + joiner.join(p.describe() for p in self.probes) + ")"
        elif self.kind == "file_contains":
            text = f"{self.target} contains /{self.pattern}/"
        else:
            text = f"{self.kind}({self.target})"
        return f"not {text}" if self.negate else text


class Step(BaseModel):
    """A named provisioning unit."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    description: str = ""
    key: str | None = None                   # menu key, e.g. "1" or "A"
    precondition: Probe | None = None        # None: never satisfied, always runs
    action: Action
    restart_sensitive: bool = False


class Bundle(BaseModel):
    """An ordered group of steps selectable as a single menu entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    description: str = ""
    key: str | None = None
    steps: tuple[str, ...] = Field(min_length=1)
