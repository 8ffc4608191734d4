"""Typed recipe instructions.

The variants form a closed set: the path walk matches on every one of them,
so adding a variant means deciding how it affects path extraction.
"""

from __future__ import annotations

from dataclasses import dataclass, field

MOUNT_TYPE_BIND = "bind"


@dataclass
class KeyValue:
    key: str
    value: str | None = None


@dataclass
class Mount:
    """One ``RUN --mount`` declaration."""

    type: str = MOUNT_TYPE_BIND
    source: str = ""
    target: str = ""
    from_stage: str = ""
    options: dict[str, str] = field(default_factory=dict)

    @property
    def is_local_bind(self) -> bool:
        """Bind mount of the build context rather than of another stage."""
        return self.type == MOUNT_TYPE_BIND and not self.from_stage


@dataclass
class FromInstruction:
    line: int
    base: str
    stage_name: str = ""
    flags: dict[str, str] = field(default_factory=dict)


@dataclass
class ArgInstruction:
    line: int
    args: list[KeyValue] = field(default_factory=list)


@dataclass
class EnvInstruction:
    line: int
    pairs: list[KeyValue] = field(default_factory=list)


@dataclass
class CopyInstruction:
    line: int
    sources: list[str]
    dest: str
    from_stage: str = ""
    flags: dict[str, str] = field(default_factory=dict)


@dataclass
class AddInstruction:
    line: int
    sources: list[str]
    dest: str
    flags: dict[str, str] = field(default_factory=dict)


@dataclass
class RunInstruction:
    line: int
    mounts: list[Mount] = field(default_factory=list)
    command: str = ""


@dataclass
class OtherInstruction:
    """Any keyword that cannot reference local sources (WORKDIR, LABEL, ...)."""

    line: int
    keyword: str
    value: str = ""


Instruction = (
    FromInstruction
    | ArgInstruction
    | EnvInstruction
    | CopyInstruction
    | AddInstruction
    | RunInstruction
    | OtherInstruction
)


@dataclass
class Stage:
    """A FROM line and the instructions that follow it."""

    header: FromInstruction
    instructions: list[Instruction] = field(default_factory=list)

    @property
    def base(self) -> str:
        return self.header.base

    @property
    def name(self) -> str:
        return self.header.stage_name


@dataclass
class Recipe:
    """A parsed recipe: global ARGs followed by its build stages."""

    meta_args: list[ArgInstruction] = field(default_factory=list)
    stages: list[Stage] = field(default_factory=list)
    escape_token: str = "\\"
