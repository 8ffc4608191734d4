"""Local source path extraction from a parsed recipe.

Walks the instructions in document order while maintaining the variable
table, so every word is expanded with the values visible at that point of
the recipe.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace

from source_checksum.core.logging import redact_sensitive_data
from source_checksum.recipe.instructions import (
    AddInstruction,
    ArgInstruction,
    CopyInstruction,
    EnvInstruction,
    FromInstruction,
    Instruction,
    OtherInstruction,
    Recipe,
    RunInstruction,
)
from source_checksum.recipe.shell import ShellLex

logger = logging.getLogger(__name__)


class VariableTable(Mapping[str, str]):
    """Build arguments and environment values visible during the walk.

    Explicit build arguments are never replaced by recipe ARG defaults,
    while ENV always replaces whatever was there.
    """

    def __init__(self, build_args: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(build_args or {})

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def declare_default(self, name: str, value: str) -> None:
        if name not in self._values:
            self._values[name] = value

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)


@dataclass
class ExtractedPaths:
    """Sorted source patterns and the effective build arguments."""

    patterns: list[str] = field(default_factory=list)
    build_args: dict[str, str] = field(default_factory=dict)


class _Walker:
    def __init__(self, lex: ShellLex, table: VariableTable) -> None:
        self.lex = lex
        self.table = table
        self.patterns: list[str] = []

    def expand(self, word: str) -> str:
        return self.lex.process_word(word, self.table)

    def visit(self, instruction: Instruction) -> None:
        match instruction:
            case FromInstruction():
                # base images never name build-context sources
                pass
            case ArgInstruction(args=args):
                # every default sees the table as it was before this line
                defaults = [
                    (arg.key, self.expand(arg.value))
                    for arg in args
                    if arg.value is not None
                ]
                for key, value in defaults:
                    self.table.declare_default(key, value)
            case EnvInstruction(pairs=pairs):
                expanded_pairs = [
                    (self.expand(pair.key), self.expand(pair.value or ""))
                    for pair in pairs
                ]
                for key, value in expanded_pairs:
                    self.table.set(key, value)
            case CopyInstruction(sources=sources, dest=dest, from_stage=from_stage):
                expanded = [self.expand(source) for source in sources]
                self.expand(dest)
                if not from_stage:
                    self.patterns.extend(expanded)
            case AddInstruction(sources=sources, dest=dest):
                expanded = [self.expand(source) for source in sources]
                self.expand(dest)
                self.patterns.extend(expanded)
            case RunInstruction(mounts=mounts):
                for mount in mounts:
                    expanded_mount = replace(
                        mount,
                        source=self.expand(mount.source),
                        target=self.expand(mount.target),
                        from_stage=self.expand(mount.from_stage),
                    )
                    if expanded_mount.is_local_bind:
                        self.patterns.append(expanded_mount.source)
            case OtherInstruction():
                pass


def extract_source_paths(
    recipe: Recipe,
    build_args: Mapping[str, str] | None = None,
) -> ExtractedPaths:
    """Collect the local source patterns a recipe references.

    Args:
        recipe: Parsed recipe
        build_args: Explicitly supplied build arguments; not modified

    Returns:
        The patterns sorted lexicographically and the variable table as it
        stands after the last instruction

    Raises:
        ExpansionError: If any word fails to expand.
    """
    table = VariableTable(build_args)
    logger.debug("Build arguments", extra={"build_args": redact_sensitive_data(dict(table))})

    walker = _Walker(ShellLex(recipe.escape_token), table)
    for arg_instruction in recipe.meta_args:
        walker.visit(arg_instruction)
    for stage in recipe.stages:
        walker.visit(stage.header)
        for instruction in stage.instructions:
            walker.visit(instruction)

    patterns = sorted(walker.patterns)
    logger.debug("Extracted source patterns", extra={"patterns": patterns})
    return ExtractedPaths(patterns=patterns, build_args=table.snapshot())
