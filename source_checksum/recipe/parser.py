"""Recipe parsing into typed stages.

Line handling (continuations, comments, parser directives) is done by
``dockerfile-parse``; this module turns its instruction list into the
typed variants of ``source_checksum.recipe.instructions``.
"""

from __future__ import annotations

import io
import json
import logging
import re
from collections.abc import Callable
from typing import Any

from dockerfile_parse import DockerfileParser

from source_checksum.core.exceptions import RecipeError
from source_checksum.recipe.instructions import (
    MOUNT_TYPE_BIND,
    AddInstruction,
    ArgInstruction,
    CopyInstruction,
    EnvInstruction,
    FromInstruction,
    Instruction,
    KeyValue,
    Mount,
    OtherInstruction,
    Recipe,
    RunInstruction,
    Stage,
)

logger = logging.getLogger(__name__)

_ESCAPE_DIRECTIVE = re.compile(r"^\s*#\s*escape\s*=\s*(\S)\s*$", re.IGNORECASE)
_DIRECTIVE = re.compile(r"^\s*#\s*[a-zA-Z]+\s*=")

_MOUNT_KEY_ALIASES = {
    "src": "source",
    "dst": "target",
    "destination": "target",
}


def detect_escape_token(content: bytes) -> str:
    """Read the ``# escape=`` parser directive, defaulting to backslash.

    Directives are only honoured in the leading block of ``# key=value``
    comments.
    """
    for raw_line in content.decode("utf-8", errors="replace").splitlines():
        match = _ESCAPE_DIRECTIVE.match(raw_line)
        if match:
            token = match.group(1)
            if token not in ("\\", "`"):
                raise RecipeError(f"invalid escape token '{token}'")
            return token
        if not _DIRECTIVE.match(raw_line):
            break
    return "\\"


def _read_word(text: str, pos: int, escape_token: str) -> tuple[str, int]:
    """Read one whitespace-delimited word starting at ``pos``.

    Returns the word and the position just past it.
    """
    current: list[str] = []
    quote = ""
    while pos < len(text):
        ch = text[pos]
        if not quote and ch.isspace():
            break
        current.append(ch)
        pos += 1
        if quote:
            if ch == escape_token and quote == '"' and pos < len(text):
                current.append(text[pos])
                pos += 1
            elif ch == quote:
                quote = ""
        elif ch == escape_token and pos < len(text):
            current.append(text[pos])
            pos += 1
        elif ch in ("'", '"'):
            quote = ch
    if quote:
        raise RecipeError(f"unterminated quote in '{text}'")
    return "".join(current), pos


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def split_words(text: str, escape_token: str = "\\") -> list[str]:
    """Split on unquoted whitespace, keeping quotes and escapes in the words.

    Quote removal is left to the word expander so that single-quoted text
    is not expanded later.
    """
    words: list[str] = []
    pos = _skip_space(text, 0)
    while pos < len(text):
        word, pos = _read_word(text, pos, escape_token)
        words.append(word)
        pos = _skip_space(text, pos)
    return words


def _unquote(word: str) -> str:
    if len(word) >= 2 and word[0] == word[-1] and word[0] in ("'", '"'):
        return word[1:-1]
    return word


def extract_flags(value: str, escape_token: str = "\\") -> tuple[dict[str, list[str]], str]:
    """Pull leading ``--name[=value]`` flags off an instruction value.

    Returns:
        The flags (a name may repeat, e.g. ``--mount``) and the rest of the
        value after the last flag.
    """
    flags: dict[str, list[str]] = {}
    pos = _skip_space(value, 0)
    while value.startswith("--", pos):
        token, pos = _read_word(value, pos, escape_token)
        pos = _skip_space(value, pos)
        if token == "--":
            break
        name, sep, flag_value = token[2:].partition("=")
        flags.setdefault(name.lower(), []).append(
            _unquote(flag_value) if sep else "true"
        )
    return flags, value[pos:]


def _single_flags(flags: dict[str, list[str]]) -> dict[str, str]:
    return {name: values[-1] for name, values in flags.items()}


def parse_mount(spec: str) -> Mount:
    """Parse the CSV body of a ``--mount`` flag."""
    fields: dict[str, str] = {}
    for item in spec.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip().lower()
        fields[_MOUNT_KEY_ALIASES.get(key, key)] = value.strip() if sep else "true"

    mount = Mount(
        type=fields.pop("type", MOUNT_TYPE_BIND),
        source=fields.pop("source", ""),
        target=fields.pop("target", ""),
        from_stage=fields.pop("from", ""),
    )
    mount.options = fields
    return mount


def _sources_and_dest(
    keyword: str, rest: str, line: int, escape_token: str
) -> tuple[list[str], str]:
    words: list[str]
    stripped = rest.strip()
    if stripped.startswith("["):
        try:
            parsed: Any = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list) and all(isinstance(w, str) for w in parsed):
            words = parsed
        else:
            words = split_words(stripped, escape_token)
    else:
        words = split_words(stripped, escape_token)

    if len(words) < 2:
        raise RecipeError(f"{keyword} requires at least two arguments", line=line)
    return words[:-1], words[-1]


def _parse_from(value: str, line: int, escape_token: str) -> FromInstruction:
    flags, rest = extract_flags(value, escape_token)
    words = split_words(rest, escape_token)
    if len(words) == 1:
        return FromInstruction(line=line, base=words[0], flags=_single_flags(flags))
    if len(words) == 3 and words[1].lower() == "as":
        return FromInstruction(
            line=line,
            base=words[0],
            stage_name=words[2].lower(),
            flags=_single_flags(flags),
        )
    raise RecipeError("FROM requires either one or three arguments", line=line)


def _parse_arg(value: str, line: int, escape_token: str) -> ArgInstruction:
    words = split_words(value, escape_token)
    if not words:
        raise RecipeError("ARG requires at least one argument", line=line)
    args = []
    for word in words:
        key, sep, default = word.partition("=")
        if not key:
            raise RecipeError(f"ARG names can not be blank: '{word}'", line=line)
        args.append(KeyValue(key=key, value=default if sep else None))
    return ArgInstruction(line=line, args=args)


def _parse_env(value: str, line: int, escape_token: str) -> EnvInstruction:
    words = split_words(value, escape_token)
    if not words:
        raise RecipeError("ENV requires at least one argument", line=line)

    if "=" not in words[0]:
        # legacy form: ENV name value with spaces
        key = words[0]
        rest = value.strip()[len(key):].strip()
        if not rest:
            raise RecipeError(f"ENV {key} must have a value", line=line)
        return EnvInstruction(line=line, pairs=[KeyValue(key=key, value=rest)])

    pairs = []
    for word in words:
        key, sep, env_value = word.partition("=")
        if not sep or not key:
            raise RecipeError(f"ENV names can not be blank: '{word}'", line=line)
        pairs.append(KeyValue(key=key, value=env_value))
    return EnvInstruction(line=line, pairs=pairs)


def _parse_copy(value: str, line: int, escape_token: str) -> CopyInstruction:
    flags, rest = extract_flags(value, escape_token)
    sources, dest = _sources_and_dest("COPY", rest, line, escape_token)
    single = _single_flags(flags)
    return CopyInstruction(
        line=line,
        sources=sources,
        dest=dest,
        from_stage=single.pop("from", ""),
        flags=single,
    )


def _parse_add(value: str, line: int, escape_token: str) -> AddInstruction:
    flags, rest = extract_flags(value, escape_token)
    sources, dest = _sources_and_dest("ADD", rest, line, escape_token)
    return AddInstruction(line=line, sources=sources, dest=dest, flags=_single_flags(flags))


def _parse_run(value: str, line: int, escape_token: str) -> RunInstruction:
    flags, rest = extract_flags(value, escape_token)
    mounts = [parse_mount(spec) for spec in flags.get("mount", [])]
    return RunInstruction(line=line, mounts=mounts, command=rest)


_PARSERS: dict[str, Callable[[str, int, str], Instruction]] = {
    "ARG": _parse_arg,
    "ENV": _parse_env,
    "COPY": _parse_copy,
    "ADD": _parse_add,
    "RUN": _parse_run,
}


def parse_recipe(content: bytes) -> Recipe:
    """Parse recipe bytes into global ARGs and build stages.

    Raises:
        RecipeError: If the recipe is empty, an instruction other than ARG
            precedes the first FROM, or an instruction is malformed.
    """
    try:
        content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RecipeError(
            f"invalid UTF-8 byte 0x{content[e.start]:02x}",
            line=content.count(b"\n", 0, e.start) + 1,
        ) from e

    escape_token = detect_escape_token(content)
    parser = DockerfileParser(fileobj=io.BytesIO(content), env_replace=False)

    recipe = Recipe(escape_token=escape_token)
    stage: Stage | None = None
    seen_instruction = False

    for entry in parser.structure:
        keyword = entry["instruction"].upper()
        if keyword == "COMMENT":
            continue
        seen_instruction = True
        line = entry["startline"] + 1
        value = entry["value"]

        if keyword == "FROM":
            stage = Stage(header=_parse_from(value, line, escape_token))
            recipe.stages.append(stage)
            continue

        parse = _PARSERS.get(keyword)
        instruction = (
            parse(value, line, escape_token)
            if parse
            else OtherInstruction(line=line, keyword=keyword, value=value)
        )

        if stage is None:
            if not isinstance(instruction, ArgInstruction):
                raise RecipeError(
                    f"{keyword} is not allowed before the first FROM", line=line
                )
            recipe.meta_args.append(instruction)
        else:
            stage.instructions.append(instruction)

    if not seen_instruction:
        raise RecipeError("file with no instructions")
    if not recipe.stages:
        raise RecipeError("no build stage in current context")

    logger.debug(
        "Parsed recipe",
        extra={"stages": len(recipe.stages), "meta_args": len(recipe.meta_args)},
    )
    return recipe
