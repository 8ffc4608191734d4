"""Shell-style single-word expansion for recipe words.

Supports ``$name``, ``${name}`` and the ``-``, ``+`` and ``?`` modifiers
with and without the leading colon, single quotes, double quotes and the
recipe escape token. Unset variables expand to the empty string. The word
is never split on whitespace.
"""

from __future__ import annotations

from collections.abc import Mapping

from source_checksum.core.exceptions import ExpansionError

_MODIFIERS = "-+?"


def _is_name_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_name_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


class _Scanner:
    """Cursor over one word."""

    def __init__(self, word: str) -> None:
        self.word = word
        self.pos = 0

    def peek(self) -> str:
        if self.pos < len(self.word):
            return self.word[self.pos]
        return ""

    def next(self) -> str:
        ch = self.peek()
        if ch:
            self.pos += 1
        return ch


class ShellLex:
    """Expands variables in single recipe words against a variable table."""

    def __init__(self, escape_token: str = "\\") -> None:
        self.escape_token = escape_token

    def process_word(self, word: str, env: Mapping[str, str]) -> str:
        """Expand ``word`` using ``env``.

        Raises:
            ExpansionError: On unterminated quotes, a missing ``}``, a bad
                substitution or a triggered ``${name?message}``.
        """
        scanner = _Scanner(word)
        result = self._process_until(scanner, env, stop="")
        if scanner.peek():
            raise ExpansionError(f"unexpected '{scanner.peek()}'", word)
        return result

    def _process_until(self, scanner: _Scanner, env: Mapping[str, str], stop: str) -> str:
        parts: list[str] = []
        while True:
            ch = scanner.peek()
            if not ch:
                if stop:
                    raise ExpansionError(f"missing '{stop}'", scanner.word)
                break
            if stop and ch == stop:
                break
            scanner.next()
            if ch == self.escape_token:
                escaped = scanner.next()
                # a trailing escape token is kept literally
                parts.append(escaped or ch)
            elif ch == "'":
                parts.append(self._single_quoted(scanner))
            elif ch == '"':
                parts.append(self._double_quoted(scanner, env))
            elif ch == "$":
                parts.append(self._dollar(scanner, env))
            else:
                parts.append(ch)
        return "".join(parts)

    def _single_quoted(self, scanner: _Scanner) -> str:
        parts: list[str] = []
        while True:
            ch = scanner.next()
            if not ch:
                raise ExpansionError("unterminated single quote", scanner.word)
            if ch == "'":
                return "".join(parts)
            parts.append(ch)

    def _double_quoted(self, scanner: _Scanner, env: Mapping[str, str]) -> str:
        parts: list[str] = []
        while True:
            ch = scanner.next()
            if not ch:
                raise ExpansionError("unterminated double quote", scanner.word)
            if ch == '"':
                return "".join(parts)
            if ch == "$":
                parts.append(self._dollar(scanner, env))
            elif ch == self.escape_token:
                nxt = scanner.peek()
                if nxt in ('"', "$", self.escape_token):
                    parts.append(scanner.next())
                else:
                    parts.append(ch)
            else:
                parts.append(ch)

    def _read_name(self, scanner: _Scanner) -> str:
        ch = scanner.peek()
        if ch.isdigit():
            # positional parameters are a single digit
            return scanner.next()
        if not _is_name_start(ch):
            return ""
        name = []
        while _is_name_char(scanner.peek()):
            name.append(scanner.next())
        return "".join(name)

    def _dollar(self, scanner: _Scanner, env: Mapping[str, str]) -> str:
        if scanner.peek() != "{":
            name = self._read_name(scanner)
            if not name:
                return "$"
            return env.get(name, "")

        scanner.next()
        name = self._read_name(scanner)
        if not name:
            raise ExpansionError("bad substitution", scanner.word)

        ch = scanner.next()
        if ch == "}":
            return env.get(name, "")
        if not ch:
            raise ExpansionError("missing '}'", scanner.word)

        check_empty = False
        if ch == ":":
            check_empty = True
            ch = scanner.next()
        if not ch or ch not in _MODIFIERS:
            raise ExpansionError(f"unsupported modifier '{ch}'", scanner.word)

        word = self._process_until(scanner, env, stop="}")
        scanner.next()

        value = env.get(name)
        is_set = value is not None and (not check_empty or value != "")
        if ch == "-":
            return value if is_set else word
        if ch == "+":
            return word if is_set else ""
        if not is_set:
            message = word or "is not allowed to be unset"
            raise ExpansionError(f"{name}: {message}", scanner.word)
        return value
