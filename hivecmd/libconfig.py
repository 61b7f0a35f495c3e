"""Reader for the libconfig structured text format.

Groups are returned as ``dict``, lists ``( ... )`` as ``list`` and
arrays ``[ ... ]`` as ``tuple``; scalars become ``bool``, ``int``,
``float`` or ``str``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Iterator, NamedTuple

__all__ = ["ConfigSyntaxError", "parse", "load"]


class ConfigSyntaxError(ValueError):
    """Raised when configuration text cannot be parsed."""

    def __init__(self, message: str, line: int, filename: str | None = None) -> None:
        self.message = message
        self.line = line
        self.filename = filename
        where = f"{filename}:{line}" if filename else f"line {line}"
        super().__init__(f"{where} - {message}")


class _Token(NamedTuple):
    kind: str
    value: str
    line: int


_TOKEN_RE = re.compile(
    r"""
     (?P<ws>[ \t\r\f\v]+)
    |(?P<nl>\n)
    |(?P<comment>\#[^\n]*|//[^\n]*)
    |(?P<block>/\*.*?\*/)
    |(?P<string>"(?:[^"\\\n]|\\.)*")
    |(?P<float>[-+]?(?:\d+\.\d*(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?|\d+[eE][-+]?\d+))
    |(?P<int>[-+]?(?:0[xX][0-9A-Fa-f]+|0[bB][01]+|0[oOqQ][0-7]+|\d+)(?:LL?)?)
    |(?P<name>[A-Za-z*][-A-Za-z0-9_*]*)
    |(?P<punct>[=:;,{}\[\]()])
    """,
    re.VERBOSE | re.DOTALL,
)

_SIGNIFICANT = frozenset({"string", "float", "int", "name", "punct"})

_ESCAPE_RE = re.compile(r"\\(x[0-9A-Fa-f]{2}|.)", re.DOTALL)
_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t", "f": "\f"}

_INT_BASES = {"0x": 16, "0b": 2, "0o": 8, "0q": 8}


def _tokenize(text: str) -> Iterator[_Token]:
    line = 1
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos] == '"':
                raise ConfigSyntaxError("unterminated string", line)
            if text.startswith("/*", pos):
                raise ConfigSyntaxError("unterminated comment", line)
            raise ConfigSyntaxError(f"unexpected character {text[pos]!r}", line)
        kind = match.lastgroup or ""
        value = match.group()
        if kind in _SIGNIFICANT:
            yield _Token(kind, value, line)
        line += value.count("\n")
        pos = match.end()
    yield _Token("eof", "", line)


def _unquote(token: _Token) -> str:
    def replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if len(code) == 3 and code[0] == "x":
            return chr(int(code[1:], 16))
        try:
            return _ESCAPES[code]
        except KeyError:
            raise ConfigSyntaxError(
                f"invalid escape sequence '\\{code}'", token.line
            ) from None

    return _ESCAPE_RE.sub(replace, token.value[1:-1])


def _parse_int(text: str) -> int:
    body = text.rstrip("L")
    sign = -1 if body.startswith("-") else 1
    digits = body.lstrip("+-")
    base = _INT_BASES.get(digits[:2].lower())
    value = int(digits[2:], base) if base else int(digits, 10)
    return sign * value


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._pos = 0

    def _peek(self) -> _Token:
        return self._tokens[self._pos]

    def _next(self) -> _Token:
        token = self._tokens[self._pos]
        if token.kind != "eof":
            self._pos += 1
        return token

    def _at(self, punct: str) -> bool:
        token = self._peek()
        return token.kind == "punct" and token.value == punct

    def _expect(self, punct: str) -> None:
        token = self._next()
        if token.kind != "punct" or token.value != punct:
            found = token.value or "end of input"
            raise ConfigSyntaxError(f"expected '{punct}', found '{found}'", token.line)

    def parse(self) -> dict[str, Any]:
        settings = self._settings()
        token = self._peek()
        if token.kind != "eof":
            raise ConfigSyntaxError(f"unexpected '{token.value}'", token.line)
        return settings

    def _settings(self) -> dict[str, Any]:
        group: dict[str, Any] = {}
        while self._peek().kind == "name":
            name = self._next()
            if name.value in group:
                raise ConfigSyntaxError(
                    f"duplicate setting name '{name.value}'", name.line
                )
            separator = self._next()
            if separator.kind != "punct" or separator.value not in ("=", ":"):
                raise ConfigSyntaxError(
                    f"expected '=' or ':' after '{name.value}'", separator.line
                )
            group[name.value] = self._value()
            if self._at(";") or self._at(","):
                self._next()
        return group

    def _value(self) -> Any:
        token = self._next()
        if token.kind == "string":
            parts = [_unquote(token)]
            while self._peek().kind == "string":
                parts.append(_unquote(self._next()))
            return "".join(parts)
        if token.kind == "int":
            return _parse_int(token.value)
        if token.kind == "float":
            return float(token.value)
        if token.kind == "name" and token.value.lower() in ("true", "false"):
            return token.value.lower() == "true"
        if token.kind == "punct":
            if token.value == "{":
                group = self._settings()
                self._expect("}")
                return group
            if token.value == "(":
                return self._sequence(")")
            if token.value == "[":
                return self._array(token.line)
        found = token.value or "end of input"
        raise ConfigSyntaxError(f"expected a value, found '{found}'", token.line)

    def _sequence(self, close: str) -> list[Any]:
        items: list[Any] = []
        if self._at(close):
            self._next()
            return items
        while True:
            items.append(self._value())
            if self._at(","):
                self._next()
                if self._at(close):
                    self._next()
                    return items
                continue
            self._expect(close)
            return items

    def _array(self, line: int) -> tuple[Any, ...]:
        items = self._sequence("]")
        if any(isinstance(item, (dict, list, tuple)) for item in items):
            raise ConfigSyntaxError("arrays may only hold scalar values", line)
        if len({type(item) for item in items}) > 1:
            raise ConfigSyntaxError("mismatched element type in array", line)
        return tuple(items)


def parse(text: str) -> dict[str, Any]:
    """Parse configuration text into a dictionary of settings."""
    return _Parser(text).parse()


def load(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read and parse a configuration file."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        return parse(text)
    except ConfigSyntaxError as exc:
        raise ConfigSyntaxError(exc.message, exc.line, os.fspath(path)) from None