"""
Composer Kernel: Object-Literal Grammar

Parses the property/style literals authors write (JSON, or the JS object
literal subset people actually type) and formats values back into that
subset, so extraction and serialization share one grammar.

Parsing runs progressively looser passes; a failure retries the next pass:

  1. strict JSON
  2. bounded tokenizer + recursive descent (single quotes, unquoted keys,
     trailing commas, comments, `undefined`, template strings without
     substitutions)
  3. textual normalization, then JSON
  4. aggressive normalization (quote bare scalar values), then JSON
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from composer.kernel.errors import ParseFailure

logger = logging.getLogger(__name__)

MAX_DEPTH = 64
MAX_TOKENS = 100_000

_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_NUMBER = re.compile(r"[+-]?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None, "undefined": None}
_PUNCTUATION = set("{}[]:,")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


class LiteralSyntaxError(ValueError):
    pass


# ---------------------------------------------------------------------------
# Scanning helpers (string/comment aware)
# ---------------------------------------------------------------------------


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at `start`."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if quote == "`" and text.startswith("${", i):
            end = find_balanced(text, i + 1)
            if end < 0:
                return len(text)
            i = end + 1
            continue
        i += 1
    return len(text)


def _skip_comment(text: str, start: int) -> int | None:
    """If a comment opens at `start`, return the index past it."""
    if text.startswith("//", start):
        end = text.find("\n", start)
        return len(text) if end < 0 else end
    if text.startswith("/*", start):
        end = text.find("*/", start + 2)
        return len(text) if end < 0 else end + 2
    return None


def find_balanced(text: str, start: int) -> int:
    """
    Index of the bracket closing the one at `start`, or -1.

    Brackets inside string literals, template strings and comments are ignored.
    """
    pairs = {"{": "}", "[": "]", "(": ")"}
    if start >= len(text) or text[start] not in pairs:
        return -1
    stack = [pairs[text[start]]]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch in "'\"`":
            i = _skip_string(text, i)
            continue
        skipped = _skip_comment(text, i)
        if skipped is not None:
            i = skipped
            continue
        if ch in pairs:
            stack.append(pairs[ch])
        elif ch in ")]}":
            if ch != stack[-1]:
                return -1
            stack.pop()
            if not stack:
                return i
        i += 1
    return -1


def strip_comments(text: str) -> str:
    """Remove // and /* */ comments, leaving string contents alone."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "'\"`":
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        skipped = _skip_comment(text, i)
        if skipped is not None:
            i = skipped
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Pass 2: tokenizer + recursive descent
# ---------------------------------------------------------------------------


def _unescape(body: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 >= len(body):
            out.append(ch)
            i += 1
            continue
        nxt = body[i + 1]
        if nxt == "u" and body[i + 2 : i + 3] == "{":
            close = body.find("}", i + 3)
            if close > 0:
                out.append(chr(int(body[i + 3 : close], 16)))
                i = close + 1
                continue
        if nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", body[i + 2 : i + 6]):
            out.append(chr(int(body[i + 2 : i + 6], 16)))
            i += 6
            continue
        if nxt == "x" and re.fullmatch(r"[0-9a-fA-F]{2}", body[i + 2 : i + 4]):
            out.append(chr(int(body[i + 2 : i + 4], 16)))
            i += 4
            continue
        if nxt == "\n":
            i += 2
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def unescape_string(body: str) -> str:
    """Decode the escape sequences of a JS string literal body."""
    return _unescape(body)


def _tokenize(text: str) -> list[tuple[str, Any]]:
    tokens: list[tuple[str, Any]] = []
    i = 0
    while i < len(text):
        if len(tokens) > MAX_TOKENS:
            raise LiteralSyntaxError("literal too large")
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        skipped = _skip_comment(text, i)
        if skipped is not None:
            i = skipped
            continue
        if ch in _PUNCTUATION:
            tokens.append(("punct", ch))
            i += 1
            continue
        if ch in "'\"`":
            end = _skip_string(text, i)
            if end > len(text) or text[end - 1] != ch or end - i < 2:
                raise LiteralSyntaxError(f"unterminated string at {i}")
            body = text[i + 1 : end - 1]
            if ch == "`" and "${" in body:
                raise LiteralSyntaxError("template substitution in literal")
            tokens.append(("string", _unescape(body)))
            i = end
            continue
        match = _NUMBER.match(text, i)
        if match and (ch.isdigit() or ch in "+-."):
            raw = match.group(0)
            sign = -1 if raw.startswith("-") else 1
            digits = raw.lstrip("+-")
            if digits.lower().startswith("0x"):
                tokens.append(("number", sign * int(digits, 16)))
            elif re.fullmatch(r"\d+", digits):
                tokens.append(("number", sign * int(digits)))
            else:
                value = sign * float(digits)
                tokens.append(("number", int(value) if value.is_integer() and "e" not in digits.lower() else value))
            i = match.end()
            continue
        match = _IDENTIFIER.match(text, i)
        if match:
            tokens.append(("ident", match.group(0)))
            i = match.end()
            continue
        raise LiteralSyntaxError(f"unexpected character {ch!r} at {i}")
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, Any]]) -> None:
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> tuple[str, Any] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> tuple[str, Any]:
        token = self.peek()
        if token is None:
            raise LiteralSyntaxError("unexpected end of literal")
        self.pos += 1
        return token

    def expect(self, punct: str) -> None:
        kind, value = self.next()
        if kind != "punct" or value != punct:
            raise LiteralSyntaxError(f"expected {punct!r}, got {value!r}")

    def at(self, punct: str) -> bool:
        token = self.peek()
        return token is not None and token[0] == "punct" and token[1] == punct

    def value(self, depth: int = 0) -> Any:
        if depth > MAX_DEPTH:
            raise LiteralSyntaxError("literal nested too deeply")
        kind, value = self.next()
        if kind == "punct" and value == "{":
            return self.object(depth + 1)
        if kind == "punct" and value == "[":
            return self.array(depth + 1)
        if kind in ("string", "number"):
            return value
        if kind == "ident" and value in _KEYWORDS:
            return _KEYWORDS[value]
        raise LiteralSyntaxError(f"unexpected token {value!r}")

    def object(self, depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while not self.at("}"):
            kind, key = self.next()
            if kind not in ("string", "ident", "number"):
                raise LiteralSyntaxError(f"bad object key {key!r}")
            self.expect(":")
            result[str(key)] = self.value(depth)
            if self.at(","):
                self.next()
            elif not self.at("}"):
                raise LiteralSyntaxError("expected ',' or '}'")
        self.next()
        return result

    def array(self, depth: int) -> list[Any]:
        result: list[Any] = []
        while not self.at("]"):
            result.append(self.value(depth))
            if self.at(","):
                self.next()
            elif not self.at("]"):
                raise LiteralSyntaxError("expected ',' or ']'")
        self.next()
        return result


def parse_object_literal(text: str) -> Any:
    parser = _Parser(_tokenize(text))
    value = parser.value()
    if parser.peek() is not None:
        raise LiteralSyntaxError("trailing content after literal")
    return value


# ---------------------------------------------------------------------------
# Passes 3 and 4: textual normalization
# ---------------------------------------------------------------------------

_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)\s*:")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_BARE_VALUE = re.compile(r":\s*([^\"\[{\s][^,}\]]*?)\s*(?=[,}\]])")
_QUOTED_SCALAR = re.compile(r":\s*\"(true|false|null|-?\d+(?:\.\d+)?)\"")


def _normalize(text: str) -> str:
    text = strip_comments(text)
    text = text.replace("'", '"')
    text = _UNQUOTED_KEY.sub(r'\1"\2":', text)
    return _TRAILING_COMMA.sub(r"\1", text)


def _normalize_aggressive(text: str) -> str:
    text = _normalize(text)
    text = _BARE_VALUE.sub(lambda m: ': "' + m.group(1).strip('"') + '"', text)
    return _QUOTED_SCALAR.sub(r": \1", text)


_PASSES: list[tuple[str, Callable[[str], Any]]] = [
    ("json", json.loads),
    ("object-literal", parse_object_literal),
    ("normalized", lambda text: json.loads(_normalize(text))),
    ("aggressive", lambda text: json.loads(_normalize_aggressive(text))),
]


def parse_literal(text: str) -> Any:
    """
    Parse `text` with progressively looser passes.

    Raises ParseFailure only when every pass fails; callers recover locally.
    """
    errors: list[str] = []
    for name, attempt in _PASSES:
        try:
            return attempt(text)
        except (ValueError, RecursionError) as exc:
            errors.append(f"{name}: {exc}")
            logger.debug("literal: pass %s failed: %s", name, exc)
    raise ParseFailure("Could not parse literal", detail="; ".join(errors))


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _format_key(key: str) -> str:
    if _IDENTIFIER.fullmatch(key) and key not in _KEYWORDS:
        return key
    return json.dumps(key)


def format_literal(value: Any, indent: int = 2, _level: int = 0) -> str:
    """Format a JSON-compatible value as an object literal (unquoted keys)."""
    pad = " " * (indent * (_level + 1))
    closing_pad = " " * (indent * _level)
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [f"{pad}{_format_key(str(k))}: {format_literal(v, indent, _level + 1)}" for k, v in value.items()]
        return "{\n" + ",\n".join(items) + "\n" + closing_pad + "}"
    if isinstance(value, list | tuple):
        if not value:
            return "[]"
        items = [pad + format_literal(v, indent, _level + 1) for v in value]
        return "[\n" + ",\n".join(items) + "\n" + closing_pad + "]"
    return json.dumps(value, ensure_ascii=False)
