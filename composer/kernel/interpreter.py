"""
Composer Kernel: Sandbox Interpreter

Evaluates a parsed component module (composer.kernel.tsx_parser) by walking
its syntax tree. There is no eval/exec and no import capability: the only
names in scope are the whitelist built in `Interpreter._sandbox_bindings`.

JSX is desugared as it is evaluated: each element becomes a
`create_element(type, props, *children)` call. Intrinsic tags build Nodes;
component types are invoked with their props.

Hooks run in a single static pass. useState returns its initial value and a
setter that is ignored; effects are recorded, never run.
"""

from __future__ import annotations

import html
import json
import logging
import math
import random
import re
from collections.abc import Callable
from datetime import UTC, datetime
from functools import cmp_to_key, partial
from typing import Any
from urllib.parse import quote

from tree_sitter import Node as SyntaxNode

from composer.kernel.errors import BudgetExceeded, ComponentFailure, RuntimeFailure, TransformFailure
from composer.kernel.jsvalues import (
    UNDEFINED,
    format_number,
    is_nullish,
    is_number,
    loose_equals,
    normalize_number,
    strict_equals,
    to_number,
    to_property_key,
    to_string,
    truthy,
    type_of,
)
from composer.kernel.literal import unescape_string
from composer.kernel.nodes import FRAGMENT, Node, normalize_children
from composer.kernel.nodes import create_element as build_node
from composer.kernel.tsx_parser import ParsedProgram, is_async, named_children, node_text
from composer.kernel.types import format_label, infer_property_type, is_structured_entry

logger = logging.getLogger(__name__)
console_logger = logging.getLogger("composer.sandbox.console")

PROPERTY_BINDINGS = {"props", "defaultProps"}

_NO_OP_STATEMENTS = {
    "import_statement",
    "empty_statement",
    "debugger_statement",
    "interface_declaration",
    "type_alias_declaration",
    "ambient_declaration",
    "function_signature",
}


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------


class _Return(Exception):
    def __init__(self, value: Any) -> None:
        self.value = value


class _Break(Exception):
    pass


class _Continue(Exception):
    pass


class JSThrow(Exception):
    """A value thrown by author code (`throw`), or by a builtin on its behalf."""

    def __init__(self, value: Any) -> None:
        super().__init__(describe_thrown(value))
        self.value = value


def make_error(name: str, message: Any = UNDEFINED) -> dict[str, Any]:
    text = "" if message is UNDEFINED else to_string(message)
    return {"name": name, "message": text}


def describe_thrown(value: Any) -> str:
    if isinstance(value, dict) and "message" in value:
        return f"{to_string(value.get('name', 'Error'))}: {to_string(value['message'])}"
    return to_string(value)


# ---------------------------------------------------------------------------
# Runtime values
# ---------------------------------------------------------------------------


class Scope:
    __slots__ = ("bindings", "constants", "parent")

    def __init__(self, parent: Scope | None = None, bindings: dict[str, Any] | None = None) -> None:
        self.bindings: dict[str, Any] = dict(bindings or {})
        self.constants: set[str] = set()
        self.parent = parent

    def _find(self, name: str) -> Scope | None:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def has(self, name: str) -> bool:
        return self._find(name) is not None

    def declare(self, name: str, value: Any, constant: bool = False) -> None:
        self.bindings[name] = value
        if constant:
            self.constants.add(name)
        else:
            self.constants.discard(name)

    def lookup(self, name: str) -> Any:
        scope = self._find(name)
        if scope is None:
            raise RuntimeFailure(f"ReferenceError: {name} is not defined")
        return scope.bindings[name]

    def assign(self, name: str, value: Any) -> None:
        scope = self._find(name)
        if scope is None:
            raise RuntimeFailure(f"ReferenceError: {name} is not defined")
        if name in scope.constants:
            raise RuntimeFailure(f"TypeError: Assignment to constant variable '{name}'")
        scope.bindings[name] = value


class JSFunction:
    """A closure over an arrow/function syntax node."""

    def __init__(self, interpreter: Interpreter, node: SyntaxNode, scope: Scope, name: str = "") -> None:
        self.interpreter = interpreter
        self.node = node
        self.scope = scope
        self.name = name
        self.is_async = is_async(node)

    def __call__(self, *args: Any) -> Any:
        # host entry point (event handlers fired from the preview)
        try:
            result = self.interpreter.call_function(self, list(args))
        except JSThrow as exc:
            raise RuntimeFailure(f"Uncaught {exc}") from exc
        if isinstance(result, JSPromise) and result.state == "rejected":
            logger.warning("interpreter: unhandled promise rejection in %s: %s", self, describe_thrown(result.value))
        return result

    def js_get(self, key: str | int) -> Any:
        if key == "name":
            return self.name
        return UNDEFINED

    def js_string(self) -> str:
        return f"function {self.name}() {{ [code] }}"

    def __repr__(self) -> str:
        return f"JSFunction({self.name or '<anonymous>'})"


class HostFunction:
    """A builtin callable that also exposes static members (Number.isInteger...)."""

    def __init__(
        self,
        name: str,
        fn: Callable[..., Any],
        members: dict[str, Any] | None = None,
        construct: Callable[..., Any] | None = None,
        instance_check: Callable[[Any], bool] | None = None,
    ) -> None:
        self.name = name
        self.fn = fn
        self.members = members or {}
        self.construct = construct
        self.instance_check = instance_check

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)

    def js_get(self, key: str | int) -> Any:
        if key == "name":
            return self.name
        return self.members.get(str(key), UNDEFINED)

    def js_string(self) -> str:
        return f"function {self.name}() {{ [native code] }}"


_NAMED_GROUP = re.compile(r"\(\?<([A-Za-z_]\w*)>")


class JSRegExp:
    def __init__(self, pattern: str, flags: str = "") -> None:
        self.source = pattern
        self.flags = flags
        self.is_global = "g" in flags
        py_flags = 0
        if "i" in flags:
            py_flags |= re.IGNORECASE
        if "m" in flags:
            py_flags |= re.MULTILINE
        if "s" in flags:
            py_flags |= re.DOTALL
        try:
            self.compiled = re.compile(_NAMED_GROUP.sub(r"(?P<\1>", pattern), py_flags)
        except re.error as exc:
            raise RuntimeFailure(f"SyntaxError: Invalid regular expression /{pattern}/: {exc}") from exc

    def js_get(self, key: str | int) -> Any:
        if key == "test":
            return lambda text=UNDEFINED, *_: self.compiled.search(to_string(text)) is not None
        if key == "exec":
            return lambda text=UNDEFINED, *_: _match_array(self.compiled.search(to_string(text)))
        if key == "source":
            return self.source
        if key == "flags":
            return self.flags
        if key == "global":
            return self.is_global
        return UNDEFINED

    def js_string(self) -> str:
        return f"/{self.source}/{self.flags}"


def _match_array(match: re.Match[str] | None) -> list[Any] | None:
    if match is None:
        return None
    return [match.group(0), *[UNDEFINED if g is None else g for g in match.groups()]]


class JSDate:
    def __init__(self, *args: Any) -> None:
        self.moment: datetime | None
        if not args:
            self.moment = datetime.now(UTC)
        elif len(args) == 1 and is_number(args[0]):
            self.moment = datetime.fromtimestamp(args[0] / 1000, UTC)
        elif len(args) == 1:
            try:
                self.moment = datetime.fromisoformat(to_string(args[0]).replace("Z", "+00:00"))
            except ValueError:
                self.moment = None
        else:
            parts = [int(to_number(a)) for a in args[:6]]
            year, month, day, hour, minute, second = (parts + [0, 0, 1, 0, 0, 0][len(parts) :])[:6]
            try:
                self.moment = datetime(year, month + 1, day, hour, minute, second, tzinfo=UTC)
            except ValueError:
                self.moment = None

    def js_get(self, key: str | int) -> Any:
        moment = self.moment
        if moment is None:
            return (lambda *_: "Invalid Date") if key in ("toString", "toISOString", "toLocaleDateString") else (
                lambda *_: math.nan
            )
        methods: dict[str, Callable[..., Any]] = {
            "getFullYear": lambda *_: moment.year,
            "getMonth": lambda *_: moment.month - 1,
            "getDate": lambda *_: moment.day,
            "getDay": lambda *_: (moment.weekday() + 1) % 7,
            "getHours": lambda *_: moment.hour,
            "getMinutes": lambda *_: moment.minute,
            "getSeconds": lambda *_: moment.second,
            "getTime": lambda *_: int(moment.timestamp() * 1000),
            "valueOf": lambda *_: int(moment.timestamp() * 1000),
            "toISOString": lambda *_: moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z",
            "toLocaleDateString": lambda *_: f"{moment.month}/{moment.day}/{moment.year}",
            "toLocaleTimeString": lambda *_: moment.strftime("%I:%M:%S %p").lstrip("0"),
            "toString": lambda *_: self.js_string(),
        }
        return methods.get(str(key), UNDEFINED)

    def js_string(self) -> str:
        if self.moment is None:
            return "Invalid Date"
        return self.moment.strftime("%a %b %d %Y %H:%M:%S GMT+0000")


class JSPromise:
    """
    An eagerly settled promise. There is no microtask queue: async bodies and
    `then` callbacks run to completion when called. A promise whose executor
    never calls resolve/reject stays pending.
    """

    def __init__(self, interpreter: Interpreter, state: str = "fulfilled", value: Any = UNDEFINED) -> None:
        self.interpreter = interpreter
        self.state = state
        self.value = value

    def js_get(self, key: str | int) -> Any:
        if key == "then":
            return self._then
        if key == "catch":
            return lambda on_rejected=UNDEFINED, *_: self._then(UNDEFINED, on_rejected)
        if key == "finally":
            return self._finally
        return UNDEFINED

    def _then(self, on_fulfilled: Any = UNDEFINED, on_rejected: Any = UNDEFINED, *_: Any) -> JSPromise:
        if self.state == "pending":
            return self
        handler = on_rejected if self.state == "rejected" else on_fulfilled
        if not callable(handler):
            return self
        return self.interpreter.settle(lambda: self.interpreter.call(handler, [self.value]))

    def _finally(self, on_settled: Any = UNDEFINED, *_: Any) -> JSPromise:
        if self.state == "pending" or not callable(on_settled):
            return self
        outcome = self.interpreter.settle(lambda: self.interpreter.call(on_settled, []))
        return outcome if outcome.state == "rejected" else self

    def js_string(self) -> str:
        return "[object Promise]"


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def _int32(value: Any) -> int:
    number = to_number(value)
    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return 0
    result = int(number) & 0xFFFFFFFF
    return result - 0x100000000 if result & 0x80000000 else result


def js_add(a: Any, b: Any) -> Any:
    if isinstance(a, str | list | dict) or isinstance(b, str | list | dict):
        return to_string(a) + to_string(b)
    return normalize_number(to_number(a) + to_number(b))


def _arithmetic(op: str, a: Any, b: Any) -> Any:
    x, y = to_number(a), to_number(b)
    try:
        if op == "-":
            result = x - y
        elif op == "*":
            result = x * y
        elif op == "/":
            if y == 0:
                if x == 0 or math.isnan(x):
                    return math.nan
                return math.copysign(math.inf, x) * math.copysign(1, y)
            result = x / y
        elif op == "%":
            if y == 0 or math.isinf(x) or math.isnan(x) or math.isnan(y):
                return math.nan
            result = math.fmod(x, y)
        else:
            result = x**y
            if isinstance(result, complex):
                return math.nan
    except OverflowError:
        return math.inf
    return normalize_number(result)


def _compare(op: str, a: Any, b: Any) -> bool:
    if isinstance(a, str) and isinstance(b, str):
        x: Any = a
        y: Any = b
    else:
        x, y = to_number(a), to_number(b)
        if math.isnan(x) or math.isnan(y):
            return False
    if op == "<":
        return x < y
    if op == ">":
        return x > y
    if op == "<=":
        return x <= y
    return x >= y


def _same_value_zero(a: Any, b: Any) -> bool:
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return strict_equals(a, b)


def binary_operation(op: str, a: Any, b: Any) -> Any:
    if op == "+":
        return js_add(a, b)
    if op in ("-", "*", "/", "%", "**"):
        return _arithmetic(op, a, b)
    if op == "===":
        return strict_equals(a, b)
    if op == "!==":
        return not strict_equals(a, b)
    if op == "==":
        return loose_equals(a, b)
    if op == "!=":
        return not loose_equals(a, b)
    if op in ("<", ">", "<=", ">="):
        return _compare(op, a, b)
    if op == "&":
        return _int32(a) & _int32(b)
    if op == "|":
        return _int32(a) | _int32(b)
    if op == "^":
        return _int32(a) ^ _int32(b)
    if op == "<<":
        return _int32(_int32(a) << (_int32(b) & 31))
    if op == ">>":
        return _int32(a) >> (_int32(b) & 31)
    if op == ">>>":
        return (_int32(a) & 0xFFFFFFFF) >> (_int32(b) & 31)
    if op == "in":
        if isinstance(b, dict):
            return to_string(a) in b
        if isinstance(b, list):
            key = to_property_key(a)
            return key == "length" or (isinstance(key, int) and 0 <= key < len(b))
        raise RuntimeFailure("TypeError: Cannot use 'in' operator on a non-object")
    if op == "instanceof":
        check = getattr(b, "instance_check", None)
        if check is None:
            raise RuntimeFailure("TypeError: Right-hand side of 'instanceof' is not callable")
        return bool(check(a))
    raise RuntimeFailure(f"SyntaxError: unsupported operator {op}")


# ---------------------------------------------------------------------------
# Builtin members
# ---------------------------------------------------------------------------


def _arg(args: tuple[Any, ...] | list[Any], index: int) -> Any:
    return args[index] if index < len(args) else UNDEFINED


def _integer(value: Any, default: int) -> int:
    if value is UNDEFINED:
        return default
    number = to_number(value)
    if isinstance(number, float):
        if math.isnan(number):
            return 0
        if math.isinf(number):
            return 2**31 if number > 0 else -(2**31)
    return int(number)


def _slice_bounds(length: int, start: Any, end: Any) -> tuple[int, int]:
    a = _integer(start, 0)
    b = _integer(end, length)
    a = max(length + a, 0) if a < 0 else min(a, length)
    b = max(length + b, 0) if b < 0 else min(b, length)
    return a, b


def _expand_replacement(template: str, match_text: str, groups: tuple[Any, ...]) -> str:
    def expand(m: re.Match[str]) -> str:
        token = m.group(1)
        if token == "$":
            return "$"
        if token == "&":
            return match_text
        index = int(token)
        if 1 <= index <= len(groups):
            group = groups[index - 1]
            return "" if group is None else group
        return m.group(0)

    return re.sub(r"\$(\$|&|\d{1,2})", expand, template)


def _replace(it: Interpreter, s: str, pattern: Any, replacement: Any, replace_all: bool) -> str:
    def produce(match_text: str, groups: tuple[Any, ...], index: int) -> str:
        if callable(replacement):
            args = [match_text, *[UNDEFINED if g is None else g for g in groups], index, s]
            return to_string(it.call(replacement, args))
        return _expand_replacement(to_string(replacement), match_text, groups)

    if isinstance(pattern, JSRegExp):
        count = 0 if (pattern.is_global or replace_all) else 1
        return pattern.compiled.sub(lambda m: produce(m.group(0), m.groups(), m.start()), s, count=count)
    needle = to_string(pattern)
    out: list[str] = []
    cursor = 0
    while True:
        index = s.find(needle, cursor)
        if index < 0:
            break
        out.append(s[cursor:index])
        out.append(produce(needle, (), index))
        cursor = index + len(needle)
        if not replace_all:
            break
        if not needle:
            if cursor < len(s):
                out.append(s[cursor])
            cursor += 1
            if cursor > len(s):
                break
    out.append(s[cursor:])
    return "".join(out)


def _split(it: Interpreter, s: str, separator: Any = UNDEFINED, limit: Any = UNDEFINED, *_: Any) -> list[str]:
    if separator is UNDEFINED:
        parts = [s]
    elif isinstance(separator, JSRegExp):
        parts = [UNDEFINED if p is None else p for p in separator.compiled.split(s)]
    elif to_string(separator) == "":
        parts = list(s)
    else:
        parts = s.split(to_string(separator))
    if limit is not UNDEFINED:
        parts = parts[: max(_integer(limit, len(parts)), 0)]
    return parts


def _substring(it: Interpreter, s: str, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> str:
    a = min(max(_integer(start, 0), 0), len(s))
    b = min(max(_integer(end, len(s)), 0), len(s))
    if a > b:
        a, b = b, a
    return s[a:b]


def _pad(s: str, length: Any, fill: Any, at_start: bool) -> str:
    target = _integer(length, 0)
    filler = " " if fill is UNDEFINED else to_string(fill)
    if target <= len(s) or not filler:
        return s
    padding = (filler * (target // len(filler) + 1))[: target - len(s)]
    return padding + s if at_start else s + padding


def _index_of(s: str, needle: Any, start: Any) -> int:
    return s.find(to_string(needle), max(_integer(start, 0), 0))


def _last_index_of(s: str, needle: Any, *_: Any) -> int:
    return s.rfind(to_string(needle))


def _at(sequence: Any, index: Any) -> Any:
    i = _integer(index, 0)
    if i < 0:
        i += len(sequence)
    return sequence[i] if 0 <= i < len(sequence) else UNDEFINED


def _char_at(s: str, index: Any = UNDEFINED, *_: Any) -> str:
    i = _integer(index, 0)
    return s[i] if 0 <= i < len(s) else ""


def _char_code_at(s: str, index: Any = UNDEFINED, *_: Any) -> Any:
    i = _integer(index, 0)
    return ord(s[i]) if 0 <= i < len(s) else math.nan


def _match(s: str, pattern: Any = UNDEFINED, *_: Any) -> Any:
    regexp = pattern if isinstance(pattern, JSRegExp) else JSRegExp(re.escape(to_string(pattern)))
    if regexp.is_global:
        found = [m.group(0) for m in regexp.compiled.finditer(s)]
        return found or None
    return _match_array(regexp.compiled.search(s))


def _locale_compare(s: str, other: Any = UNDEFINED, *_: Any) -> int:
    other_text = to_string(other)
    return (s > other_text) - (s < other_text)


_STRING_METHODS: dict[str, Callable[..., Any]] = {
    "toUpperCase": lambda it, s, *_: s.upper(),
    "toLowerCase": lambda it, s, *_: s.lower(),
    "toLocaleUpperCase": lambda it, s, *_: s.upper(),
    "toLocaleLowerCase": lambda it, s, *_: s.lower(),
    "trim": lambda it, s, *_: s.strip(),
    "trimStart": lambda it, s, *_: s.lstrip(),
    "trimEnd": lambda it, s, *_: s.rstrip(),
    "split": _split,
    "slice": lambda it, s, start=UNDEFINED, end=UNDEFINED, *_: s[slice(*_slice_bounds(len(s), start, end))],
    "substring": _substring,
    "includes": lambda it, s, needle=UNDEFINED, start=UNDEFINED, *_: _index_of(s, needle, start) >= 0,
    "startsWith": lambda it, s, needle=UNDEFINED, *_: s.startswith(to_string(needle)),
    "endsWith": lambda it, s, needle=UNDEFINED, *_: s.endswith(to_string(needle)),
    "indexOf": lambda it, s, needle=UNDEFINED, start=UNDEFINED, *_: _index_of(s, needle, start),
    "lastIndexOf": lambda it, s, *args: _last_index_of(s, *args),
    "replace": lambda it, s, pattern=UNDEFINED, repl=UNDEFINED, *_: _replace(it, s, pattern, repl, False),
    "replaceAll": lambda it, s, pattern=UNDEFINED, repl=UNDEFINED, *_: _replace(it, s, pattern, repl, True),
    "charAt": lambda it, s, *args: _char_at(s, *args),
    "charCodeAt": lambda it, s, *args: _char_code_at(s, *args),
    "padStart": lambda it, s, length=UNDEFINED, fill=UNDEFINED, *_: _pad(s, length, fill, True),
    "padEnd": lambda it, s, length=UNDEFINED, fill=UNDEFINED, *_: _pad(s, length, fill, False),
    "repeat": lambda it, s, count=UNDEFINED, *_: s * max(_integer(count, 0), 0),
    "concat": lambda it, s, *args: s + "".join(to_string(a) for a in args),
    "at": lambda it, s, index=UNDEFINED, *_: _at(s, index),
    "match": lambda it, s, *args: _match(s, *args),
    "localeCompare": lambda it, s, *args: _locale_compare(s, *args),
    "toString": lambda it, s, *_: s,
    "valueOf": lambda it, s, *_: s,
}


def _callback(it: Interpreter, fn: Any, name: str) -> Any:
    if not callable(fn):
        raise RuntimeFailure(f"TypeError: {to_string(fn)} is not a function (in Array.{name})")
    return fn


def _array_map(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> list[Any]:
    fn = _callback(it, fn, "map")
    return [it.call(fn, [item, i, arr]) for i, item in enumerate(list(arr))]


def _array_filter(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> list[Any]:
    fn = _callback(it, fn, "filter")
    return [item for i, item in enumerate(list(arr)) if truthy(it.call(fn, [item, i, arr]))]


def _array_for_each(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> Any:
    fn = _callback(it, fn, "forEach")
    for i, item in enumerate(list(arr)):
        it.call(fn, [item, i, arr])
    return UNDEFINED


def _array_find(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> Any:
    fn = _callback(it, fn, "find")
    for i, item in enumerate(list(arr)):
        if truthy(it.call(fn, [item, i, arr])):
            return item
    return UNDEFINED


def _array_find_index(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> int:
    fn = _callback(it, fn, "findIndex")
    for i, item in enumerate(list(arr)):
        if truthy(it.call(fn, [item, i, arr])):
            return i
    return -1


def _array_some(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> bool:
    fn = _callback(it, fn, "some")
    return any(truthy(it.call(fn, [item, i, arr])) for i, item in enumerate(list(arr)))


def _array_every(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> bool:
    fn = _callback(it, fn, "every")
    return all(truthy(it.call(fn, [item, i, arr])) for i, item in enumerate(list(arr)))


def _array_reduce(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *rest: Any) -> Any:
    fn = _callback(it, fn, "reduce")
    items = list(arr)
    if rest:
        accumulator, start = rest[0], 0
    elif items:
        accumulator, start = items[0], 1
    else:
        raise RuntimeFailure("TypeError: Reduce of empty array with no initial value")
    for i in range(start, len(items)):
        accumulator = it.call(fn, [accumulator, items[i], i, arr])
    return accumulator


def _array_join(it: Interpreter, arr: list[Any], separator: Any = UNDEFINED, *_: Any) -> str:
    glue = "," if separator is UNDEFINED else to_string(separator)
    return glue.join("" if is_nullish(item) else to_string(item) for item in arr)


def _array_concat(it: Interpreter, arr: list[Any], *args: Any) -> list[Any]:
    result = list(arr)
    for arg in args:
        if isinstance(arg, list):
            result.extend(arg)
        else:
            result.append(arg)
    return result


def _array_index_of(it: Interpreter, arr: list[Any], needle: Any = UNDEFINED, *_: Any) -> int:
    for i, item in enumerate(arr):
        if strict_equals(item, needle):
            return i
    return -1


def _array_push(it: Interpreter, arr: list[Any], *items: Any) -> int:
    arr.extend(items)
    return len(arr)


def _array_pop(it: Interpreter, arr: list[Any], *_: Any) -> Any:
    return arr.pop() if arr else UNDEFINED


def _array_shift(it: Interpreter, arr: list[Any], *_: Any) -> Any:
    return arr.pop(0) if arr else UNDEFINED


def _array_unshift(it: Interpreter, arr: list[Any], *items: Any) -> int:
    arr[0:0] = items
    return len(arr)


def _array_reverse(it: Interpreter, arr: list[Any], *_: Any) -> list[Any]:
    arr.reverse()
    return arr


def _sign(value: Any) -> int:
    number = to_number(value)
    if isinstance(number, float) and math.isnan(number):
        return 0
    return (number > 0) - (number < 0)


def _array_sort(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> list[Any]:
    defined = [item for item in arr if item is not UNDEFINED]
    missing = len(arr) - len(defined)
    if fn is UNDEFINED:
        defined.sort(key=to_string)
    else:
        fn = _callback(it, fn, "sort")
        defined.sort(key=cmp_to_key(lambda a, b: _sign(it.call(fn, [a, b]))))
    arr[:] = defined + [UNDEFINED] * missing
    return arr


def _flatten(items: list[Any], depth: int) -> list[Any]:
    result: list[Any] = []
    for item in items:
        if isinstance(item, list) and depth > 0:
            result.extend(_flatten(item, depth - 1))
        else:
            result.append(item)
    return result


def _array_flat_map(it: Interpreter, arr: list[Any], fn: Any = UNDEFINED, *_: Any) -> list[Any]:
    return _flatten(_array_map(it, arr, fn), 1)


def _array_fill(it: Interpreter, arr: list[Any], value: Any = UNDEFINED, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> list[Any]:
    a, b = _slice_bounds(len(arr), start, end)
    for i in range(a, b):
        arr[i] = value
    return arr


_ARRAY_METHODS: dict[str, Callable[..., Any]] = {
    "map": _array_map,
    "filter": _array_filter,
    "forEach": _array_for_each,
    "find": _array_find,
    "findIndex": _array_find_index,
    "some": _array_some,
    "every": _array_every,
    "reduce": _array_reduce,
    "join": _array_join,
    "slice": lambda it, arr, start=UNDEFINED, end=UNDEFINED, *_: arr[slice(*_slice_bounds(len(arr), start, end))],
    "concat": _array_concat,
    "includes": lambda it, arr, needle=UNDEFINED, *_: any(_same_value_zero(item, needle) for item in arr),
    "indexOf": _array_index_of,
    "push": _array_push,
    "pop": _array_pop,
    "shift": _array_shift,
    "unshift": _array_unshift,
    "reverse": _array_reverse,
    "sort": _array_sort,
    "flat": lambda it, arr, depth=UNDEFINED, *_: _flatten(arr, _integer(depth, 1)),
    "flatMap": _array_flat_map,
    "fill": _array_fill,
    "at": lambda it, arr, index=UNDEFINED, *_: _at(arr, index),
    "toString": lambda it, arr, *_: to_string(arr),
}


def _to_fixed(it: Interpreter, n: Any, digits: Any = UNDEFINED, *_: Any) -> str:
    places = min(max(_integer(digits, 0), 0), 100)
    if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
        return format_number(n)
    return f"{n:.{places}f}"


def _number_to_string(it: Interpreter, n: Any, radix: Any = UNDEFINED, *_: Any) -> str:
    base = _integer(radix, 10)
    if not 2 <= base <= 36:
        raise RuntimeFailure("RangeError: toString() radix must be between 2 and 36")
    if base == 10 or not isinstance(normalize_number(n), int):
        return format_number(n)
    value = int(n)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    out = []
    while value:
        value, rem = divmod(value, base)
        out.append(digits[rem])
    return sign + "".join(reversed(out))


def _to_locale_string(it: Interpreter, n: Any, *_: Any) -> str:
    n = normalize_number(n)
    if isinstance(n, int):
        return f"{n:,}"
    if math.isnan(n) or math.isinf(n):
        return format_number(n)
    return f"{n:,.3f}".rstrip("0").rstrip(".")


_NUMBER_METHODS: dict[str, Callable[..., Any]] = {
    "toFixed": _to_fixed,
    "toString": _number_to_string,
    "toLocaleString": _to_locale_string,
    "valueOf": lambda it, n, *_: n,
}


# ---------------------------------------------------------------------------
# Host namespaces
# ---------------------------------------------------------------------------


def parse_int(value: Any = UNDEFINED, radix: Any = UNDEFINED, *_: Any) -> Any:
    text = to_string(value).strip()
    sign = 1
    if text[:1] in "+-" and text:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    base = _integer(radix, 0)
    if base == 0:
        base = 10
        if text.lower().startswith("0x"):
            base = 16
            text = text[2:]
    elif base == 16 and text.lower().startswith("0x"):
        text = text[2:]
    if not 2 <= base <= 36:
        return math.nan
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"[:base]
    end = 0
    while end < len(text) and text[end].lower() in digits:
        end += 1
    if end == 0:
        return math.nan
    return sign * int(text[:end], base)


_FLOAT_PREFIX = re.compile(r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(value: Any = UNDEFINED, *_: Any) -> Any:
    match = _FLOAT_PREFIX.match(to_string(value).strip())
    if match is None:
        return math.nan
    text = match.group(0)
    if "Infinity" in text:
        return -math.inf if text.startswith("-") else math.inf
    return normalize_number(float(text))


def _js_round(value: Any = UNDEFINED, *_: Any) -> Any:
    number = to_number(value)
    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return number
    return math.floor(number + 0.5)


def _math_extreme(pick: Callable[..., Any], empty: float, *args: Any) -> Any:
    numbers = [to_number(a) for a in args]
    if not numbers:
        return empty
    if any(isinstance(n, float) and math.isnan(n) for n in numbers):
        return math.nan
    return pick(numbers)


def _unary_math(fn: Callable[[float], Any]) -> Callable[..., Any]:
    def apply(value: Any = UNDEFINED, *_: Any) -> Any:
        number = to_number(value)
        try:
            return normalize_number(fn(number))
        except (ValueError, OverflowError):
            return math.nan

    return apply


_SKIP = object()


def to_json_value(value: Any) -> Any:
    if value is UNDEFINED or (callable(value) and not isinstance(value, dict | list)):
        return _SKIP
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            converted = to_json_value(item)
            if converted is not _SKIP:
                out[key] = converted
        return out
    if isinstance(value, list):
        return [None if (c := to_json_value(item)) is _SKIP else c for item in value]
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, Node):
        return {}
    if isinstance(value, JSDate):
        return value.js_get("toISOString")()
    return value


def json_stringify(value: Any = UNDEFINED, replacer: Any = UNDEFINED, space: Any = UNDEFINED, *_: Any) -> Any:
    converted = to_json_value(value)
    if converted is _SKIP:
        return UNDEFINED
    indent: int | str | None = None
    if is_number(space) and space > 0:
        indent = min(int(space), 10)
    elif isinstance(space, str) and space:
        indent = space[:10]
    separators = (",", ": ") if indent is not None else (",", ":")
    return json.dumps(converted, indent=indent, separators=separators, ensure_ascii=False)


def json_parse(text: Any = UNDEFINED, *_: Any) -> Any:
    try:
        return json.loads(to_string(text))
    except ValueError as exc:
        raise JSThrow(make_error("SyntaxError", f"JSON.parse: {exc}")) from exc


def _object_keys(value: Any = UNDEFINED, *_: Any) -> list[str]:
    if isinstance(value, dict):
        return list(value.keys())
    if isinstance(value, list | str):
        return [str(i) for i in range(len(value))]
    if is_nullish(value):
        raise RuntimeFailure("TypeError: Cannot convert undefined or null to object")
    return []


def _object_values(value: Any = UNDEFINED, *_: Any) -> list[Any]:
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, list):
        return list(value)
    if isinstance(value, str):
        return list(value)
    return [] if not is_nullish(value) else _object_keys(value)


def _object_entries(value: Any = UNDEFINED, *_: Any) -> list[list[Any]]:
    keys = _object_keys(value)
    values = _object_values(value)
    return [[k, v] for k, v in zip(keys, values, strict=False)]


def _object_assign(target: Any = UNDEFINED, *sources: Any) -> Any:
    if not isinstance(target, dict):
        raise RuntimeFailure("TypeError: Object.assign target must be an object")
    for source in sources:
        if isinstance(source, dict):
            target.update(source)
    return target


def _object_from_entries(entries: Any = UNDEFINED, *_: Any) -> dict[str, Any]:
    result = {}
    for entry in entries if isinstance(entries, list) else []:
        if isinstance(entry, list) and entry:
            result[to_string(entry[0])] = _arg(entry, 1)
    return result


def _array_constructor(*args: Any) -> list[Any]:
    if len(args) == 1 and is_number(args[0]):
        return [UNDEFINED] * max(int(args[0]), 0)
    return list(args)


def console_namespace() -> dict[str, Any]:
    def emit(level: int) -> Callable[..., Any]:
        def log(*args: Any) -> Any:
            console_logger.log(level, " ".join(to_string(a) for a in args))
            return UNDEFINED

        return log

    return {
        "log": emit(logging.INFO),
        "info": emit(logging.INFO),
        "debug": emit(logging.DEBUG),
        "warn": emit(logging.WARNING),
        "error": emit(logging.ERROR),
    }


# ---------------------------------------------------------------------------
# Property overlay
# ---------------------------------------------------------------------------


def overlay_properties(declared: dict[str, Any], merged: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay merged property values onto an authored `props` literal. Structured
    entries keep their shape and get a new `value`; flat entries are replaced.
    """
    structured = any(is_structured_entry(v) for v in declared.values())
    result = dict(declared)
    for key, value in merged.items():
        current = result.get(key)
        if structured and isinstance(current, dict) and "value" in current:
            result[key] = {**current, "value": value}
        elif structured and key not in result:
            result[key] = {
                "type": infer_property_type(value),
                "value": value,
                "label": format_label(key),
                "editable": True,
            }
        else:
            result[key] = value
    return result


def jsx_text_value(raw: str) -> str:
    """JSX text whitespace rules: lines are trimmed, blank lines dropped."""
    lines = raw.replace("\r\n", "\n").split("\n")
    if len(lines) == 1:
        return html.unescape(raw)
    last_non_empty = max((i for i, line in enumerate(lines) if line.strip(" \t")), default=-1)
    parts: list[str] = []
    for i, line in enumerate(lines):
        text = line.replace("\t", " ")
        if i > 0:
            text = text.lstrip(" ")
        if i < len(lines) - 1:
            text = text.rstrip(" ")
        if text:
            parts.append(text + (" " if i != last_non_empty else ""))
    return html.unescape("".join(parts))


def _parse_number_literal(text: str) -> Any:
    text = text.replace("_", "").rstrip("n")
    lowered = text.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(text, 0)
    if re.fullmatch(r"0[0-7]+", text):
        return int(text, 8)
    # legacy leading-zero literals with an 8 or 9 are decimal
    return normalize_number(float(text))


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


class Interpreter:
    def __init__(
        self,
        program: ParsedProgram,
        properties: dict[str, Any] | None = None,
        navigate: Callable[[str], Any] | None = None,
        max_steps: int = 200_000,
    ) -> None:
        self.program = program
        self.properties = dict(properties or {})
        self.max_steps = max_steps
        self.steps = 0
        self.effects: list[Any] = []
        self.globals = Scope(bindings=self._sandbox_bindings(navigate))
        self.module_scope = Scope(parent=self.globals)
        self._statements: dict[str, Callable[[SyntaxNode, Scope], Any]] = {
            "expression_statement": self._exec_expression_statement,
            "lexical_declaration": self._exec_declaration,
            "variable_declaration": self._exec_declaration,
            "function_declaration": lambda node, scope: None,
            "return_statement": self._exec_return,
            "if_statement": self._exec_if,
            "statement_block": self._exec_block,
            "for_statement": self._exec_for,
            "for_in_statement": self._exec_for_in,
            "while_statement": self._exec_while,
            "do_statement": self._exec_do,
            "break_statement": self._exec_break,
            "continue_statement": self._exec_continue,
            "throw_statement": self._exec_throw,
            "try_statement": self._exec_try,
            "switch_statement": self._exec_switch,
            "export_statement": self._exec_export,
        }
        self._expressions: dict[str, Callable[[SyntaxNode, Scope], Any]] = {
            "identifier": lambda node, scope: scope.lookup(node_text(node)),
            "number": lambda node, scope: _parse_number_literal(node_text(node)),
            "string": lambda node, scope: unescape_string(node_text(node)[1:-1]),
            "template_string": self._eval_template,
            "regex": self._eval_regex,
            "true": lambda node, scope: True,
            "false": lambda node, scope: False,
            "null": lambda node, scope: None,
            "undefined": lambda node, scope: UNDEFINED,
            "this": lambda node, scope: UNDEFINED,
            "array": self._eval_array,
            "object": self._eval_object,
            "member_expression": self._eval_member,
            "subscript_expression": self._eval_subscript,
            "call_expression": self._eval_call,
            "new_expression": self._eval_new,
            "await_expression": self._eval_await,
            "arrow_function": self._eval_function,
            "function_expression": self._eval_function,
            "function": self._eval_function,
            "binary_expression": self._eval_binary,
            "unary_expression": self._eval_unary,
            "update_expression": self._eval_update,
            "assignment_expression": self._eval_assignment,
            "augmented_assignment_expression": self._eval_augmented_assignment,
            "ternary_expression": self._eval_ternary,
            "parenthesized_expression": self._eval_first_child,
            "as_expression": self._eval_first_child,
            "satisfies_expression": self._eval_first_child,
            "non_null_expression": self._eval_first_child,
            "type_assertion": lambda node, scope: self._eval(named_children(node)[-1], scope),
            "sequence_expression": self._eval_sequence,
            "jsx_element": self._eval_jsx_element,
            "jsx_self_closing_element": self._eval_jsx_element,
            "jsx_fragment": self._eval_jsx_element,
        }

    # -- sandbox -----------------------------------------------------------

    def _sandbox_bindings(self, navigate: Callable[[str], Any] | None) -> dict[str, Any]:
        react = {
            "createElement": self.create_element,
            "Fragment": FRAGMENT,
            "useState": self._use_state,
            "useEffect": self._use_effect,
            "useLayoutEffect": self._use_effect,
            "useRef": self._use_ref,
            "useMemo": self._use_memo,
            "useCallback": self._use_callback,
        }
        number = HostFunction(
            "Number",
            lambda value=0, *_: to_number(value),
            members={
                "isInteger": lambda v=UNDEFINED, *_: is_number(v) and float(v).is_integer(),
                "isFinite": lambda v=UNDEFINED, *_: is_number(v) and math.isfinite(v),
                "isNaN": lambda v=UNDEFINED, *_: isinstance(v, float) and math.isnan(v),
                "parseInt": parse_int,
                "parseFloat": parse_float,
                "MAX_SAFE_INTEGER": 2**53 - 1,
                "MIN_SAFE_INTEGER": -(2**53 - 1),
            },
        )
        error = HostFunction(
            "Error",
            lambda message=UNDEFINED, *_: make_error("Error", message),
            construct=lambda message=UNDEFINED, *_: make_error("Error", message),
            instance_check=lambda v: isinstance(v, dict) and "message" in v and "name" in v,
        )
        bindings: dict[str, Any] = {
            "undefined": UNDEFINED,
            "NaN": math.nan,
            "Infinity": math.inf,
            "React": react,
            **react,
            "props": dict(self.properties),
            "navigate": navigate,
            "__navigate": navigate,
            "Math": {
                "PI": math.pi,
                "E": math.e,
                "floor": _unary_math(math.floor),
                "ceil": _unary_math(math.ceil),
                "trunc": _unary_math(math.trunc),
                "abs": _unary_math(abs),
                "sqrt": _unary_math(math.sqrt),
                "sign": _unary_math(lambda x: (x > 0) - (x < 0)),
                "round": _js_round,
                "pow": lambda a=UNDEFINED, b=UNDEFINED, *_: _arithmetic("**", a, b),
                "min": partial(_math_extreme, min, math.inf),
                "max": partial(_math_extreme, max, -math.inf),
                "random": lambda *_: random.random(),
            },
            "JSON": {"stringify": json_stringify, "parse": json_parse},
            "Object": HostFunction(
                "Object",
                lambda value=UNDEFINED, *_: {} if is_nullish(value) else value,
                members={
                    "keys": _object_keys,
                    "values": _object_values,
                    "entries": _object_entries,
                    "assign": _object_assign,
                    "fromEntries": _object_from_entries,
                    "freeze": lambda value=UNDEFINED, *_: value,
                },
                instance_check=lambda v: isinstance(v, dict | list) or isinstance(v, JSFunction),
            ),
            "Array": HostFunction(
                "Array",
                _array_constructor,
                members={
                    "isArray": lambda v=UNDEFINED, *_: isinstance(v, list),
                    "from": self._array_from,
                    "of": lambda *args: list(args),
                },
                construct=_array_constructor,
                instance_check=lambda v: isinstance(v, list),
            ),
            "String": HostFunction(
                "String",
                lambda value="", *_: to_string(value),
                members={"fromCharCode": lambda *codes: "".join(chr(_integer(c, 0)) for c in codes)},
            ),
            "Number": number,
            "Boolean": HostFunction("Boolean", lambda value=False, *_: truthy(value)),
            "Date": HostFunction(
                "Date",
                lambda *_: JSDate().js_string(),
                members={"now": lambda *_: int(datetime.now(UTC).timestamp() * 1000)},
                construct=JSDate,
                instance_check=lambda v: isinstance(v, JSDate),
            ),
            "Error": error,
            "Promise": HostFunction(
                "Promise",
                self._promise_without_new,
                members={
                    "resolve": lambda value=UNDEFINED, *_: self.settle(lambda: value),
                    "reject": lambda reason=UNDEFINED, *_: JSPromise(self, "rejected", reason),
                    "all": self._promise_all,
                },
                construct=self._construct_promise,
                instance_check=lambda v: isinstance(v, JSPromise),
            ),
            "parseInt": parse_int,
            "parseFloat": parse_float,
            "isNaN": lambda value=UNDEFINED, *_: math.isnan(to_number(value)),
            "isFinite": lambda value=UNDEFINED, *_: math.isfinite(to_number(value)),
            "encodeURIComponent": lambda value=UNDEFINED, *_: quote(to_string(value), safe="-_.!~*'()"),
            "console": console_namespace(),
        }
        return bindings

    def _promise_without_new(self, *_: Any) -> Any:
        raise RuntimeFailure("TypeError: Promise constructor cannot be invoked without 'new'")

    def _construct_promise(self, executor: Any = UNDEFINED, *_: Any) -> JSPromise:
        if not callable(executor):
            raise RuntimeFailure("TypeError: Promise resolver is not a function")
        outcome: list[tuple[str, Any]] = []

        def resolve(value: Any = UNDEFINED, *_: Any) -> None:
            if not outcome:
                outcome.append(("fulfilled", value))

        def reject(reason: Any = UNDEFINED, *_: Any) -> None:
            if not outcome:
                outcome.append(("rejected", reason))

        try:
            self.call(executor, [resolve, reject])
        except JSThrow as exc:
            reject(exc.value)
        if not outcome:
            return JSPromise(self, "pending")
        state, value = outcome[0]
        if state == "fulfilled" and isinstance(value, JSPromise):
            return value
        return JSPromise(self, state, value)

    def _promise_all(self, items: Any = UNDEFINED, *_: Any) -> JSPromise:
        if not isinstance(items, list):
            raise RuntimeFailure("TypeError: Promise.all expects an array")
        values = []
        for item in items:
            if not isinstance(item, JSPromise):
                values.append(item)
            elif item.state == "fulfilled":
                values.append(item.value)
            else:
                return item
        return JSPromise(self, "fulfilled", values)

    def _array_from(self, value: Any = UNDEFINED, fn: Any = UNDEFINED, *_: Any) -> list[Any]:
        if isinstance(value, list | str):
            items = list(value)
        elif isinstance(value, dict) and is_number(value.get("length")):
            items = [UNDEFINED] * max(int(value["length"]), 0)
        else:
            items = []
        if fn is UNDEFINED:
            return items
        return [self.call(fn, [item, i]) for i, item in enumerate(items)]

    # -- hooks --------------------------------------------------------------

    def _use_state(self, initial: Any = UNDEFINED, *_: Any) -> list[Any]:
        value = self.call(initial, []) if callable(initial) else initial

        def set_state(*_args: Any) -> Any:
            logger.debug("interpreter: state update ignored in static preview")
            return UNDEFINED

        return [value, set_state]

    def _use_effect(self, effect: Any = UNDEFINED, *_: Any) -> Any:
        self.effects.append(effect)
        return UNDEFINED

    def _use_ref(self, initial: Any = UNDEFINED, *_: Any) -> dict[str, Any]:
        return {"current": initial}

    def _use_memo(self, factory: Any = UNDEFINED, *_: Any) -> Any:
        return self.call(factory, [])

    def _use_callback(self, fn: Any = UNDEFINED, *_: Any) -> Any:
        return fn

    # -- entry points -------------------------------------------------------

    def _tick(self, node: SyntaxNode) -> None:
        self.steps += 1
        if self.steps > self.max_steps:
            row, column = node.start_point[0], node.start_point[1]
            raise BudgetExceeded(
                f"RangeError: evaluation exceeded {self.max_steps} steps",
                detail=f"Stopped at line {row + 1}, column {column + 1}",
            )

    def run(self) -> Scope:
        """Execute the module's top-level statements."""
        self._exec_statements(named_children(self.program.root), self.module_scope)
        return self.module_scope

    def component(self, name: str) -> Any:
        """The exported component, else the first capitalized top-level function."""
        value = self.module_scope.bindings.get(name, UNDEFINED)
        if callable(value):
            return value
        for candidate in self.program.top_level_names:
            value = self.module_scope.bindings.get(candidate)
            if candidate[:1].isupper() and isinstance(value, JSFunction):
                return value
        raise TransformFailure(f"Component '{name}' is not defined", detail="No component function found in source")

    def render(self, name: str) -> list[Node | str]:
        """Run the module and render its component with the merged properties."""
        try:
            self.run()
            component = self.component(name)
            return normalize_children(self.create_element(component, dict(self.properties)))
        except JSThrow as exc:
            raise RuntimeFailure(f"Uncaught {exc}") from exc
        except RecursionError as exc:
            raise RuntimeFailure("RangeError: Maximum call stack size exceeded") from exc
        except ComponentFailure:
            raise
        except Exception as exc:
            # a host-side fault must still end in the inline placeholder
            logger.exception("interpreter: host error while rendering %s", name)
            raise RuntimeFailure(f"InternalError: {exc}", detail=repr(exc)) from exc

    def create_element(self, tag: Any = UNDEFINED, props: Any = None, *children: Any) -> Any:
        if is_nullish(props):
            props = {}
        if not isinstance(props, dict):
            raise RuntimeFailure("TypeError: element props must be an object")
        if isinstance(tag, str):
            return build_node(tag, props, *children)
        if callable(tag):
            merged = dict(props)
            if children:
                merged["children"] = children[0] if len(children) == 1 else list(children)
            return self.call(tag, [merged])
        raise RuntimeFailure(
            f"Element type is invalid: expected a string or a component but got {type_of(tag)}"
        )

    def call(self, fn: Any, args: list[Any]) -> Any:
        if isinstance(fn, JSFunction):
            return self.call_function(fn, args)
        if not callable(fn):
            raise RuntimeFailure(f"TypeError: {to_string(fn)} is not a function")
        try:
            return fn(*args)
        except (ComponentFailure, JSThrow, _Return, _Break, _Continue):
            raise
        except (TypeError, ValueError, KeyError, IndexError, ZeroDivisionError, OverflowError, AttributeError) as exc:
            raise RuntimeFailure(f"TypeError: {exc}") from exc

    def call_function(self, fn: JSFunction, args: list[Any]) -> Any:
        if fn.is_async:
            return self.settle(lambda: self._invoke(fn, args))
        return self._invoke(fn, args)

    def settle(self, thunk: Callable[[], Any]) -> JSPromise:
        """Run `thunk` now; its result or throw becomes a settled promise."""
        try:
            value = thunk()
        except BudgetExceeded:
            raise
        except JSThrow as exc:
            return JSPromise(self, "rejected", exc.value)
        except RuntimeFailure as exc:
            return JSPromise(self, "rejected", make_error("Error", exc.message))
        if isinstance(value, JSPromise):
            return value
        return JSPromise(self, "fulfilled", value)

    def _invoke(self, fn: JSFunction, args: list[Any]) -> Any:
        node = fn.node
        scope = Scope(fn.scope)
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            self._bind_parameters(parameters, args, scope)
        else:
            single = node.child_by_field_name("parameter")
            if single is not None:
                self._bind_pattern(single, _arg(args, 0), scope, "let")
        body = node.child_by_field_name("body")
        if body is None:
            return UNDEFINED
        if body.type != "statement_block":
            return self._eval(body, scope)
        try:
            self._exec_statements(named_children(body), scope)
        except _Return as result:
            return result.value
        return UNDEFINED

    # -- members --------------------------------------------------------------

    def get_member(self, obj: Any, key: Any) -> Any:
        if is_nullish(obj):
            raise RuntimeFailure(
                f"TypeError: Cannot read properties of {to_string(obj)} (reading '{to_string(key)}')"
            )
        if isinstance(obj, dict):
            name = key if isinstance(key, str) else to_string(key)
            if name in obj:
                return obj[name]
            if name == "hasOwnProperty":
                return lambda k=UNDEFINED, *_: to_string(k) in obj
            return UNDEFINED
        if isinstance(obj, list):
            if isinstance(key, str) and key.isdigit():
                key = int(key)
            if isinstance(key, int):
                return obj[key] if 0 <= key < len(obj) else UNDEFINED
            if key == "length":
                return len(obj)
            method = _ARRAY_METHODS.get(key)
            return partial(method, self, obj) if method else UNDEFINED
        if isinstance(obj, str):
            if isinstance(key, str) and key.isdigit():
                key = int(key)
            if isinstance(key, int):
                return obj[key] if 0 <= key < len(obj) else UNDEFINED
            if key == "length":
                return len(obj)
            method = _STRING_METHODS.get(key)
            return partial(method, self, obj) if method else UNDEFINED
        if isinstance(obj, bool):
            return (lambda *_: to_string(obj)) if key in ("toString", "valueOf") else UNDEFINED
        if is_number(obj):
            method = _NUMBER_METHODS.get(key) if isinstance(key, str) else None
            return partial(method, self, obj) if method else UNDEFINED
        if isinstance(obj, Node):
            if key == "props":
                return {**obj.props, "children": obj.children}
            if key == "type":
                return obj.tag
            return UNDEFINED
        js_get = getattr(obj, "js_get", None)
        if js_get is not None:
            return js_get(key)
        return UNDEFINED

    def set_member(self, obj: Any, key: Any, value: Any) -> None:
        if is_nullish(obj):
            raise RuntimeFailure(
                f"TypeError: Cannot set properties of {to_string(obj)} (setting '{to_string(key)}')"
            )
        if isinstance(obj, dict):
            obj[key if isinstance(key, str) else to_string(key)] = value
            return
        if isinstance(obj, list):
            if key == "length":
                size = max(_integer(value, 0), 0)
                del obj[size:]
                obj.extend([UNDEFINED] * (size - len(obj)))
                return
            if isinstance(key, str) and key.isdigit():
                key = int(key)
            if isinstance(key, int) and key >= 0:
                if key >= len(obj):
                    obj.extend([UNDEFINED] * (key + 1 - len(obj)))
                obj[key] = value
                return
        # assignments to primitives are silently dropped, as in sloppy scripts

    # -- statements -----------------------------------------------------------

    def _hoist(self, statements: list[SyntaxNode], scope: Scope) -> None:
        for statement in statements:
            target = statement
            if statement.type == "export_statement":
                target = statement.child_by_field_name("declaration") or statement
            if target.type == "function_declaration":
                name = node_text(target.child_by_field_name("name"))
                scope.declare(name, JSFunction(self, target, scope, name))

    def _exec_statements(self, statements: list[SyntaxNode], scope: Scope) -> None:
        self._hoist(statements, scope)
        for statement in statements:
            self._exec(statement, scope)

    def _exec(self, node: SyntaxNode, scope: Scope) -> None:
        self._tick(node)
        if node.type in _NO_OP_STATEMENTS:
            return
        handler = self._statements.get(node.type)
        if handler is None:
            raise RuntimeFailure(f"SyntaxError: unsupported statement '{node.type}'", detail=node_text(node)[:200])
        handler(node, scope)

    def _exec_block(self, node: SyntaxNode, scope: Scope) -> None:
        self._exec_statements(named_children(node), Scope(scope))

    def _exec_body(self, node: SyntaxNode, scope: Scope) -> None:
        if node.type == "statement_block":
            self._exec_block(node, scope)
        else:
            self._exec(node, scope)

    def _exec_expression_statement(self, node: SyntaxNode, scope: Scope) -> None:
        for child in named_children(node):
            self._eval(child, scope)

    def _exec_declaration(self, node: SyntaxNode, scope: Scope) -> None:
        kind = node.children[0].type if node.type == "lexical_declaration" else "var"
        for declarator in named_children(node):
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value_node = declarator.child_by_field_name("value")
            value = UNDEFINED if value_node is None else self._eval(value_node, scope)
            if name_node.type == "identifier":
                name = node_text(name_node)
                if isinstance(value, JSFunction) and not value.name:
                    value.name = name
                if name in PROPERTY_BINDINGS and value_node is not None and value_node.type == "object":
                    value = overlay_properties(value, self.properties)
            self._bind_pattern(name_node, value, scope, kind)

    def _exec_return(self, node: SyntaxNode, scope: Scope) -> None:
        children = named_children(node)
        raise _Return(self._eval(children[0], scope) if children else UNDEFINED)

    def _exec_if(self, node: SyntaxNode, scope: Scope) -> None:
        if truthy(self._eval(node.child_by_field_name("condition"), scope)):
            self._exec_body(node.child_by_field_name("consequence"), scope)
            return
        alternative = node.child_by_field_name("alternative")
        if alternative is not None:
            branch = named_children(alternative)[0] if alternative.type == "else_clause" else alternative
            self._exec_body(branch, scope)

    def _condition(self, node: SyntaxNode | None, scope: Scope) -> bool:
        if node is None or node.type in ("empty_statement", ";"):
            return True
        if node.type == "expression_statement":
            children = named_children(node)
            return truthy(self._eval(children[0], scope)) if children else True
        return truthy(self._eval(node, scope))

    def _loop_body(self, body: SyntaxNode, scope: Scope) -> bool:
        """Run one iteration; False means break."""
        self._tick(body)
        try:
            self._exec_body(body, scope)
        except _Break:
            return False
        except _Continue:
            pass
        return True

    def _exec_for(self, node: SyntaxNode, scope: Scope) -> None:
        loop_scope = Scope(scope)
        initializer = node.child_by_field_name("initializer")
        if initializer is not None and initializer.type != ";":
            if initializer.type in self._statements or initializer.type in _NO_OP_STATEMENTS:
                self._exec(initializer, loop_scope)
            else:
                self._eval(initializer, loop_scope)
        condition = node.child_by_field_name("condition")
        increment = node.child_by_field_name("increment")
        body = node.child_by_field_name("body")
        while self._condition(condition, loop_scope):
            if not self._loop_body(body, loop_scope):
                break
            if increment is not None:
                self._eval(increment, loop_scope)

    def _exec_for_in(self, node: SyntaxNode, scope: Scope) -> None:
        operator = node.child_by_field_name("operator")
        kind_node = node.child_by_field_name("kind")
        left = node.child_by_field_name("left")
        right = self._eval(node.child_by_field_name("right"), scope)
        body = node.child_by_field_name("body")
        if operator is not None and node_text(operator) == "in":
            if isinstance(right, dict):
                items: list[Any] = list(right.keys())
            elif isinstance(right, list | str):
                items = [str(i) for i in range(len(right))]
            else:
                items = []
        else:
            if isinstance(right, list | str):
                items = list(right)
            else:
                raise RuntimeFailure(f"TypeError: {type_of(right)} is not iterable")
        kind = node_text(kind_node) if kind_node is not None else "assign"
        for item in items:
            iteration = Scope(scope)
            self._bind_pattern(left, item, iteration, kind)
            if not self._loop_body(body, iteration):
                break

    def _exec_while(self, node: SyntaxNode, scope: Scope) -> None:
        condition = node.child_by_field_name("condition")
        body = node.child_by_field_name("body")
        while truthy(self._eval(condition, scope)):
            if not self._loop_body(body, scope):
                break

    def _exec_do(self, node: SyntaxNode, scope: Scope) -> None:
        condition = node.child_by_field_name("condition")
        body = node.child_by_field_name("body")
        while True:
            if not self._loop_body(body, scope):
                break
            if not truthy(self._eval(condition, scope)):
                break

    def _exec_break(self, node: SyntaxNode, scope: Scope) -> None:
        raise _Break()

    def _exec_continue(self, node: SyntaxNode, scope: Scope) -> None:
        raise _Continue()

    def _exec_throw(self, node: SyntaxNode, scope: Scope) -> None:
        raise JSThrow(self._eval(named_children(node)[0], scope))

    def _exec_try(self, node: SyntaxNode, scope: Scope) -> None:
        handler = node.child_by_field_name("handler")
        finalizer = node.child_by_field_name("finalizer")
        try:
            self._exec_block(node.child_by_field_name("body"), scope)
        except (JSThrow, RuntimeFailure) as exc:
            if handler is None or isinstance(exc, BudgetExceeded):
                raise
            thrown = exc.value if isinstance(exc, JSThrow) else make_error("Error", exc.message)
            catch_scope = Scope(scope)
            parameter = handler.child_by_field_name("parameter")
            if parameter is not None:
                self._bind_pattern(parameter, thrown, catch_scope, "let")
            self._exec_block(handler.child_by_field_name("body"), catch_scope)
        finally:
            if finalizer is not None:
                self._exec_block(finalizer.child_by_field_name("body"), scope)

    def _exec_switch(self, node: SyntaxNode, scope: Scope) -> None:
        discriminant = self._eval(node.child_by_field_name("value"), scope)
        cases = [c for c in named_children(node.child_by_field_name("body")) if c.type in ("switch_case", "switch_default")]
        start = None
        for index, case in enumerate(cases):
            if case.type == "switch_case" and strict_equals(
                self._eval(case.child_by_field_name("value"), scope), discriminant
            ):
                start = index
                break
        if start is None:
            start = next((i for i, c in enumerate(cases) if c.type == "switch_default"), None)
        if start is None:
            return
        switch_scope = Scope(scope)
        try:
            for case in cases[start:]:
                value_node = case.child_by_field_name("value")
                statements = [
                    c for c in named_children(case)
                    if value_node is None or (c.start_byte, c.end_byte) != (value_node.start_byte, value_node.end_byte)
                ]
                self._exec_statements(statements, switch_scope)
        except _Break:
            pass

    def _exec_export(self, node: SyntaxNode, scope: Scope) -> None:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._exec(declaration, scope)
            return
        value = node.child_by_field_name("value")
        if value is not None:
            self._eval(value, scope)

    # -- patterns -------------------------------------------------------------

    def _bind_name(self, name: str, value: Any, scope: Scope, kind: str) -> None:
        if kind == "assign":
            scope.assign(name, value)
        else:
            scope.declare(name, value, constant=kind == "const")

    def _bind_parameters(self, parameters: SyntaxNode, args: list[Any], scope: Scope) -> None:
        index = 0
        for parameter in named_children(parameters):
            if parameter.type in ("required_parameter", "optional_parameter"):
                pattern = parameter.child_by_field_name("pattern")
                default = parameter.child_by_field_name("value")
            else:
                pattern, default = parameter, None
            if pattern is None:
                continue
            if pattern.type == "this":
                continue
            if pattern.type == "rest_pattern":
                self._bind_pattern(named_children(pattern)[0], list(args[index:]), scope, "let")
                break
            value = _arg(args, index)
            if value is UNDEFINED and default is not None:
                value = self._eval(default, scope)
            self._bind_pattern(pattern, value, scope, "let")
            index += 1

    def _bind_pattern(self, pattern: SyntaxNode, value: Any, scope: Scope, kind: str) -> None:
        kind_type = pattern.type
        if kind_type in ("identifier", "shorthand_property_identifier_pattern"):
            self._bind_name(node_text(pattern), value, scope, kind)
        elif kind_type == "object_pattern":
            self._bind_object_pattern(pattern, value, scope, kind)
        elif kind_type == "array_pattern":
            self._bind_array_pattern(pattern, value, scope, kind)
        elif kind_type in ("assignment_pattern", "object_assignment_pattern"):
            if value is UNDEFINED:
                value = self._eval(pattern.child_by_field_name("right"), scope)
            self._bind_pattern(pattern.child_by_field_name("left"), value, scope, kind)
        elif kind_type == "rest_pattern":
            self._bind_pattern(named_children(pattern)[0], value, scope, kind)
        elif kind_type in ("member_expression", "subscript_expression") and kind == "assign":
            obj, key = self._reference_parts(pattern, scope)
            self.set_member(obj, key, value)
        elif kind_type == "parenthesized_expression":
            self._bind_pattern(named_children(pattern)[0], value, scope, kind)
        else:
            raise RuntimeFailure(f"SyntaxError: unsupported binding pattern '{kind_type}'")

    def _bind_object_pattern(self, pattern: SyntaxNode, value: Any, scope: Scope, kind: str) -> None:
        if is_nullish(value):
            raise RuntimeFailure(f"TypeError: Cannot destructure '{to_string(value)}' as it is {to_string(value)}.")
        used: list[str] = []
        for child in named_children(pattern):
            if child.type == "shorthand_property_identifier_pattern":
                key = node_text(child)
                used.append(key)
                self._bind_name(key, self.get_member(value, key), scope, kind)
            elif child.type == "pair_pattern":
                key = self._property_key(child.child_by_field_name("key"), scope)
                used.append(key)
                self._bind_pattern(child.child_by_field_name("value"), self.get_member(value, key), scope, kind)
            elif child.type == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                key = node_text(left)
                used.append(key)
                current = self.get_member(value, key)
                if current is UNDEFINED:
                    current = self._eval(child.child_by_field_name("right"), scope)
                self._bind_pattern(left, current, scope, kind)
            elif child.type == "rest_pattern":
                rest = {k: v for k, v in value.items() if k not in used} if isinstance(value, dict) else {}
                self._bind_pattern(named_children(child)[0], rest, scope, kind)

    def _bind_array_pattern(self, pattern: SyntaxNode, value: Any, scope: Scope, kind: str) -> None:
        if isinstance(value, str):
            value = list(value)
        if not isinstance(value, list):
            raise RuntimeFailure(f"TypeError: {type_of(value)} is not iterable")
        index = 0
        for child in pattern.children:
            if child.type == ",":
                index += 1
            elif child.is_named and child.type != "comment":
                if child.type == "rest_pattern":
                    self._bind_pattern(named_children(child)[0], list(value[index:]), scope, kind)
                    return
                self._bind_pattern(child, _arg(value, index), scope, kind)

    # -- expressions ----------------------------------------------------------

    def _eval(self, node: SyntaxNode, scope: Scope) -> Any:
        self._tick(node)
        handler = self._expressions.get(node.type)
        if handler is None:
            row, column = node.start_point[0], node.start_point[1]
            raise RuntimeFailure(
                f"SyntaxError: unsupported expression '{node.type}' at line {row + 1}, column {column + 1}",
                detail=node_text(node)[:200],
            )
        return handler(node, scope)

    def _eval_first_child(self, node: SyntaxNode, scope: Scope) -> Any:
        return self._eval(named_children(node)[0], scope)

    def _eval_sequence(self, node: SyntaxNode, scope: Scope) -> Any:
        result = UNDEFINED
        for child in named_children(node):
            result = self._eval(child, scope)
        return result

    def _eval_template(self, node: SyntaxNode, scope: Scope) -> str:
        source = self.program.source
        parts: list[str] = []
        cursor = node.start_byte + 1
        for child in node.children:
            if child.type != "template_substitution":
                continue
            parts.append(unescape_string(source[cursor : child.start_byte].decode("utf-8")))
            parts.append(to_string(self._eval(named_children(child)[0], scope)))
            cursor = child.end_byte
        parts.append(unescape_string(source[cursor : node.end_byte - 1].decode("utf-8")))
        return "".join(parts)

    def _eval_regex(self, node: SyntaxNode, scope: Scope) -> JSRegExp:
        pattern = node.child_by_field_name("pattern")
        flags = node.child_by_field_name("flags")
        return JSRegExp(node_text(pattern) if pattern else "", node_text(flags) if flags else "")

    def _spread(self, value: Any) -> list[Any]:
        if isinstance(value, list | str):
            return list(value)
        raise RuntimeFailure(f"TypeError: {type_of(value)} is not iterable")

    def _eval_array(self, node: SyntaxNode, scope: Scope) -> list[Any]:
        items: list[Any] = []
        for child in named_children(node):
            if child.type == "spread_element":
                items.extend(self._spread(self._eval(named_children(child)[0], scope)))
            else:
                items.append(self._eval(child, scope))
        return items

    def _property_key(self, key: SyntaxNode, scope: Scope) -> str:
        if key.type == "string":
            return unescape_string(node_text(key)[1:-1])
        if key.type == "number":
            return format_number(_parse_number_literal(node_text(key)))
        if key.type == "computed_property_name":
            return to_string(to_property_key(self._eval(named_children(key)[0], scope)))
        return node_text(key)

    def _eval_object(self, node: SyntaxNode, scope: Scope) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for child in named_children(node):
            if child.type == "pair":
                key = self._property_key(child.child_by_field_name("key"), scope)
                value = self._eval(child.child_by_field_name("value"), scope)
                if isinstance(value, JSFunction) and not value.name:
                    value.name = key
                result[key] = value
            elif child.type == "shorthand_property_identifier":
                name = node_text(child)
                result[name] = scope.lookup(name)
            elif child.type == "spread_element":
                spread = self._eval(named_children(child)[0], scope)
                if isinstance(spread, dict):
                    result.update(spread)
                elif isinstance(spread, list | str):
                    result.update({str(i): v for i, v in enumerate(spread)})
            elif child.type == "method_definition":
                key = self._property_key(child.child_by_field_name("name"), scope)
                result[key] = JSFunction(self, child, scope, key)
            else:
                raise RuntimeFailure(f"SyntaxError: unsupported object member '{child.type}'")
        return result

    @staticmethod
    def _is_optional(node: SyntaxNode) -> bool:
        return any(child.type in ("optional_chain", "?.") for child in node.children)

    def _reference_parts(self, node: SyntaxNode, scope: Scope) -> tuple[Any, Any]:
        obj = self._eval(node.child_by_field_name("object"), scope)
        if node.type == "member_expression":
            return obj, node_text(node.child_by_field_name("property"))
        return obj, to_property_key(self._eval(node.child_by_field_name("index"), scope))

    def _eval_member(self, node: SyntaxNode, scope: Scope) -> Any:
        obj = self._eval(node.child_by_field_name("object"), scope)
        if is_nullish(obj) and self._is_optional(node):
            return UNDEFINED
        return self.get_member(obj, node_text(node.child_by_field_name("property")))

    def _eval_subscript(self, node: SyntaxNode, scope: Scope) -> Any:
        obj = self._eval(node.child_by_field_name("object"), scope)
        if is_nullish(obj) and self._is_optional(node):
            return UNDEFINED
        return self.get_member(obj, to_property_key(self._eval(node.child_by_field_name("index"), scope)))

    def _eval_arguments(self, node: SyntaxNode | None, scope: Scope) -> list[Any]:
        if node is None:
            return []
        args: list[Any] = []
        for child in named_children(node):
            if child.type == "spread_element":
                args.extend(self._spread(self._eval(named_children(child)[0], scope)))
            else:
                args.append(self._eval(child, scope))
        return args

    def _eval_call(self, node: SyntaxNode, scope: Scope) -> Any:
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee.type == "import":
            raise RuntimeFailure("TypeError: dynamic import is not available in the preview")
        if arguments is not None and arguments.type == "template_string":
            raise RuntimeFailure("SyntaxError: tagged templates are not supported")
        if callee.type in ("member_expression", "subscript_expression"):
            obj = self._eval(callee.child_by_field_name("object"), scope)
            if is_nullish(obj) and self._is_optional(callee):
                return UNDEFINED
            if callee.type == "member_expression":
                key: Any = node_text(callee.child_by_field_name("property"))
            else:
                key = to_property_key(self._eval(callee.child_by_field_name("index"), scope))
            fn = self.get_member(obj, key)
        else:
            fn = self._eval(callee, scope)
        if is_nullish(fn) and self._is_optional(node):
            return UNDEFINED
        args = self._eval_arguments(arguments, scope)
        if not callable(fn):
            raise RuntimeFailure(f"TypeError: {node_text(callee)} is not a function")
        return self.call(fn, args)

    def _eval_new(self, node: SyntaxNode, scope: Scope) -> Any:
        constructor = self._eval(node.child_by_field_name("constructor"), scope)
        args = self._eval_arguments(node.child_by_field_name("arguments"), scope)
        construct = getattr(constructor, "construct", None)
        if construct is None:
            raise RuntimeFailure(f"TypeError: {node_text(node.child_by_field_name('constructor'))} is not a constructor")
        return self.call(construct, args)

    def _eval_await(self, node: SyntaxNode, scope: Scope) -> Any:
        value = self._eval(named_children(node)[0], scope)
        if not isinstance(value, JSPromise):
            return value
        if value.state == "pending":
            raise RuntimeFailure("await on a promise that never settles")
        if value.state == "rejected":
            raise JSThrow(value.value)
        return value.value

    def _eval_function(self, node: SyntaxNode, scope: Scope) -> JSFunction:
        name_node = node.child_by_field_name("name")
        return JSFunction(self, node, scope, node_text(name_node) if name_node is not None else "")

    def _eval_binary(self, node: SyntaxNode, scope: Scope) -> Any:
        op = node.child_by_field_name("operator").type
        left = self._eval(node.child_by_field_name("left"), scope)
        if op == "&&":
            return self._eval(node.child_by_field_name("right"), scope) if truthy(left) else left
        if op == "||":
            return left if truthy(left) else self._eval(node.child_by_field_name("right"), scope)
        if op == "??":
            return self._eval(node.child_by_field_name("right"), scope) if is_nullish(left) else left
        right = self._eval(node.child_by_field_name("right"), scope)
        return binary_operation(op, left, right)

    def _eval_unary(self, node: SyntaxNode, scope: Scope) -> Any:
        op = node.child_by_field_name("operator").type
        argument = node.child_by_field_name("argument")
        if op == "typeof":
            if argument.type == "identifier" and not scope.has(node_text(argument)):
                return "undefined"
            return type_of(self._eval(argument, scope))
        if op == "delete":
            if argument.type in ("member_expression", "subscript_expression"):
                obj, key = self._reference_parts(argument, scope)
                if isinstance(obj, dict):
                    obj.pop(to_string(key), None)
            return True
        value = self._eval(argument, scope)
        if op == "!":
            return not truthy(value)
        if op == "-":
            return normalize_number(-to_number(value))
        if op == "+":
            return to_number(value)
        if op == "~":
            return ~_int32(value)
        if op == "void":
            return UNDEFINED
        raise RuntimeFailure(f"SyntaxError: unsupported operator {op}")

    def _read(self, target: SyntaxNode, scope: Scope) -> tuple[Any, Callable[[Any], None]]:
        """Current value of an assignable target, plus a writer for it."""
        if target.type == "identifier":
            name = node_text(target)
            return scope.lookup(name), lambda value: scope.assign(name, value)
        if target.type in ("member_expression", "subscript_expression"):
            obj, key = self._reference_parts(target, scope)
            return self.get_member(obj, key), lambda value: self.set_member(obj, key, value)
        if target.type in ("parenthesized_expression", "non_null_expression"):
            return self._read(named_children(target)[0], scope)
        raise RuntimeFailure(f"SyntaxError: invalid assignment target '{target.type}'")

    def _eval_update(self, node: SyntaxNode, scope: Scope) -> Any:
        op = node.child_by_field_name("operator").type
        current, write = self._read(node.child_by_field_name("argument"), scope)
        old = to_number(current)
        new = normalize_number(old + 1 if op == "++" else old - 1)
        write(new)
        prefix = node.children[0].type in ("++", "--")
        return new if prefix else old

    def _eval_assignment(self, node: SyntaxNode, scope: Scope) -> Any:
        left = node.child_by_field_name("left")
        value = self._eval(node.child_by_field_name("right"), scope)
        if left.type == "identifier":
            if isinstance(value, JSFunction) and not value.name:
                value.name = node_text(left)
            scope.assign(node_text(left), value)
        elif left.type in ("member_expression", "subscript_expression"):
            obj, key = self._reference_parts(left, scope)
            self.set_member(obj, key, value)
        else:
            self._bind_pattern(left, value, scope, "assign")
        return value

    def _eval_augmented_assignment(self, node: SyntaxNode, scope: Scope) -> Any:
        op = node_text(node.child_by_field_name("operator"))[:-1]
        current, write = self._read(node.child_by_field_name("left"), scope)
        right = node.child_by_field_name("right")
        if op == "&&":
            if not truthy(current):
                return current
            value = self._eval(right, scope)
        elif op == "||":
            if truthy(current):
                return current
            value = self._eval(right, scope)
        elif op == "??":
            if not is_nullish(current):
                return current
            value = self._eval(right, scope)
        else:
            value = binary_operation(op, current, self._eval(right, scope))
        write(value)
        return value

    def _eval_ternary(self, node: SyntaxNode, scope: Scope) -> Any:
        if truthy(self._eval(node.child_by_field_name("condition"), scope)):
            return self._eval(node.child_by_field_name("consequence"), scope)
        return self._eval(node.child_by_field_name("alternative"), scope)

    # -- JSX ------------------------------------------------------------------

    def _jsx_tag(self, name: SyntaxNode, scope: Scope) -> Any:
        text = node_text(name)
        if name.type == "identifier":
            if text[:1].islower() or "-" in text:
                return text
            return scope.lookup(text)
        if name.type == "jsx_namespace_name":
            return text
        if name.type == "nested_identifier":
            head, *rest = text.split(".")
            value = scope.lookup(head)
            for part in rest:
                value = self.get_member(value, part)
            return value
        return self._eval(name, scope)

    def _jsx_attributes(self, opening: SyntaxNode, scope: Scope) -> dict[str, Any]:
        props: dict[str, Any] = {}
        for child in named_children(opening):
            if child.type == "jsx_attribute":
                parts = named_children(child)
                name = node_text(parts[0])
                if len(parts) < 2:
                    props[name] = True
                    continue
                value_node = parts[1]
                if value_node.type == "string":
                    props[name] = html.unescape(node_text(value_node)[1:-1])
                elif value_node.type == "jsx_expression":
                    inner = named_children(value_node)
                    props[name] = self._eval(inner[0], scope) if inner else UNDEFINED
                else:
                    props[name] = self._eval(value_node, scope)
            elif child.type == "jsx_expression":
                inner = named_children(child)
                if inner and inner[0].type == "spread_element":
                    spread = self._eval(named_children(inner[0])[0], scope)
                    if isinstance(spread, dict):
                        props.update(spread)
        return props

    def _eval_jsx_element(self, node: SyntaxNode, scope: Scope) -> Any:
        if node.type == "jsx_self_closing_element":
            opening: SyntaxNode | None = node
            body: list[SyntaxNode] = []
        elif node.type == "jsx_fragment":
            opening = None
            body = named_children(node)
        else:
            opening = node.child_by_field_name("open_tag")
            if opening is None:
                opening = next((c for c in node.named_children if c.type == "jsx_opening_element"), None)
            body = [c for c in named_children(node) if c.type not in ("jsx_opening_element", "jsx_closing_element")]
        tag: Any = FRAGMENT
        props: dict[str, Any] = {}
        if opening is not None:
            name = opening.child_by_field_name("name")
            if name is not None:
                tag = self._jsx_tag(name, scope)
            props = self._jsx_attributes(opening, scope)
        children: list[Any] = []
        for child in body:
            if child.type == "jsx_text":
                text = jsx_text_value(node_text(child))
                if text:
                    children.append(text)
            elif child.type == "html_character_reference":
                children.append(html.unescape(node_text(child)))
            elif child.type == "jsx_expression":
                inner = named_children(child)
                if not inner:
                    continue
                if inner[0].type == "spread_element":
                    children.extend(self._spread(self._eval(named_children(inner[0])[0], scope)))
                else:
                    children.append(self._eval(inner[0], scope))
            else:
                children.append(self._eval(child, scope))
        return self.create_element(tag, props, *children)
