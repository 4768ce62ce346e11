"""
Small JSON encoder/decoder for the shapes the HTTP API exchanges.

This is not a general JSON implementation. The decoder reads one object
(outer braces optional) whose values are strings, numbers, true/false/null,
nested objects, arrays of objects or arrays of scalars. It rejects arrays of
arrays, ``\\u`` escapes and exponent notation. The encoder escapes only
backslash, double quote and newline.

Strict decoding raises UnsupportedJSON at the first token outside that
subset. Lenient decoding (``strict=False``) logs the problem and returns
whatever was read up to that point, and keeps unquoted bare words as
strings.
"""

import logging
import math
import re
from collections.abc import Mapping
from decimal import Decimal
from functools import partial

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\r\n"
_SCALAR_STOP = ",:}] \t\r\n"
_LITERALS = {"true": True, "false": False, "null": None}
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?")
_EXPONENT = re.compile(r"-?\d+(?:\.\d+)?[eE][+-]?\d+")
_ESCAPES_IN = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}


class UnsupportedJSON(ValueError):
    """Input (or a value to encode) falls outside the supported JSON subset."""

    def __init__(self, message: str, position=None):
        if position is not None:
            super().__init__(f"{message} (at offset {position})")
        else:
            super().__init__(message)
        self.message = message
        self.position = position


# ---- encoding --------------------------------------------------------------

def encode(value) -> str:
    """Encode None, bools, numbers, strings, mappings and flat sequences."""
    return _encode(value, in_array=False)


def _encode(value, in_array):
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _number(value)
    if isinstance(value, str):
        return '"' + _escape(value) + '"'
    if isinstance(value, Mapping):
        members = []
        for k, v in value.items():
            if not isinstance(k, str):
                raise UnsupportedJSON(f"object keys must be strings, got {type(k).__name__}")
            members.append('"' + _escape(k) + '":' + _encode(v, in_array=False))
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        if in_array:
            raise UnsupportedJSON("arrays of arrays are not supported")
        return "[" + ",".join(_encode(v, in_array=True) for v in value) + "]"
    raise UnsupportedJSON(f"cannot encode {type(value).__name__}")


def _number(value) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedJSON(f"cannot encode {value!r}")
        text = repr(value)
        if "e" in text or "E" in text:
            text = format(Decimal(text), "f")
        return text
    if not value.is_finite():
        raise UnsupportedJSON(f"cannot encode {value!r}")
    return format(value, "f")


def _escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


# ---- decoding --------------------------------------------------------------

def decode_object(text: str, strict: bool = True) -> dict:
    """Decode one JSON object into a dict, keeping key order."""
    result = {}
    try:
        _Parser(text, strict).parse_document(result)
    except UnsupportedJSON as e:
        if strict:
            raise
        logger.warning("Stopped decoding request body early: %s", e)
    return result


def find_matching_bracket(text: str, open_index: int) -> int:
    """
    Index of the bracket closing the one at ``open_index``, or -1.

    Only the bracket type found at ``open_index`` counts towards the depth.
    Quoted strings are skipped whole, including escaped quotes inside them.
    """
    open_ch = text[open_index]
    if open_ch == "{":
        close_ch = "}"
    elif open_ch == "[":
        close_ch = "]"
    else:
        raise ValueError(f"no bracket at index {open_index}: {open_ch!r}")

    depth = 0
    i = open_index
    n = len(text)
    while i < n:
        c = text[i]
        if c == '"':
            i += 1
            while i < n and text[i] != '"':
                if text[i] == "\\":
                    i += 1
                i += 1
        elif c == open_ch:
            depth += 1
        elif c == close_ch:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


class _Parser:
    """Recursive descent over ``text`` with explicit [pos, end) windows."""

    def __init__(self, text: str, strict: bool):
        self.text = text or ""
        self.strict = strict

    def parse_document(self, target: dict) -> None:
        text = self.text
        end = len(text.rstrip(_WHITESPACE))
        pos = self._skip_ws(0, end)
        if pos >= end:
            return
        if text[pos] == "[":
            raise UnsupportedJSON("expected an object, got an array", pos)
        if text[pos] != "{":
            # bare member list, braces omitted
            self._members(pos, end, target)
            return

        close = find_matching_bracket(text, pos)
        if close == -1:
            raise UnsupportedJSON("unterminated object", pos)
        self._members(pos + 1, close, target)
        if close + 1 < end:
            raise UnsupportedJSON("unexpected text after the object", close + 1)

    def _members(self, pos: int, end: int, target: dict) -> None:
        first = True
        while True:
            pos = self._next_entry(pos, end, first)
            if pos is None:
                return
            first = False
            if self.text[pos] != '"':
                raise UnsupportedJSON("expected a quoted key", pos)
            key, pos = self._string(pos, end)
            pos = self._skip_ws(pos, end)
            if pos >= end or self.text[pos] != ":":
                raise UnsupportedJSON(f"expected ':' after key {key!r}", pos)
            pos = self._skip_ws(pos + 1, end)
            if pos >= end:
                raise UnsupportedJSON(f"missing value for key {key!r}", pos)
            pos = self._value(pos, end, partial(target.__setitem__, key), in_array=False)

    def _elements(self, pos: int, end: int, target: list) -> None:
        first = True
        while True:
            pos = self._next_entry(pos, end, first)
            if pos is None:
                return
            first = False
            pos = self._value(pos, end, target.append, in_array=True)

    def _next_entry(self, pos: int, end: int, first: bool):
        """Position of the next member/element, or None at the end of the window."""
        pos = self._skip_ws(pos, end)
        if pos >= end:
            return None
        if not first:
            if self.text[pos] != ",":
                raise UnsupportedJSON("expected ','", pos)
            pos = self._skip_ws(pos + 1, end)
            if pos >= end:
                raise UnsupportedJSON("trailing ','", pos)
        return pos

    def _value(self, pos: int, end: int, store, in_array: bool) -> int:
        ch = self.text[pos]
        if ch == '"':
            value, pos = self._string(pos, end)
            store(value)
            return pos

        if ch in "{[":
            if ch == "[" and in_array:
                raise UnsupportedJSON("arrays of arrays are not supported", pos)
            close = find_matching_bracket(self.text, pos)
            if close == -1 or close >= end:
                raise UnsupportedJSON("unbalanced brackets", pos)
            # attach before filling so lenient mode keeps partial children
            if ch == "{":
                child = {}
                store(child)
                self._members(pos + 1, close, child)
            else:
                child = []
                store(child)
                self._elements(pos + 1, close, child)
            return close + 1

        value, pos = self._scalar(pos, end)
        store(value)
        return pos

    def _string(self, pos: int, end: int):
        text = self.text
        chars = []
        i = pos + 1
        while i < end:
            c = text[i]
            if c == '"':
                return "".join(chars), i + 1
            if c == "\\":
                if i + 1 >= end:
                    break
                esc = text[i + 1]
                if esc == "u":
                    raise UnsupportedJSON("unicode escapes are not supported", i)
                if esc not in _ESCAPES_IN:
                    raise UnsupportedJSON(f"invalid escape '\\{esc}'", i)
                chars.append(_ESCAPES_IN[esc])
                i += 2
                continue
            chars.append(c)
            i += 1
        raise UnsupportedJSON("unterminated string", pos)

    def _scalar(self, pos: int, end: int):
        text = self.text
        i = pos
        while i < end and text[i] not in _SCALAR_STOP:
            i += 1
        token = text[pos:i]
        if not token:
            raise UnsupportedJSON(f"unexpected {text[pos]!r}", pos)
        if token in _LITERALS:
            return _LITERALS[token], i
        if _NUMBER.fullmatch(token):
            return float(token), i
        if _EXPONENT.fullmatch(token):
            raise UnsupportedJSON("exponent notation is not supported", pos)
        if self.strict:
            raise UnsupportedJSON(f"unrecognized token {token!r}", pos)
        return token, i

    def _skip_ws(self, pos: int, end: int) -> int:
        while pos < end and self.text[pos] in _WHITESPACE:
            pos += 1
        return pos
