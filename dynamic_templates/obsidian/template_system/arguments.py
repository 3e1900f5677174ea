"""Evaluation of a reference's argument literal.

The payload between the markers is a JavaScript-style object literal::

    %%{ template: 'greet.py', name: 'Nate', list: [1, 2, 3], obj: {foo: 'bar'} }%%

or the same pairs without the surrounding braces. Only literal syntax is
understood; identifiers other than ``true``, ``false``, ``null`` and
``undefined`` are rejected, so nothing from the host leaks into the mapping.
"""

import re
from dataclasses import dataclass
from typing import Any

from dynamic_templates.obsidian.template_system.base import TemplateArguments
from dynamic_templates.utils.logger import get_logger

logger = get_logger(__name__)


class ArgumentSyntaxError(ValueError):
    """The argument literal could not be parsed"""


@dataclass
class Token:
    kind: str
    value: str
    pos: int


TOKEN_RE = re.compile(
    r"""
    (?P<NUMBER>0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<STRING>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')
  | (?P<PUNCT>[{}\[\]:,+-])
  | (?P<ID>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<SKIP>\s+)
  | (?P<MISMATCH>.)
    """,
    re.VERBOSE,
)

CONSTANTS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "Infinity": float("inf"),
    "NaN": float("nan"),
}

ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\n|.)")

SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "\n": "",
}


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        m = TOKEN_RE.match(source, pos)
        if not m:
            raise ArgumentSyntaxError(f"Tokenizer stalled at {pos}")
        kind = m.lastgroup or "MISMATCH"
        value = m.group(0)
        if kind == "MISMATCH":
            raise ArgumentSyntaxError(f"Unexpected character {value!r} at {pos}")
        if kind != "SKIP":
            tokens.append(Token(kind, value, pos))
        pos = m.end()
    tokens.append(Token("EOF", "", pos))
    return tokens


def _unescape(match: re.Match) -> str:
    seq = match.group(1)
    if seq.startswith("u{"):
        return chr(int(seq[2:-1], 16))
    if seq.startswith("u") and len(seq) == 5:
        return chr(int(seq[1:], 16))
    if seq.startswith("x") and len(seq) == 3:
        return chr(int(seq[1:], 16))
    return SIMPLE_ESCAPES.get(seq, seq)


def decode_string(literal: str) -> str:
    return ESCAPE_RE.sub(_unescape, literal[1:-1])


def decode_number(literal: str) -> int | float:
    if literal[:2] in ("0x", "0X"):
        return int(literal, 16)
    if any(c in literal for c in ".eE"):
        return float(literal)
    return int(literal)


class LiteralParser:
    """Recursive descent parser over object, array and scalar literals"""

    def __init__(self, source: str):
        self.tokens = tokenize(source)
        self.index = 0

    def peek(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def expect(self, value: str) -> Token:
        token = self.advance()
        if token.kind != "PUNCT" or token.value != value:
            raise ArgumentSyntaxError(
                f"Expected {value!r} at {token.pos}, got {token.value or 'end of input'!r}"
            )
        return token

    def at(self, value: str) -> bool:
        token = self.peek()
        return token.kind == "PUNCT" and token.value == value

    def parse_document(self) -> dict[str, Any]:
        value = self.parse_object()
        if self.peek().kind != "EOF":
            raise ArgumentSyntaxError(f"Unexpected trailing input at {self.peek().pos}")
        return value

    def parse_value(self) -> Any:
        token = self.peek()
        if token.kind == "PUNCT":
            if token.value == "{":
                return self.parse_object()
            if token.value == "[":
                return self.parse_array()
            if token.value in "+-":
                self.advance()
                operand = self.parse_value()
                if isinstance(operand, bool) or not isinstance(operand, int | float):
                    raise ArgumentSyntaxError(f"Sign applied to non-number at {token.pos}")
                return -operand if token.value == "-" else operand
        self.advance()
        if token.kind == "STRING":
            return decode_string(token.value)
        if token.kind == "NUMBER":
            return decode_number(token.value)
        if token.kind == "ID" and token.value in CONSTANTS:
            return CONSTANTS[token.value]
        raise ArgumentSyntaxError(
            f"Unexpected {token.value or 'end of input'!r} at {token.pos}"
        )

    def parse_array(self) -> list[Any]:
        self.expect("[")
        items: list[Any] = []
        while not self.at("]"):
            items.append(self.parse_value())
            if not self.at("]"):
                self.expect(",")
        self.expect("]")
        return items

    def parse_object(self) -> dict[str, Any]:
        self.expect("{")
        result: dict[str, Any] = {}
        while not self.at("}"):
            key = self.parse_key()
            result[key] = self.parse_value_after_colon()
            if not self.at("}"):
                self.expect(",")
        self.expect("}")
        return result

    def parse_key(self) -> str:
        token = self.advance()
        if token.kind == "ID":
            return token.value
        if token.kind == "STRING":
            return decode_string(token.value)
        if token.kind == "NUMBER":
            return str(decode_number(token.value))
        raise ArgumentSyntaxError(f"Invalid key {token.value!r} at {token.pos}")

    def parse_value_after_colon(self) -> Any:
        self.expect(":")
        return self.parse_value()


def parse_arguments(raw: str) -> TemplateArguments:
    """Parse an argument literal, raising ``ArgumentSyntaxError`` on bad input."""
    source = raw.strip()
    if not source.startswith("{"):
        source = "{" + source + "}"
    return TemplateArguments(LiteralParser(source).parse_document())


def evaluate_arguments(raw: str) -> TemplateArguments:
    """Parse an argument literal, returning an empty mapping on bad input."""
    try:
        return parse_arguments(raw)
    except (ArgumentSyntaxError, ValueError, RecursionError) as e:
        logger.debug("Ignoring malformed argument literal", raw=raw, error=str(e))
        return TemplateArguments()
