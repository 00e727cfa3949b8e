"""Tokenizer turning expression text into lexical tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from ._errors import LexError

if TYPE_CHECKING:
    from collections.abc import Generator

    from ._registry import Registry

# Decimal literal with an optional exponent: 12, 1.5, .5, 3., 1e+2, 1E-2, 1e2
NUMBER_RE = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
DIGITS_RE = re.compile(r"\d+")
# Extent of a bad literal, for the error message: 1.2.3, 3..5, 1e5.2
MALFORMED_NUMBER_RE = re.compile(r"[\d.]+(?:[eE][+-]?[\d.]+)?")

STRUCTURAL_SYMBOLS = frozenset("(),")


class LexKind(StrEnum):
    """Lexical category of a token."""

    NUMBER = auto()
    IDENTIFIER = auto()
    SYMBOL = auto()


@dataclass(frozen=True, slots=True)
class LexToken:
    kind: LexKind
    text: str
    position: int

    def __str__(self) -> str:
        return self.text


def _longest_label_at(text: str, position: int, labels_by_length: list[str]) -> str | None:
    for label in labels_by_length:
        if text.startswith(label, position):
            return label
    return None


def _split_word(word: str, labels_by_length: list[str]) -> list[str] | None:
    """Split an identifier-like word into registered labels and digit runs.

    Returns None when the word cannot be covered entirely, as in ``exp``
    when only ``e`` is registered.
    """
    if not word:
        return []
    if word[0].isdigit():
        digits = DIGITS_RE.match(word)
        rest = _split_word(word[digits.end() :], labels_by_length)
        return None if rest is None else [digits.group(), *rest]
    for label in labels_by_length:
        if word.startswith(label):
            rest = _split_word(word[len(label) :], labels_by_length)
            if rest is not None:
                return [label, *rest]
    return None


def _label_kind(label: str) -> LexKind:
    if DIGITS_RE.fullmatch(label):
        return LexKind.NUMBER
    return LexKind.IDENTIFIER if IDENTIFIER_RE.match(label) else LexKind.SYMBOL


def tokenize(text: str, registry: Registry[Any]) -> Generator[LexToken]:
    """Split ``text`` into lexical tokens, lazily.

    Registered labels are matched longest first, so ``asinh`` is never read
    as ``asin`` followed by ``h``. A word is split into adjacent labels
    (``xy``, ``sinpi``) only when the labels cover it entirely; otherwise it
    is emitted whole, and left for the parser to reject.

    Raises:
        LexError: On a character that starts no literal, identifier or
            symbol, or on a malformed number such as ``1.2.3``.

    """
    labels_by_length = sorted(registry.labels(), key=len, reverse=True)
    position = 0
    length = len(text)

    while position < length:
        char = text[position]

        if char.isspace():
            position += 1
            continue

        if char in STRUCTURAL_SYMBOLS:
            yield LexToken(LexKind.SYMBOL, char, position)
            position += 1
            continue

        number = NUMBER_RE.match(text, position)
        if number is not None:
            end = number.end()
            if end < length and (text[end] == "." or text[end].isdigit()):
                malformed = MALFORMED_NUMBER_RE.match(text, position).group()
                msg = f"Malformed number '{malformed}' at position {position}"
                raise LexError(msg, position)
            yield LexToken(LexKind.NUMBER, number.group(), position)
            position = end
            continue

        label = _longest_label_at(text, position, labels_by_length)
        word = IDENTIFIER_RE.match(text, position)
        if word is not None and (label is None or len(label) < len(word.group())):
            pieces = _split_word(word.group(), labels_by_length)
            if pieces is None:
                yield LexToken(LexKind.IDENTIFIER, word.group(), position)
                position = word.end()
                continue
            for piece in pieces:
                yield LexToken(_label_kind(piece), piece, position)
                position += len(piece)
            continue

        if label is not None:
            yield LexToken(_label_kind(label), label, position)
            position += len(label)
            continue

        msg = f"Unexpected character {char!r} at position {position}"
        raise LexError(msg, position)
