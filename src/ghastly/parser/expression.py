"""Splits strings into literal text and embedded ``${{ ... }}`` expressions.

Expressions are only tokenized, never evaluated.  There is no nesting: the
first ``}}`` after an opening ``${{`` always closes it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum

OPEN_MARKER = "${{"
CLOSE_MARKER = "}}"


class TokenKind(StrEnum):
    LITERAL = "literal"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class Token:
    """A segment of the input: literal text or the body of an expression."""

    text: str
    kind: TokenKind

    @property
    def is_expression(self) -> bool:
        return self.kind is TokenKind.EXPRESSION


class UnterminatedExpressionError(ValueError):
    """Raised in strict mode when ``${{`` has no matching ``}}``."""

    def __init__(self, text: str, offset: int) -> None:
        self.text = text
        self.offset = offset
        super().__init__(f"unterminated expression starting at offset {offset}: {text[offset:]!r}")


class ExpressionTokenizer:
    """Iterator over the tokens of a single string.

    Starts in literal mode and alternates with expression mode at each
    marker, so tokens always alternate literal, expression, literal, ...
    Empty segments between adjacent markers are emitted, not skipped.

    An expression that is never closed is emitted as a final expression
    token holding the rest of the input, unless ``strict`` is set, in which
    case :class:`UnterminatedExpressionError` is raised.
    """

    def __init__(self, text: str, *, strict: bool = False) -> None:
        self._text = text
        self._strict = strict
        self._pos = 0
        self._kind = TokenKind.LITERAL
        self._done = False

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self._done:
            raise StopIteration
        if self._kind is TokenKind.LITERAL:
            return self._advance(OPEN_MARKER, TokenKind.EXPRESSION)
        return self._advance(CLOSE_MARKER, TokenKind.LITERAL)

    def _advance(self, marker: str, next_kind: TokenKind) -> Token:
        index = self._text.find(marker, self._pos)
        if index == -1:
            self._done = True
            if self._strict and self._kind is TokenKind.EXPRESSION:
                raise UnterminatedExpressionError(self._text, self._pos - len(OPEN_MARKER))
            return Token(self._text[self._pos :], self._kind)
        token = Token(self._text[self._pos : index], self._kind)
        self._pos = index + len(marker)
        self._kind = next_kind
        return token


def tokenize(text: str, *, strict: bool = False) -> ExpressionTokenizer:
    """Tokenize ``text``; every call starts from fresh state."""
    return ExpressionTokenizer(text, strict=strict)


def contains_expression(text: str) -> bool:
    return any(token.is_expression for token in tokenize(text))


def expressions(text: str) -> list[str]:
    """Return the bodies of all expressions in ``text``, in order."""
    return [token.text for token in tokenize(text) if token.is_expression]


def join_tokens(tokens: Iterable[Token]) -> str:
    """Rebuild the original string from its tokens, markers included."""
    parts: list[str] = []
    closing = False
    for token in tokens:
        if closing:
            parts.append(CLOSE_MARKER)
            closing = False
        if token.is_expression:
            parts.append(OPEN_MARKER)
            closing = True
        parts.append(token.text)
    return "".join(parts)
