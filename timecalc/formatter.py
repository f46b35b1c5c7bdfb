"""Keystroke-driven expression formatter.

Keeps an ordered list of tokens (values, operators, parentheses) and accepts
only keystrokes that leave the expression a valid prefix of

    expr ::= term (" " op " " term)*

Anything else is ignored. Every call returns the re-rendered expression.
"""

from __future__ import annotations

from typing import Optional

from timecalc.literal import LITERAL_CHARACTERS, Literal
from timecalc.models import Operator, Paren, Parenthesis, Token, Value, is_close, is_open

OPERATORS = frozenset("+-*/")


class ExpressionFormatter:
    """Builds and edits an expression one character at a time."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self.open_paren_count = 0

    def clear(self) -> None:
        self.tokens.clear()
        self.open_paren_count = 0

    @property
    def last_token(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None

    # --- Input ---

    def input_character(self, ch: str) -> str:
        """Apply one keystroke and return the rendered expression."""
        if ch in LITERAL_CHARACTERS:
            self._input_literal(ch)
        elif ch in OPERATORS:
            self._input_operator(ch)
        elif ch == Paren.OPEN.value:
            self._input_open()
        elif ch == Paren.CLOSE.value:
            self._input_close()
        return self.render()

    def input_text(self, text: str) -> str:
        """Feed every character of ``text`` in order."""
        for ch in text:
            self.input_character(ch)
        return self.render()

    def load_value(self, text: str) -> str:
        """Replace the expression with a single value re-entered from ``text``.

        ``text`` is a rendered value such as an evaluator result ("1:02:03",
        "-4.5"). Text without ':' or an 's' suffix is treated as a number.
        """
        self.clear()
        text = text.strip()
        if not text:
            return self.render()

        literal = Literal()
        for ch in text:
            if ch in "0123456789.":
                literal.input_character(ch)
        if ":" not in text and "s" not in text:
            literal.toggle_type()
        if text.startswith("-"):
            literal.toggle_sign()

        value = Value(literal)
        value.refresh()
        self.tokens.append(value)
        return self.render()

    def _input_literal(self, ch: str) -> None:
        last = self.last_token
        if isinstance(last, Value):
            last.literal.input_character(ch)
            last.refresh()
        elif last is None or isinstance(last, Operator) or is_open(last):
            value = Value(Literal())
            value.literal.input_character(ch)
            value.refresh()
            self.tokens.append(value)

    def _input_operator(self, ch: str) -> None:
        # Operators can only follow a value or a closing parenthesis.
        last = self.last_token
        if isinstance(last, Value) or is_close(last):
            self.tokens.append(Operator(ch))

    def _input_open(self) -> None:
        last = self.last_token
        if last is None or isinstance(last, Operator) or is_open(last):
            self.tokens.append(Parenthesis(Paren.OPEN))
            self.open_paren_count += 1

    def _input_close(self) -> None:
        if self.open_paren_count == 0:
            return
        last = self.last_token
        if isinstance(last, Operator) or is_open(last):
            return
        self.tokens.append(Parenthesis(Paren.CLOSE))
        self.open_paren_count -= 1

    # --- Deletion ---

    def delete_character(self) -> str:
        """Remove the last character typed and return the rendered expression."""
        last = self.last_token
        if last is None:
            return self.render()

        if isinstance(last, Value) and not last.literal.is_empty():
            last.literal.delete_last_character()
            if last.literal.is_empty():
                self.tokens.pop()
            else:
                last.refresh()
            return self.render()

        self.tokens.pop()
        if is_open(last):
            self.open_paren_count -= 1
        elif is_close(last):
            self.open_paren_count += 1
        return self.render()

    # --- Rendering ---

    def render(self) -> str:
        parts = []
        for i, token in enumerate(self.tokens):
            parts.append(token.text)
            if i + 1 == len(self.tokens):
                break
            # Space after operators, values and closing parentheses,
            # unless a closing parenthesis follows.
            if (isinstance(token, (Operator, Value)) or is_close(token)) and not is_close(
                self.tokens[i + 1]
            ):
                parts.append(" ")
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()

