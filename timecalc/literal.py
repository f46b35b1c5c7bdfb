"""Incremental builder for a single time or number value.

A Literal collects keystrokes (digits, a decimal point, type and sign toggles)
and renders the value typed so far. Times are grouped from the right into
hours, two-digit minutes and two-digit seconds:

    1      -> 1s
    12     -> 12s
    123    -> 01:23
    12345  -> 1:23:45

Numbers print their digits as typed. Nothing here ever raises; unknown
characters passed to input_character() are ignored.
"""

from __future__ import annotations

from timecalc.models import Phase, Sign, ValueType

MAX_FRACTION_DIGITS = 9

DECIMAL_POINT = "."
TOGGLE_TYPE = "#"
TOGGLE_SIGN = "±"

# Extra keys accepted for the toggles: n/N from the keypad, ~ for terminals
# without a ± key.
TOGGLE_TYPE_ALIASES = frozenset({TOGGLE_TYPE, "n", "N"})
TOGGLE_SIGN_ALIASES = frozenset({TOGGLE_SIGN, "~"})

LITERAL_CHARACTERS = (
    frozenset("0123456789" + DECIMAL_POINT) | TOGGLE_TYPE_ALIASES | TOGGLE_SIGN_ALIASES
)


class Literal:
    """A time or number value being typed one keystroke at a time."""

    def __init__(self) -> None:
        self.sign = Sign.POSITIVE
        self.type = ValueType.TIME
        self.phase = Phase.WHOLE
        self.whole_digits: list[str] = []
        self.fraction_digits: list[str] = []

    def reset(self) -> None:
        """Back to a positive, empty time value."""
        self.sign = Sign.POSITIVE
        self.type = ValueType.TIME
        self.phase = Phase.WHOLE
        self.whole_digits.clear()
        self.fraction_digits.clear()

    def input_character(self, ch: str) -> str:
        """Apply one keystroke and return the new rendering."""
        if ch in TOGGLE_TYPE_ALIASES:
            self.toggle_type()
        elif ch in TOGGLE_SIGN_ALIASES:
            self.toggle_sign()
        elif ch == DECIMAL_POINT:
            self.input_decimal_point()
        elif len(ch) == 1 and "0" <= ch <= "9":
            self.input_digit(ch)
        return self.render()

    def input_digit(self, d: str) -> None:
        if self.phase is Phase.WHOLE:
            # A lone zero may start the buffer; further leading zeros are dropped.
            if self.whole_digits != ["0"] or d != "0":
                self.whole_digits.append(d)
        elif len(self.fraction_digits) < MAX_FRACTION_DIGITS:
            self.fraction_digits.append(d)

    def input_decimal_point(self) -> None:
        self.phase = Phase.FRACTION

    def toggle_type(self) -> None:
        self.type = ValueType.NUMBER if self.type is ValueType.TIME else ValueType.TIME

    def toggle_sign(self) -> None:
        self.sign = Sign.NEGATIVE if self.sign is Sign.POSITIVE else Sign.POSITIVE

    def delete_last_character(self) -> None:
        """Undo the last digit, or the decimal point if no fraction digits remain."""
        if self.phase is Phase.FRACTION:
            if self.fraction_digits:
                self.fraction_digits.pop()
            else:
                self.phase = Phase.WHOLE
        elif self.whole_digits:
            self.whole_digits.pop()

    def significant_digits(self) -> str:
        """Whole digits without the lone leading zero, if one was typed."""
        return "".join(self.whole_digits).lstrip("0")

    def is_empty(self) -> bool:
        """True when no digit and no decimal point has been entered."""
        return not self.whole_digits and not self.fraction_digits and self.phase is Phase.WHOLE

    def render(self) -> str:
        parts = []
        if self.sign is Sign.NEGATIVE:
            parts.append("-")

        digits = self.significant_digits()
        if self.type is ValueType.TIME:
            parts.append(_group_time(digits))
        else:
            parts.append(digits or "0")

        if self.phase is Phase.FRACTION:
            parts.append(".")
            parts.append("".join(self.fraction_digits) or "0")

        if self.type is ValueType.TIME and len(digits) <= 2:
            parts.append("s")

        return "".join(parts)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Literal({self.render()!r})"


def _group_time(digits: str) -> str:
    """Base-60 grouping of whole digits: [h...:]mm:ss, or bare seconds for <= 2 digits."""
    n = len(digits)
    if n == 0:
        return "0"
    if n <= 2:
        return digits
    seconds = digits[-2:]
    minutes = digits[-4:-2].rjust(2, "0")
    if n <= 4:
        return f"{minutes}:{seconds}"
    return f"{digits[:-4]}:{minutes}:{seconds}"
