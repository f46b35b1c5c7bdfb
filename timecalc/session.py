"""Calculator session: a formatter wired to an evaluator.

Mirrors what a keypad front end does. Every edit re-renders the expression
and submits it for a live result; "=" turns the current result into the new
expression so it can be edited further.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from timecalc.bridge import ExpressionEvaluator
from timecalc.formatter import ExpressionFormatter

logger = logging.getLogger(__name__)


class Key(str, Enum):
    """Control keys. Every other key is passed to the formatter as a character."""

    CLEAR = "C"
    DELETE = "<"
    EQUALS = "="


@dataclass(frozen=True)
class Display:
    """What a front end shows: the expression being typed and the latest result."""

    expression: str
    result: str


class Calculator:
    """Keystroke-level calculator session.

    Args:
        evaluator: Anything with evaluate(str) -> Result. None formats only
            and never produces a result.
        executor: Where evaluations run. None evaluates on the calling thread;
            pass a single-worker executor to keep results in keystroke order.
    """

    def __init__(self, evaluator: Optional[ExpressionEvaluator], executor: Optional[Executor] = None) -> None:
        self.evaluator = evaluator
        self.executor = executor
        self.formatter = ExpressionFormatter()
        self._result = ""
        self._result_lock = threading.Lock()
        self._pending: Optional[Future] = None
        # Bumped by clear and equals; evaluations from an older generation are dropped.
        self._generation = 0

    @property
    def expression(self) -> str:
        return self.formatter.render()

    @property
    def result(self) -> str:
        with self._result_lock:
            return self._result

    @property
    def display(self) -> Display:
        return Display(expression=self.expression, result=self.result)

    def press(self, key: Union[Key, str]) -> Display:
        """Handle one key press and return the updated display."""
        try:
            key = Key(key)
        except ValueError:
            pass

        if key is Key.CLEAR:
            self.clear()
        elif key is Key.EQUALS:
            self.equals()
        elif key is Key.DELETE:
            self._refresh(self.formatter.delete_character())
        else:
            self._refresh(self.formatter.input_character(key))
        return self.display

    def type_keys(self, keys: str) -> Display:
        """Press each character of ``keys`` in order."""
        for ch in keys:
            self.press(ch)
        return self.display

    def clear(self) -> None:
        self.formatter.clear()
        with self._result_lock:
            self._generation += 1
            self._result = ""

    def equals(self) -> None:
        """Replace the expression with the current result as one editable value."""
        self.wait()
        with self._result_lock:
            self._generation += 1
            result = self._result
        self.formatter.load_value(result)

    def wait(self) -> None:
        """Block until the most recent background evaluation has finished."""
        pending = self._pending
        if pending is not None:
            pending.result()

    def _refresh(self, expression: str) -> None:
        if self.evaluator is None:
            return
        with self._result_lock:
            generation = self._generation
        if self.executor is None:
            self._evaluate(expression, generation)
        else:
            self._pending = self.executor.submit(self._evaluate, expression, generation)

    def _evaluate(self, expression: str, generation: int) -> None:
        result = self.evaluator.evaluate(expression)
        # Keep the last good result on display while the expression is incomplete.
        if not result.is_success:
            logger.debug("Not updating result for %r: %s", expression, result.error)
            return
        with self._result_lock:
            if generation != self._generation:
                logger.debug("Dropping stale result for %r", expression)
                return
            self._result = result.value
