"""timecalc — keystroke-level time calculator front end.

Builds time/number expressions one keystroke at a time, always rendering a
valid partial expression, and evaluates them with the external time-calc
engine over its line-oriented interactive mode.

Usage:
    python -m timecalc keys "123+45"                  # Show rendering per keystroke
    python -m timecalc eval "1:00 + 30s"              # Evaluate with the engine
    python -m timecalc eval "2 * 3n" --one-shot       # One engine process per expression
    python -m timecalc repl                           # Interactive session
"""

from timecalc.bridge import EngineStartError, EvaluationBridge, OneShotEvaluator, StubEvaluator
from timecalc.formatter import ExpressionFormatter
from timecalc.literal import Literal
from timecalc.models import Result
from timecalc.session import Calculator, Key

__all__ = [
    "Calculator",
    "EngineStartError",
    "EvaluationBridge",
    "ExpressionFormatter",
    "Key",
    "Literal",
    "OneShotEvaluator",
    "Result",
    "StubEvaluator",
]
