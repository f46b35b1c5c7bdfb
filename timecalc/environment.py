"""Engine configuration and subprocess environment for timecalc.

Settings come from TIMECALC_* environment variables; CLI options override
them. build_engine_env() returns a complete env dict ready to pass to
subprocess.Popen()/run().
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from typing import Mapping, Optional

ENV_PREFIX = "TIMECALC_"
DEFAULT_ENGINE = "time-calc"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class EngineConfig:
    """How to start and talk to the evaluator engine."""

    command: list[str] = field(default_factory=lambda: [DEFAULT_ENGINE])
    timeout_s: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        engine: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> EngineConfig:
        """Resolve settings from the environment, letting explicit arguments win.

        Args:
            environ: Mapping to read instead of os.environ.
            engine: Engine command line, overrides TIMECALC_ENGINE.
            timeout_s: Evaluate timeout in seconds, overrides TIMECALC_TIMEOUT.
        """
        env = os.environ if environ is None else environ

        command = parse_command(engine or env.get(f"{ENV_PREFIX}ENGINE") or DEFAULT_ENGINE)

        if timeout_s is None:
            timeout_s = parse_timeout(env.get(f"{ENV_PREFIX}TIMEOUT", ""))

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        return cls(command=command, timeout_s=timeout_s, log_level=log_level)


def parse_command(text: str) -> list[str]:
    """Split an engine command line; 'time-calc --flag' → ['time-calc', '--flag']."""
    argv = shlex.split(text)
    if not argv:
        raise ValueError("engine command is empty")
    return argv


def parse_timeout(text: str) -> Optional[float]:
    """Parse a timeout in seconds. Empty, zero or negative means no timeout."""
    text = text.strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid timeout: {text!r}") from None
    return value if value > 0 else None


def build_engine_env(base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Build env for the engine process.

    Copies the current environment and strips our own TIMECALC_* settings so
    they never leak into the engine.
    """
    env = dict(os.environ if base is None else base)
    for key in list(env.keys()):
        if key.startswith(ENV_PREFIX):
            del env[key]
    return env
