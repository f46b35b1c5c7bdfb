"""Evaluators: bridges from expression text to the external time-calc engine.

EvaluationBridge keeps one engine process alive and talks to it line by line:

1. evaluate() takes the submission lock and writes "<expression>\\n" to stdin
2. the engine answers with exactly one line, on stdout (success) or stderr (error)
3. two daemon listener threads read stdout/stderr and hand each line, wrapped
   in a Result, to a single-slot queue
4. evaluate() takes the next item from the queue and releases the lock

Only one request is ever in flight, so the next queued line always answers
the request just written. No request ids are needed.

OneShotEvaluator starts a fresh engine per expression instead, and
StubEvaluator answers without any process at all.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, Mapping, Optional, Protocol, Sequence, Union

from timecalc.environment import build_engine_env, parse_command
from timecalc.models import Result, StandardStream

logger = logging.getLogger(__name__)

Command = Union[str, Path, Sequence[str]]

SHUTTING_DOWN = "Shutting down."
WRITE_FAILED = "Could not evaluate expression."

# How often blocked threads re-check for shutdown.
_POLL_S = 0.05
# How long shutdown waits for the engine to exit after stdin is closed.
_EXIT_GRACE_S = 2.0


class EngineStartError(RuntimeError):
    """The evaluator engine could not be started."""


class ExpressionEvaluator(Protocol):
    """Anything that turns expression text into a Result."""

    def evaluate(self, expression: str) -> Result[str, str]:
        ...


def _to_argv(command: Command) -> list[str]:
    if isinstance(command, Path):
        argv = [str(command)]
    elif isinstance(command, str):
        try:
            argv = parse_command(command)
        except ValueError as e:
            raise EngineStartError(str(e)) from e
    else:
        argv = [str(part) for part in command]
    if not argv:
        raise EngineStartError("engine command is empty")
    return argv


def _is_blank(expression: Optional[str]) -> bool:
    return expression is None or not expression.strip()


class EvaluationBridge:
    """Evaluates expressions with one long-lived engine in interactive mode.

    Safe to call from several threads: calls are serialized, each one gets
    the answer to its own expression.

    Args:
        command: Engine argv, a command line string, or a path to the executable.
        timeout: Seconds to wait for an answer. None waits forever. When it
            expires the bridge shuts down, since a late answer would be paired
            with the next request.
        env: Environment for the engine. Defaults to build_engine_env().
    """

    def __init__(
        self,
        command: Command,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        argv = _to_argv(command)
        try:
            self._process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                env=dict(env) if env is not None else build_engine_env(),
            )
        except OSError as e:
            raise EngineStartError(f"Could not start evaluator {argv[0]!r}: {e}") from e
        logger.info("Started evaluator %s (pid %d)", argv, self._process.pid)

        self.timeout = timeout
        self._submit_lock = threading.Lock()
        self._shutdown_lock = threading.Lock()
        self._closed = threading.Event()
        self._responses: queue.Queue[Result[str, str]] = queue.Queue(maxsize=1)

        self._listeners = [
            threading.Thread(
                target=self._listen,
                args=(self._process.stdout, StandardStream.STDOUT),
                name="timecalc-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=self._listen,
                args=(self._process.stderr, StandardStream.STDERR),
                name="timecalc-stderr",
                daemon=True,
            ),
        ]
        for listener in self._listeners:
            listener.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def pid(self) -> int:
        return self._process.pid

    def evaluate(self, expression: str) -> Result[str, str]:
        """Send one expression to the engine and wait for its answer.

        Never raises: write failures, shutdown, interruption and timeouts all
        come back as failure Results.
        """
        if _is_blank(expression):
            return Result.success("")
        if "\n" in expression or "\r" in expression:
            return Result.failure("Expression must be a single line.")

        with self._submit_lock:
            if self._closed.is_set():
                return Result.failure(SHUTTING_DOWN)

            try:
                self._process.stdin.write(expression + "\n")
                self._process.stdin.flush()
            except (OSError, ValueError) as e:
                logger.warning("Could not write to evaluator: %s", e)
                return Result.failure(WRITE_FAILED)

            try:
                return self._await_response()
            except KeyboardInterrupt:
                logger.warning("Interrupted while waiting for evaluator, shutting down")
                self.shutdown()
                return Result.failure(SHUTTING_DOWN)

    def _await_response(self) -> Result[str, str]:
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        while True:
            if self._closed.is_set():
                return Result.failure(SHUTTING_DOWN)

            wait = _POLL_S
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning("Evaluator did not answer within %ss, shutting down", self.timeout)
                    self.shutdown()
                    return Result.failure(f"Timed out after {self.timeout}s.")
                wait = min(wait, remaining)

            try:
                return self._responses.get(timeout=wait)
            except queue.Empty:
                continue

    def _listen(self, stream: IO[str], stream_type: StandardStream) -> None:
        """Forward every line of one engine stream to the response queue."""
        try:
            for raw in stream:
                line = raw.rstrip("\r\n")
                if stream_type is StandardStream.STDOUT:
                    result: Result[str, str] = Result.success(line)
                else:
                    result = Result.failure(line)
                if not self._offer(result):
                    break
        except (OSError, ValueError) as e:
            logger.warning("Could not read from evaluator %s: %s", stream_type.value, e)
            return
        if not self._closed.is_set():
            logger.warning(
                "Evaluator closed %s (exit code %s)", stream_type.value, self._process.poll()
            )
        logger.debug("Evaluator %s listener stopped", stream_type.value)

    def _offer(self, result: Result[str, str]) -> bool:
        """Block until the queue takes ``result``. False if shut down meanwhile."""
        while not self._closed.is_set():
            try:
                self._responses.put(result, timeout=_POLL_S)
                return True
            except queue.Full:
                continue
        return False

    def shutdown(self) -> None:
        """Stop the engine and the listener threads. Safe to call more than once."""
        with self._shutdown_lock:
            if self._closed.is_set():
                return
            self._closed.set()

        # Closing stdin tells the engine to exit.
        try:
            self._process.stdin.close()
        except OSError as e:
            logger.warning("Could not close evaluator stdin: %s", e)

        try:
            self._process.wait(timeout=_EXIT_GRACE_S)
        except subprocess.TimeoutExpired:
            logger.warning("Evaluator did not exit after stdin was closed, killing it")
            self._process.kill()
            self._process.wait()

        current = threading.current_thread()
        for listener in self._listeners:
            if listener is not current:
                listener.join(timeout=_EXIT_GRACE_S)

        streams = (self._process.stdout, self._process.stderr)
        for listener, stream in zip(self._listeners, streams):
            # A stream still being read cannot be closed without blocking.
            if listener.is_alive():
                continue
            try:
                stream.close()
            except OSError as e:
                logger.debug("Could not close evaluator stream: %s", e)
        logger.info("Evaluator stopped (exit code %s)", self._process.returncode)

    def __enter__(self) -> EvaluationBridge:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


class OneShotEvaluator:
    """Runs the engine once per expression, passing it as an argument.

    Exit code 0 means success with stdout as the value; anything else is a
    failure carrying stderr.
    """

    def __init__(
        self,
        command: Command,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.argv = _to_argv(command)
        self.timeout = timeout
        self.env = dict(env) if env is not None else build_engine_env()

    def evaluate(self, expression: str) -> Result[str, str]:
        if _is_blank(expression):
            return Result.success("")

        try:
            proc = subprocess.run(
                [*self.argv, expression],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired:
            return Result.failure(f"Timed out after {self.timeout}s.")
        except OSError as e:
            logger.warning("Could not start evaluator %s: %s", self.argv[0], e)
            return Result.failure("Could not start evaluator.")

        if proc.returncode == 0:
            return Result.success(proc.stdout.rstrip("\r\n"))
        error = proc.stderr.rstrip("\r\n")
        return Result.failure(error or f"Evaluator exited with code {proc.returncode}.")


class StubEvaluator:
    """In-process evaluator for demos and tests.

    Succeeds with "success" when the expression contains a 0, fails with
    "failure" otherwise.
    """

    def evaluate(self, expression: str) -> Result[str, str]:
        if "0" in expression:
            return Result.success("success")
        return Result.failure("failure")
