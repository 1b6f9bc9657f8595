"""Headless keypad session that evaluates its buffer on a worker pool."""
from __future__ import annotations

import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List

from tools.calculator import CalculatorTool, EvalError, format_result

RESET = "\033[0m"
SESSION_COLOR = "\033[36m"
TOOL_COLOR = "\033[33m"
ERROR_COLOR = "\033[31m"

if not sys.stdout.isatty():
    RESET = SESSION_COLOR = TOOL_COLOR = ERROR_COLOR = ""

SUBMIT = "="
CLEAR = "Clear"
BACKSPACE = "<="

# key labels whose typed text differs from the label
_LABEL_TEXT = {"|x|": "|"}


@dataclass(slots=True)
class Outcome:
    expression: str
    value: float | None = None
    error: EvalError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        if self.error is not None:
            return f"Error: {self.error}"
        return format_result(self.value)


def _evaluate(calculator: CalculatorTool, expression: str) -> Outcome:
    try:
        return Outcome(expression=expression, value=calculator.run(expression))
    except EvalError as exc:
        return Outcome(expression=expression, error=exc)


def evaluate_many(
    expressions: Iterable[str],
    calculator: CalculatorTool | None = None,
    workers: int = 10,
) -> List[Outcome]:
    """Evaluate independent expressions concurrently, keeping input order."""
    calculator = calculator or CalculatorTool()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda expr: _evaluate(calculator, expr), expressions))


class CalculatorSession:
    """
    Session: calculator keypad

    Purpose:
      Stand-in for a calculator button panel. Key presses build up a text
      buffer; "=" sends the buffer to the calculator exactly once on a worker
      thread and shows the result (or "Error: ...") in the display.

    Keys:
      - "="      submit the buffer
      - "Clear"  empty the buffer
      - "<="     delete the last character
      - "|x|"    type "|"
      - anything else is appended as typed

    Semantics:
      - While a submission is in flight every key is ignored.
      - Input is re-enabled when the evaluation returns, success or failure.
    """

    def __init__(
        self,
        calculator: CalculatorTool | None = None,
        workers: int = 10,
        log_mode: str = "normal",
    ) -> None:
        self.calculator = calculator or CalculatorTool()
        self.log_mode = log_mode if log_mode in {"off", "normal", "detail"} else "normal"
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="calc")
        self._lock = threading.Lock()
        self._display = ""
        self._busy = False
        self._last_outcome: Outcome | None = None

    @property
    def display(self) -> str:
        with self._lock:
            return self._display

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def last_outcome(self) -> Outcome | None:
        with self._lock:
            return self._last_outcome

    def press(self, label: str) -> Future | None:
        if label == SUBMIT:
            return self.submit()
        with self._lock:
            if self._busy:
                self._log("normal", f"{ERROR_COLOR}[session] ignored key {label!r}: calculation in progress{RESET}")
                return None
            if label == CLEAR:
                self._display = ""
            elif label == BACKSPACE:
                self._display = self._display[:-1]
            else:
                self._display += _LABEL_TEXT.get(label, label)
            self._log("detail", f"{SESSION_COLOR}[session] key {label!r} -> {self._display!r}{RESET}")
        return None

    def type_text(self, text: str) -> bool:
        """Append raw text to the buffer; key labels in it get no special meaning."""
        with self._lock:
            if self._busy:
                self._log("normal", f"{ERROR_COLOR}[session] ignored text {text!r}: calculation in progress{RESET}")
                return False
            self._display += text
            self._log("detail", f"{SESSION_COLOR}[session] typed {text!r} -> {self._display!r}{RESET}")
        return True

    def submit(self) -> Future | None:
        with self._lock:
            if self._busy:
                self._log("normal", f"{ERROR_COLOR}[session] submit ignored: calculation in progress{RESET}")
                return None
            self._busy = True
            expression = self._display
        self._log("normal", f"{SESSION_COLOR}[session] Calculating...{RESET}")
        self._log("normal", f"{TOOL_COLOR}[tool] calculator.run({expression!r}){RESET}")
        try:
            return self._pool.submit(self._run, expression)
        except RuntimeError:
            with self._lock:
                self._busy = False
            raise

    def _run(self, expression: str) -> Outcome:
        try:
            outcome = _evaluate(self.calculator, expression)
            with self._lock:
                self._display = outcome.render()
                self._last_outcome = outcome
            if outcome.ok:
                self._log("detail", f"{SESSION_COLOR}[session] result {outcome.value!r}{RESET}")
            else:
                self._log("normal", f"{ERROR_COLOR}[session] {outcome.render()}{RESET}")
            return outcome
        finally:
            with self._lock:
                self._busy = False

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> "CalculatorSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _log(self, level: str, message: str) -> None:
        if self.log_mode == "off":
            return
        if self.log_mode == "normal" and level == "detail":
            return
        print(message, flush=True)
