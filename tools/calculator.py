"""Deterministic scientific calculator tool."""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List

import numpy as np

_END = None  # end-of-input sentinel for the scan cursor

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class EvalErrorKind(Enum):
    UNEXPECTED_CHARACTER = "unexpected_character"
    UNKNOWN_FUNCTION = "unknown_function"
    MALFORMED_NUMBER = "malformed_number"
    NEGATIVE_FACTORIAL = "negative_factorial"
    NESTING_TOO_DEEP = "nesting_too_deep"


class EvalError(Exception):
    """Evaluation failure with the offending piece of input attached."""

    def __init__(
        self,
        kind: EvalErrorKind,
        message: str,
        position: int | None = None,
        character: str | None = None,
        identifier: str | None = None,
        literal: str | None = None,
        value: float | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.position = position
        self.character = character
        self.identifier = identifier
        self.literal = literal
        self.value = value

    @classmethod
    def unexpected(cls, character: str | None, position: int) -> "EvalError":
        shown = "end of input" if character is _END else character
        return cls(
            EvalErrorKind.UNEXPECTED_CHARACTER,
            f"Unexpected: {shown}",
            position=position,
            character=character,
        )


def _to_int32(x: float) -> int:
    # (int) cast semantics: NaN is 0, out-of-range saturates, truncate toward zero
    if x != x:
        return 0
    if x >= _INT_MAX:
        return _INT_MAX
    if x <= _INT_MIN:
        return _INT_MIN
    return int(x)


def factorial(x: float) -> float:
    n = _to_int32(float(x))
    if n < 0:
        raise EvalError(
            EvalErrorKind.NEGATIVE_FACTORIAL,
            "Factorial is not defined for negative numbers",
            value=float(x),
        )
    if n >= 34:
        # 2**32 divides n! from here on
        return 0.0
    fact = 1
    for i in range(1, n + 1):
        fact = (fact * i) & 0xFFFFFFFF
    if fact > _INT_MAX:
        fact -= 2**32
    return float(fact)


def percent(x: float) -> float:
    return x / 100.0


def format_result(value: float) -> str:
    return repr(float(value))


class _Scanner:
    """Cursor over one expression; created per evaluation and then discarded."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = -1
        self.ch: str | None = _END
        self.depth = 0
        self.next_char()

    def next_char(self) -> None:
        self.pos += 1
        self.ch = self.text[self.pos] if self.pos < len(self.text) else _END

    def eat(self, char: str) -> bool:
        while self.ch == " ":
            self.next_char()
        if self.ch == char:
            self.next_char()
            return True
        return False

    def at_digit(self) -> bool:
        return self.ch is not _END and ("0" <= self.ch <= "9" or self.ch == ".")

    def at_letter(self) -> bool:
        return self.ch is not _END and "a" <= self.ch <= "z"


class CalculatorTool:
    """
    Tool: calculator

    Purpose:
      Evaluate a scientific calculator expression and return a number.

    Input:
      expression: string

    Grammar (lowest to highest precedence):
      expression := term (('+' | '-') term)*
      term       := factor (('*' | '/' | '^') factor)*
      factor     := ('+' | '-') factor | postfix
      postfix    := primary ('!' | '%')*
      primary    := '(' expression ')' | '|' expression '|' | number | name factor

      - '*', '/' and '^' share one level and run left to right: 2^3*2 == 16
      - functions take the next factor as argument: sqrt9, sqrt(9+16)
      - adjacent names chain right to left: sinsqrt4 == sin(sqrt(4))
      - functions: sqrt, cbrt, log (base 10), sin, cos, tan (degrees),
        asin, acos, atan (return degrees)
      - spaces are skipped only before operators and brackets
      - with postfix_operators=False the '!', '%' and '|' productions are
        absent and those characters are rejected as unexpected

    Semantics:
      - Deterministic, IEEE double arithmetic (1/0 -> inf, sqrt(-1) -> nan)
      - Side-effect free and reentrant; scan state lives in a per-call scanner
      - Failures raise EvalError with a closed EvalErrorKind
    """

    allowed_functions: Dict[str, Callable[[Any], Any]] = {
        "sqrt": np.sqrt,
        "cbrt": np.cbrt,
        "log": np.log10,
        "sin": lambda x: np.sin(np.radians(x)),
        "cos": lambda x: np.cos(np.radians(x)),
        "tan": lambda x: np.tan(np.radians(x)),
        "asin": lambda x: np.degrees(np.arcsin(x)),
        "acos": lambda x: np.degrees(np.arccos(x)),
        "atan": lambda x: np.degrees(np.arctan(x)),
    }
    postfix_functions: Dict[str, Callable[[Any], Any]] = {
        "!": factorial,
        "%": percent,
    }

    def __init__(self, postfix_operators: bool = True, max_depth: int = 128) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1.")
        self.postfix_operators = postfix_operators
        self.max_depth = max_depth

    def run(self, expression: str) -> float:
        scanner = _Scanner(expression)
        try:
            with np.errstate(all="ignore"):
                x = self._parse_expression(scanner)
        except RecursionError as exc:
            # max_depth set above what the interpreter stack can hold
            raise EvalError(
                EvalErrorKind.NESTING_TOO_DEEP,
                f"Expression nested deeper than the interpreter allows (max_depth={self.max_depth})",
                position=scanner.pos,
            ) from exc
        if scanner.pos < len(expression):
            raise EvalError.unexpected(scanner.ch, scanner.pos)
        return float(x)

    def _parse_expression(self, s: _Scanner) -> np.float64:
        x = self._parse_term(s)
        while True:
            if s.eat("+"):
                x = x + self._parse_term(s)
            elif s.eat("-"):
                x = x - self._parse_term(s)
            else:
                return x

    def _parse_term(self, s: _Scanner) -> np.float64:
        x = self._parse_factor(s)
        while True:
            if s.eat("*"):
                x = x * self._parse_factor(s)
            elif s.eat("/"):
                x = x / self._parse_factor(s)
            elif s.eat("^"):
                x = np.power(x, self._parse_factor(s))
            else:
                return x

    def _parse_factor(self, s: _Scanner) -> np.float64:
        s.depth += 1
        try:
            if s.depth > self.max_depth:
                raise EvalError(
                    EvalErrorKind.NESTING_TOO_DEEP,
                    f"Expression nested deeper than {self.max_depth} levels",
                    position=s.pos,
                )
            if s.eat("+"):
                return self._parse_factor(s)
            if s.eat("-"):
                return -self._parse_factor(s)
            x = self._parse_primary(s)
            if self.postfix_operators:
                x = self._parse_postfix(s, x)
            return x
        finally:
            s.depth -= 1

    def _parse_primary(self, s: _Scanner) -> np.float64:
        start = s.pos
        if s.eat("("):
            x = self._parse_expression(s)
            s.eat(")")
            return x
        if self.postfix_operators and s.eat("|"):
            x = np.abs(self._parse_expression(s))
            s.eat("|")
            return x
        if s.at_digit():
            while s.at_digit():
                s.next_char()
            literal = s.text[start:s.pos]
            try:
                return np.float64(float(literal))
            except ValueError as exc:
                raise EvalError(
                    EvalErrorKind.MALFORMED_NUMBER,
                    f"Malformed number: {literal}",
                    position=start,
                    literal=literal,
                ) from exc
        if s.at_letter():
            while s.at_letter():
                s.next_char()
            name = s.text[start:s.pos]
            x = self._parse_factor(s)
            chain = self._split_names(name)
            if chain is None:
                raise EvalError(
                    EvalErrorKind.UNKNOWN_FUNCTION,
                    f"Unknown function: {name}",
                    position=start,
                    identifier=name,
                )
            for func_name in reversed(chain):
                x = np.float64(self.allowed_functions[func_name](x))
            return x
        raise EvalError.unexpected(s.ch, s.pos)

    def _split_names(self, run: str) -> List[str] | None:
        """Split a letter run such as "sinsqrt" into ["sin", "sqrt"]."""
        names = sorted(self.allowed_functions, key=len, reverse=True)
        chain: List[str] = []
        idx = 0
        while idx < len(run):
            for name in names:
                if run.startswith(name, idx):
                    chain.append(name)
                    idx += len(name)
                    break
            else:
                return None
        return chain

    def _parse_postfix(self, s: _Scanner, x: np.float64) -> np.float64:
        while True:
            for symbol, func in self.postfix_functions.items():
                if s.eat(symbol):
                    x = np.float64(func(x))
                    break
            else:
                return x


_default_tool = CalculatorTool()


def evaluate(expression: str) -> float:
    """Evaluate with the default tool (postfix operators enabled)."""
    return _default_tool.run(expression)


if __name__ == "__main__":
    calc = CalculatorTool()
    print(calc.run("2^3*2 + sqrt(9+16)"))
