"""Command-line scientific calculator."""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import List, Sequence, TextIO

from config.runtime import LOG_MODES, RuntimeSettings
from session.calculator_session import CalculatorSession, Outcome, evaluate_many

RESET = "\033[0m"
INFO = "\033[35m"
RESULT = "\033[32m"
ERROR = "\033[31m"

if not sys.stdout.isatty():
    RESET = INFO = RESULT = ERROR = ""


def print_outcome(outcome: Outcome) -> None:
    if outcome.ok:
        print(f"{INFO}{outcome.expression}{RESET} {RESULT}Result:{RESET} {outcome.render()}", flush=True)
    else:
        print(f"{INFO}{outcome.expression}{RESET} {ERROR}{outcome.render()}{RESET}", flush=True)


def run_batch(expressions: Sequence[str], settings: RuntimeSettings) -> int:
    outcomes: List[Outcome] = evaluate_many(
        expressions,
        calculator=settings.build_calculator(),
        workers=settings.workers,
    )
    for outcome in outcomes:
        print_outcome(outcome)
    return 0 if all(outcome.ok for outcome in outcomes) else 1


def run_interactive(settings: RuntimeSettings, stream: TextIO | None = None) -> int:
    stream = stream or sys.stdin
    with CalculatorSession(
        calculator=settings.build_calculator(),
        workers=settings.workers,
        log_mode=settings.log_mode,
    ) as session:
        while True:
            if stream.isatty():
                print(f"{INFO}>{RESET} ", end="", flush=True)
            line = stream.readline()
            if not line:
                break
            text = line.rstrip("\r\n")
            if not text.strip() or text.strip() == "quit":
                break
            session.press("Clear")
            session.type_text(text)
            future = session.submit()
            if future is not None:
                future.result()
            print(session.display, flush=True)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scientific calculator")
    parser.add_argument("expressions", nargs="*", help="Expressions to evaluate; omit for interactive mode")
    parser.add_argument("--strict", action="store_true", help="Reject the !, %% and |x| operators")
    parser.add_argument("--workers", type=int, help="Worker threads used for evaluation")
    parser.add_argument("--log-mode", choices=list(LOG_MODES), help="Session log verbosity")
    parser.add_argument("--detail", action="store_true", help="Shortcut for --log-mode detail")
    args = parser.parse_args(argv)

    settings = RuntimeSettings.from_env()
    if args.strict:
        settings = replace(settings, postfix_operators=False)
    if args.workers:
        settings = replace(settings, workers=args.workers)
    log_mode = "detail" if args.detail else args.log_mode
    if log_mode:
        settings = replace(settings, log_mode=log_mode)

    if args.expressions:
        return run_batch(args.expressions, settings)
    return run_interactive(settings)


if __name__ == "__main__":
    sys.exit(main())
