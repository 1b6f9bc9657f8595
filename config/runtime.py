"""Runtime configuration helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass

from tools.calculator import CalculatorTool

LOG_MODES = ("off", "normal", "detail")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(slots=True)
class RuntimeSettings:
    """Settings bundle for the calculator front ends."""

    postfix_operators: bool = True
    max_depth: int = 128
    workers: int = 10
    log_mode: str = "normal"

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        log_mode = os.getenv("CALC_LOG_MODE", "normal").strip().lower()
        return cls(
            postfix_operators=_env_flag("CALC_POSTFIX_OPERATORS", "1"),
            max_depth=int(os.getenv("CALC_MAX_DEPTH", "128")),
            workers=int(os.getenv("CALC_WORKERS", "10")),
            log_mode=log_mode if log_mode in LOG_MODES else "normal",
        )

    def build_calculator(self) -> CalculatorTool:
        return CalculatorTool(postfix_operators=self.postfix_operators, max_depth=self.max_depth)
