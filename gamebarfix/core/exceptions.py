# SPDX-License-Identifier: LGPL-3.0-or-later
# gamebarfix/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default


def _clamp_exit_code(code: int) -> int:
    # Exit codes are 0..255 on every platform we launch from.
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


@dataclass(eq=False)
class GamebarFixError(Exception):
    """
    Base project error with:
      - stable fields (exit code, message, cause)
      - readable __str__ (what users see)
      - safe code handling (never crashes on int())
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        super().__init__(self.msg)
        self.args = (self.msg,)

    def user_message(self, *, include_cause: bool = False) -> str:
        """
        Human-friendly message for CLI output/logs.
        """
        parts = [self.msg or self.__class__.__name__]

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message()


class Fatal(GamebarFixError):
    """
    User-facing fatal error (exit code is honored by top-level main()).
    """
    pass


class NotFoundError(Fatal):
    """
    No usable backup folder: nothing to restore from.
    """

    def __post_init__(self) -> None:
        if self.code == 1:
            self.code = 3
        super().__post_init__()


class IdentityError(Fatal):
    """
    Target user SID missing or malformed.
    """

    def __post_init__(self) -> None:
        if self.code == 1:
            self.code = 4
        super().__post_init__()


class RegFileError(GamebarFixError):
    """
    A .reg fragment could not be parsed.
    """
    pass


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose>=1: message + cause
    """
    if isinstance(e, GamebarFixError):
        return e.user_message(include_cause=(verbose >= 1))

    if verbose >= 1:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
