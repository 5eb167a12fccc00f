# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/core/elevation.py
"""
UAC helpers.

The elevated child may run as a different account than the user who started
the tool (over-the-shoulder elevation), so the original user's SID is
resolved before relaunching and handed to the child via --sid.
"""
from __future__ import annotations

import csv
import io
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .exceptions import Fatal, IdentityError
from .utils import U

# ShellExecuteW returns a value > 32 on success
_SHELLEXECUTE_OK = 32
_SW_SHOWNORMAL = 1

# Relative values would resolve against System32 in the elevated child.
_PATH_OPTIONS = ("--backup-path", "--config", "--log-file")


def _shell32() -> Any:
    try:
        import ctypes

        return ctypes.windll.shell32  # type: ignore[attr-defined]
    except (ImportError, AttributeError) as e:
        raise Fatal(2, "Elevation is only available on Windows") from e


def is_admin() -> bool:
    return bool(_shell32().IsUserAnAdmin())


def parse_whoami_csv(text: str) -> str:
    """
    `whoami /user /fo csv /nh` prints one row: "DOMAIN\\user","S-1-5-21-...".
    """
    for row in csv.reader(io.StringIO(text)):
        if len(row) >= 2 and row[-1].strip().upper().startswith("S-1-"):
            return row[-1].strip()
    raise IdentityError(msg=f"Cannot find a SID in whoami output: {text.strip()[:120]!r}")


def current_user_sid(logger: logging.Logger) -> str:
    try:
        cp = U.run_cmd(logger, ["whoami", "/user", "/fo", "csv", "/nh"], check=True, capture=True, timeout=30)
    except (OSError, subprocess.SubprocessError) as e:
        raise IdentityError(msg="Could not determine the current user's SID", cause=e) from e
    sid = parse_whoami_csv(cp.stdout or "")
    logger.debug("Current user SID: %s", sid)
    return sid


def _abspath(value: str) -> str:
    return str(Path(value).expanduser().resolve())


def absolutize_path_options(argv: Sequence[str]) -> List[str]:
    out: List[str] = []
    it = iter(argv)
    for arg in it:
        opt, eq, val = arg.partition("=")
        if opt not in _PATH_OPTIONS:
            out.append(arg)
        elif eq:
            out.append(f"{opt}={_abspath(val)}")
        else:
            out.append(arg)
            nxt = next(it, None)
            if nxt is not None:
                out.append(_abspath(nxt))
    return out


def build_relaunch_params(
    argv: Sequence[str],
    sid: str,
    backup_root: Optional[Path] = None,
    *,
    frozen: Optional[bool] = None,
) -> Tuple[str, str]:
    """
    Return (executable, parameter string) for ShellExecuteW.

    The child gets the caller's flags plus --elevated, --sid and an absolute
    --backup-root; --backup-path, --config and --log-file are made absolute.
    """
    if frozen is None:
        frozen = bool(getattr(sys, "frozen", False))

    args: List[str] = [a for a in absolutize_path_options(argv) if a != "--elevated"]
    args += ["--elevated", "--sid", sid]
    if backup_root is not None:
        args += ["--backup-root", str(Path(backup_root).expanduser().resolve())]

    if not frozen:
        args = ["-m", "gamebarfix"] + args
    return sys.executable, subprocess.list2cmdline(args)


def relaunch_elevated(
    logger: logging.Logger,
    argv: Sequence[str],
    sid: str,
    backup_root: Optional[Path] = None,
) -> bool:
    exe, params = build_relaunch_params(argv, sid, backup_root)
    logger.info("🛡️  Requesting elevation (UAC)...")
    logger.debug("Relaunch: %s %s", exe, params)
    ret = _shell32().ShellExecuteW(None, "runas", exe, params, None, _SW_SHOWNORMAL)
    ok = int(ret) > _SHELLEXECUTE_OK
    if not ok:
        logger.warning("Elevation was refused or failed (ShellExecuteW returned %s)", ret)
    return ok
