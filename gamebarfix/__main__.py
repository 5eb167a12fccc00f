# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/__main__.py
from __future__ import annotations

import argparse
import sys
import traceback
from typing import Optional, Sequence

from .cli.argument_parser import parse_args_with_config
from .core.exceptions import Fatal, format_exception_for_cli
from .orchestrator.orchestrator import Orchestrator


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Best-effort logging without assuming logger exists or has a given method.
    """
    if logger is None:
        _print_stderr(msg)
        return

    fn = getattr(logger, level, None)
    if callable(fn):
        fn(msg)
    else:
        _print_stderr(msg)


def _pause(args, orch: Optional[Orchestrator]) -> None:
    if getattr(args, "no_pause", False):
        return
    if orch is not None and orch.relaunched:
        return
    if not sys.stdin or not sys.stdin.isatty():
        return
    try:
        input("Press Enter to close...")
    except EOFError:
        pass


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger: Optional[object] = None

    # Phase 1: parse (Fatal can happen here)
    try:
        args, conf, logger = parse_args_with_config(argv)
    except Fatal as e:
        if logger is None:
            _print_stderr(f"💥 ERROR    {e}")
        # No parsed args yet; only the raw flag can suppress the pause.
        raw = list(argv) if argv is not None else sys.argv[1:]
        _pause(argparse.Namespace(no_pause="--no-pause" in raw), None)
        raise SystemExit(getattr(e, "code", 1))
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(130)

    # Phase 2: run the selected mode
    orch: Optional[Orchestrator] = None
    try:
        orch = Orchestrator(logger, args, conf=conf, argv=argv)
        rc = orch.run()
    except Fatal as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=getattr(args, "verbose", 0)))
        rc = getattr(e, "code", 1)
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(130)
    except Exception as e:
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        rc = 1

    _pause(args, orch)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
