# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/cli/args/validators.py
from __future__ import annotations

import argparse
from typing import Any, Dict

from ...core.exceptions import IdentityError
from ...registry.paths import validate_sid
from .groups import MODES
from .helpers import _merged_get, _require


def _validate_mode(args: argparse.Namespace, conf: Dict[str, Any]) -> str:
    mode = str(_merged_get(args, conf, "mode") or "apply").strip().lower()
    if mode not in MODES:
        raise SystemExit(f"Unknown mode={mode!r}. Use one of: {', '.join(MODES)}.")
    return mode


def _validate_sid_arg(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    sid = _merged_get(args, conf, "sid")
    if not _require(sid):
        return
    try:
        args.sid = validate_sid(str(sid))
    except IdentityError as e:
        raise SystemExit(f"--sid: {e}")


def _validate_handler_exe(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    exe = _merged_get(args, conf, "handler_exe")
    if exe is not None and not _require(exe):
        raise SystemExit("--handler-exe must not be empty")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    """
    Normalizes args in place:
      - mode lower-cased and checked against the supported modes
      - sid canonicalized (leading 'S' upper-cased) when given
    """
    args.mode = _validate_mode(args, conf)
    _validate_sid_arg(args, conf)
    _validate_handler_exe(args, conf)
