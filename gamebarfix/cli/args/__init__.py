# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/cli/args/__init__.py
"""
Argument parser modules for the gamebarfix CLI.
"""
from __future__ import annotations

from .builder import HelpFormatter, _build_epilog
from .groups import (
    MODES,
    _add_backup_paths,
    _add_elevation,
    _add_global_config_logging,
    _add_operation,
    _add_target,
)
from .helpers import _default_backup_root, _merged_get, _require, _resolve_backup_path, _resolve_backup_root
from .parser import _build_preparser, _load_merged_config, build_parser, parse_args_with_config
from .validators import validate_args

__all__ = [
    # Builder
    "HelpFormatter",
    "_build_epilog",
    # Groups
    "MODES",
    "_add_backup_paths",
    "_add_elevation",
    "_add_global_config_logging",
    "_add_operation",
    "_add_target",
    # Helpers
    "_default_backup_root",
    "_merged_get",
    "_require",
    "_resolve_backup_path",
    "_resolve_backup_root",
    # Parser
    "_build_preparser",
    "_load_merged_config",
    "build_parser",
    "parse_args_with_config",
    # Validators
    "validate_args",
]
