# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Two-phase parse: config files become argparse defaults, CLI flags win.
"""

import io
import json
from contextlib import redirect_stdout

import pytest

from fakes.fake_logger import FakeLogger

from gamebarfix.cli.argument_parser import build_parser, parse_args_with_config


def _parse(argv):
    args, conf, _logger = parse_args_with_config(argv=argv, logger=FakeLogger())
    return args, conf


def test_defaults():
    args, conf = _parse([])

    assert conf == {}
    assert args.mode == "apply"
    assert args.dry_run is False
    assert args.no_pause is False
    assert args.elevated is False
    assert args.sid is None


def test_config_sets_values(tmp_path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("mode: restore\ndry_run: true\nbackup_root: D:/fix\nno_pause: true\n", encoding="utf-8")

    args, conf = _parse(["--config", str(cfg)])

    assert args.mode == "restore"
    assert args.dry_run is True
    assert args.no_pause is True
    assert args.backup_root == "D:/fix"
    assert conf["mode"] == "restore"


def test_cli_overrides_config(tmp_path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("mode: restore\nhandler_exe: C:/a.exe\n", encoding="utf-8")

    args, _conf = _parse(["--config", str(cfg), "--mode", "status", "--handler-exe", "C:/b.exe"])

    assert args.mode == "status"
    assert args.handler_exe == "C:/b.exe"


def test_multiple_configs_later_wins(tmp_path):
    base = tmp_path / "base.yaml"
    base.write_text("mode: restore\nno_elevate: true\n", encoding="utf-8")
    over = tmp_path / "over.yaml"
    over.write_text("mode: list\n", encoding="utf-8")

    args, _conf = _parse(["--config", str(base), "--config", str(over)])

    assert args.mode == "list"
    assert args.no_elevate is True


def test_mode_is_case_insensitive():
    args, _conf = _parse(["--mode", "RESTORE"])

    assert args.mode == "restore"


def test_unknown_mode_exits():
    with pytest.raises(SystemExit) as ei:
        _parse(["--mode", "explode"])
    assert "explode" in str(ei.value.code)


def test_bad_sid_exits():
    with pytest.raises(SystemExit):
        _parse(["--sid", "nobody"])


def test_sid_is_canonicalized():
    args, _conf = _parse(["--sid", "s-1-5-21-1-2-3-1001"])

    assert args.sid == "S-1-5-21-1-2-3-1001"


def test_dump_args_prints_and_exits():
    buf = io.StringIO()
    with redirect_stdout(buf), pytest.raises(SystemExit) as ei:
        _parse(["--dump-args", "--dry-run"])

    assert ei.value.code == 0
    assert json.loads(buf.getvalue())["dry_run"] is True


def test_dump_config_prints_and_exits(tmp_path):
    cfg = tmp_path / "cfg.json"
    cfg.write_text('{"mode": "status"}', encoding="utf-8")
    buf = io.StringIO()
    with redirect_stdout(buf), pytest.raises(SystemExit):
        _parse(["--config", str(cfg), "--dump-config"])

    assert json.loads(buf.getvalue()) == {"mode": "status"}


def test_elevated_flag_is_hidden_from_help():
    assert "--elevated" not in build_parser().format_help()
