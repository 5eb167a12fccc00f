# SPDX-License-Identifier: LGPL-3.0-or-later
import datetime as _dt
import subprocess
import unittest
import tempfile
from pathlib import Path
from unittest.mock import patch

from fakes.fake_logger import FakeLogger

from gamebarfix.core.exceptions import Fatal
from gamebarfix.core.utils import U


class TestUtilsFileOperations(unittest.TestCase):
    def test_ensure_dir_creates_directory(self):
        with tempfile.TemporaryDirectory() as td:
            new_dir = Path(td) / "subdir" / "nested"

            U.ensure_dir(new_dir)

            self.assertTrue(new_dir.is_dir())

    def test_atomic_write_replaces_content(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "deep" / "prestate.json"

            U.atomic_write_text(p, "one")
            U.atomic_write_text(p, "two")

            self.assertEqual(p.read_text(encoding="utf-8"), "two")
            self.assertEqual([x.name for x in p.parent.iterdir()], ["prestate.json"])

    def test_now_ts_format(self):
        self.assertEqual(U.now_ts(_dt.datetime(2024, 1, 2, 3, 4, 5)), "20240102-030405")

    def test_json_dump_is_sorted(self):
        self.assertEqual(U.json_dump({"b": 1, "a": Path("x")}).splitlines()[1].strip(), '"a": "x",')


class TestRunCmd(unittest.TestCase):
    @patch("gamebarfix.core.utils.subprocess.run")
    def test_called_process_error_becomes_fatal(self, run):
        run.side_effect = subprocess.CalledProcessError(3, ["reg.exe"], output="", stderr="nope")
        logger = FakeLogger()

        with self.assertRaises(Fatal) as cm:
            U.run_cmd(logger, ["reg.exe"], fatal=True)

        self.assertEqual(cm.exception.code, 3)
        self.assertTrue(logger.contains("Command failed", level="error"))

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_called_process_error_reraised(self, run):
        run.side_effect = subprocess.CalledProcessError(1, ["reg.exe"])

        with self.assertRaises(subprocess.CalledProcessError):
            U.run_cmd(FakeLogger(), ["reg.exe"])

    def test_die_logs_and_raises(self):
        logger = FakeLogger()
        with self.assertRaises(Fatal):
            U.die(logger, "bad", 2)
        self.assertEqual(logger.messages("error"), ["bad"])


if __name__ == "__main__":
    unittest.main()
