# SPDX-License-Identifier: LGPL-3.0-or-later
import subprocess
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

import pytest

from fakes.fake_logger import FakeLogger
from fakes.fake_winreg import FakeWinreg

from gamebarfix.core.exceptions import Fatal
from gamebarfix.registry.backend import RegExe, WinRegBackend
from gamebarfix.registry.paths import RegValue

KEY = r"HKEY_USERS\S-1-5-21-1-2-3-1001\System\GameConfigStore"


def _cp(rc, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=rc, stdout=stdout, stderr=stderr)


class TestRegExe(unittest.TestCase):
    def setUp(self):
        self.logger = FakeLogger()
        self.reg = RegExe(self.logger)

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_export_command_line(self, run):
        run.return_value = _cp(0)

        ok = self.reg.export(KEY, Path("out/GameConfigStore.reg"))

        self.assertTrue(ok)
        cmd = run.call_args[0][0]
        self.assertEqual(cmd, ["reg.exe", "export", KEY, str(Path("out/GameConfigStore.reg")), "/y"])
        self.assertFalse(run.call_args[1]["check"])

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_import_and_delete_command_lines(self, run):
        run.return_value = _cp(0)

        self.reg.import_(Path("GameDVR.reg"))
        self.reg.delete(KEY)

        self.assertEqual(run.call_args_list[0][0][0], ["reg.exe", "import", "GameDVR.reg"])
        self.assertEqual(run.call_args_list[1][0][0], ["reg.exe", "delete", KEY, "/f"])

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_nonzero_exit_is_warning(self, run):
        run.return_value = _cp(1, stderr="ERROR: The system was unable to find the specified registry key or value.")

        self.assertFalse(self.reg.export(KEY, Path("x.reg")))
        self.assertTrue(self.logger.contains("unable to find", level="warning"))

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_missing_reg_exe_is_warning(self, run):
        run.side_effect = FileNotFoundError("reg.exe")

        self.assertFalse(self.reg.import_(Path("x.reg")))
        self.assertTrue(self.logger.contains("failed to start", level="warning"))

    @patch("gamebarfix.core.utils.subprocess.run")
    def test_timeout_is_warning(self, run):
        run.side_effect = subprocess.TimeoutExpired(cmd="reg.exe", timeout=60)

        self.assertFalse(self.reg.delete(KEY))


@pytest.mark.skipif(sys.platform == "win32", reason="winreg is present on Windows")
def test_winreg_backend_needs_windows():
    with pytest.raises(Fatal) as ei:
        WinRegBackend(FakeLogger())
    assert "Windows" in str(ei.value)


def test_winreg_backend_reads_current_user():
    pytest.importorskip("winreg")
    backend = WinRegBackend(FakeLogger())

    assert backend.key_exists(r"HKCU\Software")
    assert not backend.key_exists(r"HKCU\Software\gamebarfix-test-does-not-exist")
    assert backend.get_value(r"HKCU\Software\gamebarfix-test-does-not-exist", "x") is None
    with pytest.raises(ValueError):
        backend.key_exists(r"HKCR\.txt")


@pytest.fixture
def fake_winreg(monkeypatch):
    fake = FakeWinreg()
    monkeypatch.setitem(sys.modules, "winreg", fake)
    return fake


@pytest.fixture
def live(fake_winreg):
    return WinRegBackend(FakeLogger())


SUB = r"S-1-5-21-1-2-3-1001\System\GameConfigStore"


def test_set_value_creates_key_and_writes_dword(fake_winreg, live):
    live.set_value(KEY, "GameDVR_Enabled", RegValue("REG_DWORD", 0))

    assert ("CreateKeyEx", fake_winreg.HKEY_USERS, SUB, fake_winreg.KEY_WRITE) in fake_winreg.calls
    assert fake_winreg.values(fake_winreg.HKEY_USERS, SUB) == {"GameDVR_Enabled": (0, fake_winreg.REG_DWORD)}


def test_set_default_string_value(fake_winreg, live):
    path = r"HKU\S-1-5-21-1-2-3-1001\Software\Classes\ms-gamebar"

    live.set_value(path, "", RegValue("REG_SZ", "URL:ms-gamebar"))

    sub = r"S-1-5-21-1-2-3-1001\Software\Classes\ms-gamebar"
    assert fake_winreg.values(fake_winreg.HKEY_USERS, sub)[""] == ("URL:ms-gamebar", fake_winreg.REG_SZ)


def test_get_value_maps_registry_types(fake_winreg, live):
    vals = fake_winreg.add_key(fake_winreg.HKEY_USERS, SUB)
    vals["GameDVR_Enabled"] = (1, fake_winreg.REG_DWORD)
    vals["Odd"] = (b"\x00", 99)

    assert live.get_value(KEY, "GameDVR_Enabled") == RegValue("REG_DWORD", 1)
    assert live.get_value(KEY, "Odd") == RegValue("REG_TYPE_99", b"\x00")


def test_missing_key_and_value_read_as_absent(fake_winreg, live):
    assert live.key_exists(KEY) is False
    assert live.get_value(KEY, "GameDVR_Enabled") is None

    fake_winreg.add_key(fake_winreg.HKEY_USERS, SUB)

    assert live.key_exists(KEY) is True
    assert live.get_value(KEY, "GameDVR_Enabled") is None


def test_delete_default_value(fake_winreg, live):
    fake_winreg.add_key(fake_winreg.HKEY_USERS, SUB)[""] = ("x", fake_winreg.REG_SZ)

    assert live.delete_value(KEY, "") is True
    assert fake_winreg.values(fake_winreg.HKEY_USERS, SUB) == {}
    assert fake_winreg.calls[-1] == ("DeleteValue", (fake_winreg.HKEY_USERS, SUB.lower()), "")


def test_delete_value_missing_returns_false(fake_winreg, live):
    assert live.delete_value(KEY, "GameDVR_Enabled") is False

    fake_winreg.add_key(fake_winreg.HKEY_USERS, SUB)

    assert live.delete_value(KEY, "GameDVR_Enabled") is False


def test_unknown_root_is_rejected(live):
    with pytest.raises(ValueError):
        live.get_value(r"HKCR\.txt", "")
    with pytest.raises(ValueError):
        live.set_value(r"HKEY_CLASSES_ROOT\ms-gamebar", "", RegValue("REG_SZ", "x"))


def test_subtree_operations_go_through_reg_exe(live):
    with patch.object(live.reg, "export", return_value=True) as export, patch.object(
        live.reg, "delete", return_value=False
    ) as delete:
        assert live.export_key(KEY, Path("out.reg")) is True
        assert live.delete_key(KEY) is False
    export.assert_called_once_with(KEY, Path("out.reg"))
    delete.assert_called_once_with(KEY)


if __name__ == "__main__":
    unittest.main()
