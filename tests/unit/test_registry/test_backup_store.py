# SPDX-License-Identifier: LGPL-3.0-or-later
import datetime as _dt
import json
import unittest
import tempfile
from pathlib import Path

from fakes.fake_logger import FakeLogger

from gamebarfix.core.exceptions import NotFoundError
from gamebarfix.registry.backup_store import MANIFEST_NAME, BackupStore, Manifest

NOW = _dt.datetime(2024, 3, 1, 12, 30, 5)
SID = "S-1-5-21-1-2-3-1001"


def _manifest(**existed):
    return Manifest(timestamp=NOW.isoformat(), sid=SID, existed=existed)


class TestBackupFolders(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name) / "backups"
        self.logger = FakeLogger()
        self.store = BackupStore(self.logger, self.root, clock=lambda: NOW)

    def tearDown(self):
        self._td.cleanup()

    def test_folder_named_by_timestamp(self):
        p = self.store.new_folder()

        self.assertEqual(p.name, "gamebarfix-20240301-123005")
        self.assertTrue(p.is_dir())

    def test_same_second_runs_get_suffixes(self):
        a = self.store.new_folder()
        b = self.store.new_folder()
        c = self.store.new_folder()

        self.assertEqual([a.name, b.name, c.name], [
            "gamebarfix-20240301-123005",
            "gamebarfix-20240301-123005-01",
            "gamebarfix-20240301-123005-02",
        ])
        # Newest (highest suffix) sorts first.
        self.assertEqual(self.store.latest(), c)

    def test_dry_run_creates_nothing(self):
        p = self.store.new_folder(dry_run=True)

        self.assertFalse(p.exists())
        self.assertFalse(self.root.exists())

    def test_latest_ignores_foreign_directories(self):
        self.root.mkdir(parents=True)
        (self.root / "zzz-not-a-backup").mkdir()
        (self.root / "gamebarfix-20231231-235959").mkdir()
        (self.root / "gamebarfix-20240101-000000").mkdir()
        (self.root / "gamebarfix-20250101-000000.txt").write_text("x")

        self.assertEqual(self.store.latest().name, "gamebarfix-20240101-000000")
        self.assertEqual([p.name for p in self.store.folders()], [
            "gamebarfix-20240101-000000",
            "gamebarfix-20231231-235959",
        ])

    def test_resolve_without_backups_is_not_found(self):
        with self.assertRaises(NotFoundError) as cm:
            self.store.resolve(None)
        self.assertEqual(cm.exception.code, 3)

    def test_resolve_explicit_missing_is_not_found(self):
        with self.assertRaises(NotFoundError):
            self.store.resolve(self.root / "nope")

    def test_resolve_explicit_existing(self):
        p = self.root / "custom"
        p.mkdir(parents=True)

        self.assertEqual(self.store.resolve(p), p)


class TestManifest(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.folder = Path(self._td.name)
        self.logger = FakeLogger()
        self.store = BackupStore(self.logger, self.folder, clock=lambda: NOW)

    def tearDown(self):
        self._td.cleanup()

    def test_manifest_key_order_and_values(self):
        m = _manifest(**{"gamedvr": True, "gameconfigstore": False, "ms-gamebar": True,
                         "ms-gamebarservices": False, "ms-gamingoverlay": False})
        self.store.write_manifest(self.folder, m)

        data = json.loads((self.folder / MANIFEST_NAME).read_text(encoding="utf-8"))
        self.assertEqual(list(data), [
            "timestamp",
            "sid",
            "gamedvr_existed",
            "gameconfigstore_existed",
            "ms_gamebar_existed",
            "ms_gamebarservices_existed",
            "ms_gamingoverlay_existed",
        ])
        self.assertEqual(data["sid"], SID)
        self.assertTrue(data["gamedvr_existed"])
        self.assertFalse(data["ms_gamingoverlay_existed"])

    def test_round_trip(self):
        m = _manifest(gamedvr=False, gameconfigstore=True)
        self.store.write_manifest(self.folder, m)

        back = self.store.read_manifest(self.folder)
        self.assertFalse(back.did_exist("gamedvr"))
        self.assertTrue(back.did_exist("gameconfigstore"))

    def test_missing_key_counts_as_existed(self):
        (self.folder / MANIFEST_NAME).write_text(json.dumps({"sid": SID, "gamedvr_existed": False}))

        m = self.store.read_manifest(self.folder)
        self.assertFalse(m.did_exist("gamedvr"))
        self.assertTrue(m.did_exist("ms-gamingoverlay"))

    def test_corrupt_manifest_is_ignored_with_warning(self):
        (self.folder / MANIFEST_NAME).write_text("{not json")

        self.assertIsNone(self.store.read_manifest(self.folder))
        self.assertTrue(self.logger.contains("Unreadable manifest", level="warning"))

    def test_non_object_manifest_is_ignored(self):
        (self.folder / MANIFEST_NAME).write_text("[1, 2]")

        self.assertIsNone(self.store.read_manifest(self.folder))

    def test_absent_manifest(self):
        self.assertIsNone(self.store.read_manifest(self.folder))
        self.assertFalse(self.store.has_manifest(self.folder))

    def test_dry_run_manifest_is_logged_not_written(self):
        self.store.write_manifest(self.folder, _manifest(gamedvr=True), dry_run=True)

        self.assertFalse((self.folder / MANIFEST_NAME).exists())
        self.assertTrue(self.logger.contains("[dry-run]"))

    def test_list_describes_each_backup(self):
        root = self.folder / "root"
        store = BackupStore(self.logger, root, clock=lambda: NOW)
        a = store.new_folder()
        store.write_manifest(a, _manifest(gamedvr=True))
        (a / "GameDVR.reg").write_bytes(b"\xff\xfe")

        infos = store.list()

        self.assertEqual(len(infos), 1)
        self.assertEqual(infos[0].name, a.name)
        self.assertEqual(infos[0].fragments, ["GameDVR.reg"])
        self.assertEqual(infos[0].manifest.sid, SID)


if __name__ == "__main__":
    unittest.main()
