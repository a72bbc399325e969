import unittest
import json
import shutil
import tempfile
from pathlib import Path

from sourcebutler.config import CONFIG_FILENAME
from sourcebutler.core.settings_manager import ConfigStore, Configuration


class TestConfigStore(unittest.TestCase):
    def setUp(self):
        self.base = Path(tempfile.mkdtemp()).resolve()
        (self.base / "src").mkdir()

    def tearDown(self):
        if self.base.exists():
            shutil.rmtree(self.base)

    def test_missing_config_is_none(self):
        self.assertIsNone(ConfigStore(str(self.base)).load())

    def test_unparsable_config_is_none(self):
        (self.base / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        store = ConfigStore(str(self.base))
        self.assertIsNone(store.load())
        self.assertTrue(store.last_error)

    def test_non_object_config_is_none(self):
        (self.base / CONFIG_FILENAME).write_text("[1, 2]", encoding="utf-8")
        self.assertIsNone(ConfigStore(str(self.base)).load())

    def test_save_then_load(self):
        store = ConfigStore(str(self.base))
        cfg = Configuration(
            selected_folders=[str(self.base), str(self.base / "src")],
            selected_extensions=[".py"],
            last_root_directory=str(self.base),
        )
        self.assertTrue(store.save(cfg))
        raw = json.loads((self.base / CONFIG_FILENAME).read_text(encoding="utf-8"))
        self.assertEqual(raw["last_root_directory"], str(self.base))
        self.assertEqual(ConfigStore(str(self.base)).load(), cfg)

    def test_from_dict_tolerates_bad_fields(self):
        cfg = Configuration.from_dict({"selected_folders": "nope", "selected_extensions": [".py", 3]})
        self.assertEqual(cfg.selected_folders, [])
        self.assertEqual(cfg.selected_extensions, [".py"])
        self.assertEqual(cfg.last_root_directory, "")
        self.assertFalse(cfg.same_root(str(self.base)))

    def test_validate_drops_stale_entries(self):
        cfg = Configuration(
            selected_folders=[str(self.base / "src"), str(self.base / "gone"), str(self.base / ".git")],
            selected_extensions=[".py", "", "md"],
            last_root_directory=str(self.base),
        )
        (self.base / ".git").mkdir()
        result = cfg.validate()
        self.assertEqual(cfg.selected_folders, [str(self.base / "src")])
        self.assertEqual(cfg.selected_extensions, [".py"])
        self.assertTrue(result.has_changes)
        self.assertEqual(result.summary(), "Removed 2 invalid folder(s), Removed 2 invalid extension(s)")


if __name__ == "__main__":
    unittest.main()
