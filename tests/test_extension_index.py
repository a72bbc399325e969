import unittest

from sourcebutler.core.extension_index import ExtensionIndex, ExtensionPanel, compute_displayed_extensions


def make_index():
    idx = ExtensionIndex()
    idx.add(".go", "/r/a")
    idx.add(".go", "/r/b")
    idx.add(".md", "/r/b")
    idx.add(".py", "/r")
    return idx.freeze()


class TestComputeDisplayedExtensions(unittest.TestCase):
    def test_only_selected_folders_count(self):
        idx = ExtensionIndex()
        idx.add(".go", "/A")
        idx.add(".go", "/B")
        idx.freeze()
        self.assertEqual(compute_displayed_extensions(idx, ["/A"]), {".go": 1})

    def test_zero_counts_are_dropped(self):
        shown = compute_displayed_extensions(make_index(), ["/r/a"])
        self.assertEqual(shown, {".go": 1})
        self.assertNotIn(0, shown.values())

    def test_counts(self):
        shown = compute_displayed_extensions(make_index(), ["/r", "/r/a", "/r/b"])
        self.assertEqual(shown, {".go": 2, ".md": 1, ".py": 1})
        self.assertEqual(compute_displayed_extensions(make_index(), []), {})


class TestExtensionPanel(unittest.TestCase):
    def test_new_extensions_checked_by_default(self):
        panel = ExtensionPanel(make_index())
        panel.refresh(["/r", "/r/a"])
        self.assertEqual([i.extension for i in panel.items], [".go", ".py"])
        self.assertTrue(all(i.is_checked for i in panel.items))
        self.assertEqual(panel.selected_extensions, {".go", ".py"})
        self.assertEqual(panel.item(".go").display_text, ".go (1 selected)")

    def test_counts_refresh_in_place_and_list_stays_sorted(self):
        panel = ExtensionPanel(make_index())
        panel.refresh(["/r/a"])
        go_item = panel.item(".go")
        panel.refresh(["/r", "/r/a", "/r/b"])
        self.assertIs(panel.item(".go"), go_item)
        self.assertEqual(go_item.selected_folder_count, 2)
        self.assertEqual([i.extension for i in panel.items], [".go", ".md", ".py"])

    def test_vanished_extension_leaves_selected_set(self):
        panel = ExtensionPanel(make_index())
        panel.refresh(["/r", "/r/b"])
        self.assertIn(".md", panel.selected_extensions)
        panel.refresh(["/r"])
        self.assertIsNone(panel.item(".md"))
        self.assertNotIn(".md", panel.selected_extensions)
        self.assertEqual(panel.selected_extensions, {".py"})

    def test_unchecked_state_survives_refresh(self):
        panel = ExtensionPanel(make_index())
        panel.refresh(["/r", "/r/a"])
        self.assertFalse(panel.toggle(".GO"))
        panel.refresh(["/r", "/r/a", "/r/b"])
        self.assertFalse(panel.item(".go").is_checked)
        self.assertNotIn(".go", panel.selected_extensions)
        self.assertTrue(panel.toggle("go"))
        self.assertTrue(panel.item(".go").is_checked)

    def test_seeded_panel_uses_saved_choice(self):
        panel = ExtensionPanel(make_index(), seeded_extensions=[".PY"])
        panel.refresh(["/r", "/r/a"])
        self.assertTrue(panel.item(".py").is_checked)
        self.assertFalse(panel.item(".go").is_checked)
        self.assertEqual(panel.selected_extensions, {".py"})


if __name__ == "__main__":
    unittest.main()
