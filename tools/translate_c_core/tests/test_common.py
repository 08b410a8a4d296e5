from __future__ import annotations

import contextlib
import io
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "translate_c_core" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from translate_c_core.common import TranslateCError, write_if_changed, write_json


class WriteIfChangedTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_writes_new_file_and_skips_identical_content(self) -> None:
        path = self.root / "out" / "bindings.zig"

        self.assertEqual(write_if_changed(path, "pub const A = 1;\n", check=False, dry_run=False), 0)
        self.assertEqual(path.read_text(encoding="utf-8"), "pub const A = 1;\n")
        self.assertEqual(write_if_changed(path, "pub const A = 1;\n", check=True, dry_run=False), 0)

    def test_check_prints_diff_without_writing(self) -> None:
        path = self.root / "bindings.zig"
        path.write_text("pub const A = 1;\n", encoding="utf-8")
        stdout = io.StringIO()

        with contextlib.redirect_stdout(stdout):
            code = write_if_changed(path, "pub const A = 2;\n", check=True, dry_run=False)

        self.assertEqual(code, 1)
        self.assertIn("-pub const A = 1;", stdout.getvalue())
        self.assertIn("+pub const A = 2;", stdout.getvalue())
        self.assertEqual(path.read_text(encoding="utf-8"), "pub const A = 1;\n")

    def test_dry_run_does_not_write(self) -> None:
        path = self.root / "bindings.zig"
        stdout = io.StringIO()

        with contextlib.redirect_stdout(stdout):
            code = write_if_changed(path, "pub const A = 1;\n", check=False, dry_run=True)

        self.assertEqual(code, 0)
        self.assertFalse(path.exists())
        self.assertIn("[dry-run] would write", stdout.getvalue())

    def test_io_failures_raise_tool_error(self) -> None:
        blocker = self.root / "blocker"
        blocker.write_text("", encoding="utf-8")
        folder = self.root / "folder"
        folder.mkdir()

        with self.assertRaises(TranslateCError):
            write_if_changed(blocker / "bindings.zig", "x", check=False, dry_run=False)
        with self.assertRaises(TranslateCError):
            write_if_changed(folder, "x", check=False, dry_run=False)
        with self.assertRaises(TranslateCError):
            write_json(blocker / "report.json", {"status": "pass"})


if __name__ == "__main__":
    unittest.main()
