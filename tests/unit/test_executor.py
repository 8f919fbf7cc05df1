import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch
from foldertree.errors import FileOperationError
from foldertree.structure import Operation, OpKind, apply_operations, parse_text, to_operations


class TestExecutor(unittest.TestCase):
    def test_creates_tree(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ops = to_operations(parse_text("app\n  src\n    main.py\n  README.md"), tmpdir)
            created = apply_operations(ops)

            root = Path(tmpdir)
            self.assertEqual(created, 4)
            self.assertTrue((root / "app" / "src").is_dir())
            self.assertTrue((root / "app" / "src" / "main.py").is_file())
            self.assertEqual((root / "app" / "README.md").read_text(), "")

    def test_idempotent_without_overwrite(self):
        """Second run re-ensures directories but skips existing files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            ops = to_operations(parse_text("app\n  a.txt\n  b.txt"), tmpdir)

            self.assertEqual(apply_operations(ops), 3)
            self.assertEqual(apply_operations(ops), 1)

    def test_existing_file_kept_without_overwrite(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "notes.txt"
            target.write_text("keep me")

            ops = [Operation(OpKind.WRITE_FILE, str(target), "replacement")]
            self.assertEqual(apply_operations(ops, overwrite_files=False), 0)
            self.assertEqual(target.read_text(), "keep me")

    def test_overwrite_replaces_content(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "notes.txt"
            target.write_text("old")

            ops = [Operation(OpKind.WRITE_FILE, str(target), "new")]
            self.assertEqual(apply_operations(ops, overwrite_files=True), 1)
            self.assertEqual(target.read_text(), "new")

    def test_missing_parent_is_created(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            target = os.path.join(tmpdir, "deep", "er", "file.txt")
            apply_operations([Operation(OpKind.WRITE_FILE, target, "x")])
            self.assertTrue(os.path.isfile(target))

    def test_io_failure_stops_batch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ops = [
                Operation(OpKind.MKDIR, os.path.join(tmpdir, "first")),
                Operation(OpKind.WRITE_FILE, os.path.join(tmpdir, "first", "a.txt"), "a"),
                Operation(OpKind.MKDIR, os.path.join(tmpdir, "second")),
            ]
            with patch("foldertree.structure.executor.open", side_effect=PermissionError("denied"), create=True):
                with self.assertRaises(FileOperationError) as ctx:
                    apply_operations(ops)

            self.assertEqual(ctx.exception.path, os.path.join(tmpdir, "first", "a.txt"))
            self.assertTrue(os.path.isdir(os.path.join(tmpdir, "first")))
            self.assertFalse(os.path.exists(os.path.join(tmpdir, "second")))


if __name__ == "__main__":
    unittest.main()
