import os
import unittest
from foldertree.errors import ValidationError
from foldertree.structure import (
    InternalTree,
    Operation,
    OpKind,
    ParsedTextTree,
    parse_text,
    to_operations,
)

BASE = os.path.join(os.sep, "out")


class TestTextOperations(unittest.TestCase):
    def test_pre_order(self):
        ops = to_operations(ParsedTextTree(parse_text("project\n  src\n    main.py\n  README.md")), BASE)

        self.assertEqual(
            [(op.kind, op.path) for op in ops],
            [
                (OpKind.MKDIR, os.path.join(BASE, "project")),
                (OpKind.MKDIR, os.path.join(BASE, "project", "src")),
                (OpKind.WRITE_FILE, os.path.join(BASE, "project", "src", "main.py")),
                (OpKind.WRITE_FILE, os.path.join(BASE, "project", "README.md")),
            ],
        )

    def test_directory_before_its_files(self):
        ops = to_operations(parse_text("a\n  b\n    c.txt\n  d.txt\ne\n  f.txt"), BASE)

        index = {op.path: i for i, op in enumerate(ops)}
        for i, op in enumerate(ops):
            parent = os.path.dirname(op.path)
            if parent != BASE:
                self.assertLess(index[parent], i)
                self.assertEqual(ops[index[parent]].kind, OpKind.MKDIR)

    def test_root_sentinel_not_emitted(self):
        ops = to_operations(parse_text("only.txt"), BASE)
        self.assertEqual(len(ops), 1)
        self.assertEqual(ops[0].path, os.path.join(BASE, "only.txt"))
        self.assertEqual(ops[0].content, "")


class TestInternalTreeOperations(unittest.TestCase):
    def setUp(self):
        self.tree = {
            "rootId": "root",
            "items": {
                "root": {"data": {"title": "app"}, "children": ["main", "docs", "gone"]},
                "main": {"data": {"title": "main.py", "content": "print('hi')\n"}, "children": ["stray"]},
                "stray": {"data": {"title": "never"}, "children": []},
                "docs": {"data": {"title": " docs "}, "children": []},
            },
        }

    def test_walks_from_root_id(self):
        ops = to_operations(InternalTree.from_dict(self.tree), BASE)

        self.assertEqual(
            [(op.kind, op.path) for op in ops],
            [
                (OpKind.MKDIR, os.path.join(BASE, "app")),
                (OpKind.WRITE_FILE, os.path.join(BASE, "app", "main.py")),
                (OpKind.MKDIR, os.path.join(BASE, "app", "docs")),
            ],
        )
        self.assertEqual(ops[1].content, "print('hi')\n")

    def test_file_children_ignored(self):
        ops = to_operations(InternalTree.from_dict(self.tree), BASE)
        self.assertFalse(any("never" in op.path for op in ops))

    def test_empty_title_rejected(self):
        self.tree["items"]["docs"]["data"]["title"] = "   "
        with self.assertRaises(ValidationError):
            to_operations(InternalTree.from_dict(self.tree), BASE)

    def test_malformed_shape_rejected(self):
        for bad in (None, [], {"rootId": "r"}, {"items": {}, "rootId": ""}, {"items": [], "rootId": "r"}):
            with self.assertRaises(ValidationError):
                InternalTree.from_dict(bad)


class TestOperation(unittest.TestCase):
    def test_bytes_are_utf8_length(self):
        op = Operation(OpKind.WRITE_FILE, "/out/a.txt", "héllo")
        self.assertEqual(op.bytes, 6)
        self.assertEqual(Operation(OpKind.MKDIR, "/out/a").bytes, 0)

    def test_to_dict(self):
        self.assertEqual(Operation(OpKind.MKDIR, "/out/a").to_dict(), {"op": "mkdir", "path": "/out/a"})
        self.assertEqual(
            Operation(OpKind.WRITE_FILE, "/out/a.txt").to_dict(),
            {"op": "writeFile", "path": "/out/a.txt", "bytes": 0, "content": ""},
        )

    def test_from_dict_rejects_unknown_op(self):
        with self.assertRaises(ValidationError):
            Operation.from_dict({"op": "delete", "path": "/out/a"})


if __name__ == "__main__":
    unittest.main()
