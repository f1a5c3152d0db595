"""Tests for the treefind command line."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from treefind import main, open_target


class TestMain(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        os.mkdir(os.path.join(self.root, "sub"))
        for rel, data in [("a.txt", b"a"), ("big.bin", b"x" * 4096), (os.path.join("sub", "b.txt"), b"b")]:
            with open(os.path.join(self.root, rel), "wb") as f:
                f.write(data)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv) -> list[str]:
        out = io.StringIO()
        with redirect_stdout(out):
            main(list(argv))
        return out.getvalue().splitlines()

    def test_dir(self):
        lines = self._run(self.root, "-n", "*.TXT", "-r")
        self.assertEqual(lines, [
            os.path.join(self.root, "a.txt"),
            os.path.join(self.root, "sub", "b.txt"),
        ])

    def test_type_dir(self):
        self.assertEqual(self._run(self.root, "-t", "dir"), [os.path.join(self.root, "sub")])

    def test_filter_long(self):
        lines = self._run(self.root, "-f", "size>=", "1k", "-l")
        self.assertEqual(lines, [os.path.join(self.root, "big.bin") + "\tdir=False size=4096"])

    def test_json(self):
        out = "\n".join(self._run(self.root, "-r", "-n", "b*", "--json"))
        self.assertEqual(json.loads(out), {
            os.path.join(self.root, "big.bin"): {"dir": False, "name": "big.bin"},
            os.path.join(self.root, "sub", "b.txt"): {"dir": False, "name": "b.txt"},
        })

    def test_not_a_directory(self):
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            main([os.path.join(self.root, "a.txt")])
        self.assertEqual(cm.exception.code, 1)
        self.assertIn("Not a directory", err.getvalue())

    def test_bad_filter_key(self):
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit):
            main([self.root, "-f", "colour", "red"])
        self.assertIn("Unknown filter key", err.getvalue())

    def test_bad_regex(self):
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            main([self.root, "-f", "name//", "("])
        self.assertEqual(cm.exception.code, 1)
        self.assertIn("Bad regular expression", err.getvalue())


class TestOpenTarget(unittest.TestCase):
    def test_local(self):
        from backend_local import LocalBackend
        backend, path = open_target("/tmp")
        self.assertIsInstance(backend, LocalBackend)
        self.assertEqual(path, "/tmp")

    def test_file_url(self):
        from backend_local import LocalBackend
        backend, path = open_target("file:///var/my%20dir")
        self.assertIsInstance(backend, LocalBackend)
        self.assertEqual(path, "/var/my dir")

    def test_unsupported(self):
        with self.assertRaises(ValueError):
            open_target("http://example.com/")


if __name__ == "__main__":
    unittest.main()
