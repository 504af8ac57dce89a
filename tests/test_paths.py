import unittest as ut
from ossdir.storage.paths import PathPrefixer, normalize_prefix
from ossdir.storage import InvalidKeyError, InvalidArgumentError


class TestPrefixNormalization(ut.TestCase):

    def test_empty_prefix(self):
        self.assertEqual(normalize_prefix(""), "")
        self.assertEqual(normalize_prefix(None), "")
        self.assertEqual(normalize_prefix("/"), "")

    def test_adds_trailing_slash(self):
        self.assertEqual(normalize_prefix("root"), "root/")

    def test_strips_surrounding_slashes(self):
        self.assertEqual(normalize_prefix("/root/sub/"), "root/sub/")

    def test_collapses_duplicate_separators(self):
        self.assertEqual(normalize_prefix("root//sub"), "root/sub/")


class TestPathPrefixer(ut.TestCase):

    def test_object_key(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_object_key("a/b.txt"), "root/a/b.txt")

    def test_object_key_without_prefix(self):
        p = PathPrefixer()
        self.assertEqual(p.to_object_key("a/b.txt"), "a/b.txt")

    def test_leading_slash_ignored(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_object_key("/a/b.txt"), "root/a/b.txt")

    def test_duplicate_separators_collapsed(self):
        p = PathPrefixer("root/")
        self.assertEqual(p.to_object_key("a//b.txt"), "root/a/b.txt")

    def test_empty_path_is_bare_prefix(self):
        self.assertEqual(PathPrefixer("root").to_object_key(""), "root/")
        self.assertEqual(PathPrefixer("").to_object_key(""), "")

    def test_directory_key(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_directory_key("a"), "root/a/")
        self.assertEqual(p.to_directory_key("a/"), "root/a/")
        self.assertEqual(p.to_directory_key(""), "root/")
        self.assertEqual(PathPrefixer().to_directory_key(""), "")

    def test_virtual_path(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_virtual_path("root/a/b.txt"), "a/b.txt")
        self.assertEqual(p.to_virtual_path("root/"), "")

    def test_directory_path(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_directory_path("root/a/b/"), "a/b")

    def test_key_outside_prefix(self):
        p = PathPrefixer("root")
        with self.assertRaises(InvalidKeyError) as h:
            p.to_virtual_path("other/a.txt")
        self.assertIsInstance(h.exception, InvalidArgumentError)
        self.assertIn("STORAGE-1001", str(h.exception))

    def test_prefix_round_trip(self):
        for prefix in ("", "root", "deeply/nested/root/"):
            p = PathPrefixer(prefix)
            for path in ("", "a", "a.txt", "a/b/c.txt", "a/b/", "with space/ü.txt"):
                with self.subTest(prefix=prefix, path=path):
                    self.assertEqual(p.to_virtual_path(p.to_object_key(path)), path)

    def test_idempotent(self):
        p = PathPrefixer("root")
        self.assertEqual(p.to_object_key("a/b"), p.to_object_key("a/b"))
        self.assertEqual(p.prefix, "root/")
