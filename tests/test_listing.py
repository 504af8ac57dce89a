import unittest as ut
from ossdir.storage import ListingEntry, BackendError, InvalidArgumentError
from ossdir.storage.listing import ListingEngine
from ossdir.storage.paths import PathPrefixer
from ossdir.util import HaltFlag, HaltInterrupt
from .mock_oss import MockObjectStore


class _StopHaltFlag(HaltFlag):

    def _should_continue(self) -> bool:
        return False


def _engine(store: MockObjectStore, prefix: str = "root", **kwargs) -> ListingEngine:
    return ListingEngine(store, "test-bucket", PathPrefixer(prefix), **kwargs)


def _tree(n_files: int, n_dirs: int) -> dict:
    objects = {"root/d/": b""}
    for i in range(n_files):
        objects[f"root/d/file{i:03}.txt"] = b"x" * (i + 1)
    for i in range(n_dirs):
        if i % 2:
            objects[f"root/d/sub{i:03}/"] = b""
        else:
            objects[f"root/d/sub{i:03}/inner.txt"] = b"inner"
    objects["root/other.txt"] = b"other"
    return objects


class TestListing(ut.TestCase):

    def test_files_and_directories(self):
        store = MockObjectStore({
            "root/a.txt": b"hello",
            "root/b/c.txt": b"world",
        })
        entries = _engine(store).list("")
        self.assertEqual(entries, [
            ListingEntry.directory("b"),
            ListingEntry.file("a.txt", 1700000000, 5),
        ])

    def test_listing_requests(self):
        store = MockObjectStore({"root/d/a.txt": b"a"})
        _engine(store, max_keys=10).list("d")
        self.assertEqual(store.calls, [("list_objects", "test-bucket", "root/d/", "/", "", 10)])

    def test_marker_only_directory_is_empty(self):
        store = MockObjectStore({"root/empty/": b""})
        self.assertEqual(_engine(store).list("empty"), [])

    def test_marker_directory_is_listed_by_parent(self):
        store = MockObjectStore({"root/empty/": b""})
        self.assertEqual(_engine(store).list(""), [ListingEntry.directory("empty")])

    def test_non_empty_object_at_directory_key_is_kept(self):
        store = MockObjectStore({"root/odd/": b"data"})
        self.assertEqual(_engine(store).list("odd"), [ListingEntry.file("odd/", 1700000000, 4)])

    def test_root_marker_suppressed(self):
        store = MockObjectStore({"root/": b"", "root/a.txt": b"a"})
        self.assertEqual(_engine(store).list(""), [ListingEntry.file("a.txt", 1700000000, 1)])

    def test_no_prefix(self):
        store = MockObjectStore({"a.txt": b"a", "b/c.txt": b"c"})
        entries = _engine(store, prefix="").list("")
        self.assertEqual([e.path for e in entries], ["b", "a.txt"])

    def test_leading_slash_directory(self):
        store = MockObjectStore({"root/d/a.txt": b"a"})
        self.assertEqual([e.path for e in _engine(store).list("/d")], ["d/a.txt"])

    def test_counts_across_page_sizes(self):
        n_files = 5
        n_dirs = 4
        store = MockObjectStore(_tree(n_files, n_dirs))
        total = n_files + n_dirs
        for page_size in (1, 2, n_files - 1, n_files, n_files + 1, total - 1, total, total + 1, 1000):
            with self.subTest(page_size=page_size):
                entries = _engine(store, max_keys=page_size).list("d")
                files = [e for e in entries if not e.is_dir()]
                dirs = [e for e in entries if e.is_dir()]
                self.assertEqual(len(files), n_files)
                self.assertEqual(len(dirs), n_dirs)
                self.assertEqual(len(set(e.path for e in entries)), total)
                self.assertNotIn("d/", [e.path for e in entries])

    def test_multiple_pages_requested(self):
        store = MockObjectStore(_tree(6, 0))
        _engine(store, max_keys=2).list("d")
        markers = [c[4] for c in store.calls if c[0] == "list_objects"]
        self.assertEqual(markers[0], "")
        self.assertGreater(len(markers), 2)
        self.assertEqual(len(markers), len(set(markers)))

    def test_recursive_three_levels(self):
        store = MockObjectStore({
            "root/a/1.txt": b"1",
            "root/a/b/2.txt": b"22",
            "root/a/b/c/": b"",
            "root/a/b/c/3.txt": b"333",
            "root/top.txt": b"top",
        })
        entries = _engine(store).list("", recursive=True)
        self.assertEqual([(e.type, e.path) for e in entries], [
            ("dir", "a"),
            ("dir", "a/b"),
            ("dir", "a/b/c"),
            ("file", "a/b/c/3.txt"),
            ("file", "a/b/2.txt"),
            ("file", "a/1.txt"),
            ("file", "top.txt"),
        ])

    def test_recursive_directories_once_with_small_pages(self):
        objects = {}
        for d in ("x", "x/y", "x/y/z"):
            for i in range(3):
                objects[f"root/{d}/f{i}.txt"] = b"f"
        store = MockObjectStore(objects)
        entries = _engine(store, max_keys=2).list("", recursive=True)
        dirs = [e.path for e in entries if e.is_dir()]
        self.assertEqual(dirs, ["x", "x/y", "x/y/z"])
        self.assertEqual(len([e for e in entries if not e.is_dir()]), 9)

    def test_non_recursive_does_not_descend(self):
        store = MockObjectStore({"root/a/b/c.txt": b"c"})
        self.assertEqual(_engine(store).list("", recursive=False), [ListingEntry.directory("a")])

    def test_failure_on_second_page_yields_empty(self):
        store = MockObjectStore(_tree(6, 2), fail_on={"list_objects": [2]})
        self.assertEqual(_engine(store, max_keys=2).list("d"), [])

    def test_failure_in_nested_listing_yields_empty(self):
        store = MockObjectStore({
            "root/a/b/c.txt": b"c",
            "root/top.txt": b"t",
        }, fail_on={"list_objects": [3]})
        self.assertEqual(_engine(store).list("", recursive=True), [])

    def test_failure_distinguished_by_strict_listing(self):
        store = MockObjectStore(_tree(6, 2), fail_on={"list_objects": [2]})
        with self.assertRaises(BackendError):
            _engine(store, max_keys=2).list_strict("d")

    def test_empty_directory_strict_listing(self):
        store = MockObjectStore({})
        self.assertEqual(_engine(store).list_strict("nothing"), [])

    def test_depth_bound(self):
        store = MockObjectStore({"root/a/b/c/d.txt": b"d"})
        with self.assertRaises(InvalidArgumentError):
            _engine(store, max_depth=1).list("", recursive=True)
        self.assertEqual(len(_engine(store, max_depth=3).list("", recursive=True)), 4)

    def test_self_referential_prefix_skipped(self):
        store = MockObjectStore({"root/a//x.txt": b"x", "root/a/y.txt": b"y"})
        entries = _engine(store, max_depth=5).list("a", recursive=True)
        self.assertEqual([e.path for e in entries], ["a/y.txt"])

    def test_invalid_page_size(self):
        with self.assertRaises(InvalidArgumentError):
            _engine(MockObjectStore(), max_keys=0)
        with self.assertRaises(InvalidArgumentError):
            _engine(MockObjectStore(), max_keys=1001)

    def test_halt_flag(self):
        store = MockObjectStore({"root/a.txt": b"a"})
        with self.assertRaises(HaltInterrupt):
            _engine(store, halt_flag=_StopHaltFlag()).list("")

    def test_iter_keys_is_flat(self):
        store = MockObjectStore({
            "root/d/": b"",
            "root/d//x.txt": b"x",
            "root/d/e/f.txt": b"f",
            "root/other.txt": b"o",
        })
        keys = [k for k in _engine(store, max_keys=1).iter_keys("d")]
        self.assertEqual(keys, ["root/d/", "root/d//x.txt", "root/d/e/f.txt"])
        self.assertTrue(all(c[3] == "" for c in store.calls if c[0] == "list_objects"))


class TestListingEntry(ut.TestCase):

    def test_file_dict(self):
        self.assertEqual(ListingEntry.file("a/b.txt", 10, 3).as_dict(), {
            'type': 'file',
            'path': 'a/b.txt',
            'timestamp': 10,
            'size': 3,
        })

    def test_dir_dict(self):
        self.assertEqual(ListingEntry.directory("a").as_dict(), {'type': 'dir', 'path': 'a'})

    def test_name(self):
        self.assertEqual(ListingEntry.file("a/b.txt", None, 1).name(), "b.txt")
        self.assertEqual(ListingEntry.directory("a").name(), "a")

    def test_modified_datetime(self):
        self.assertEqual(ListingEntry.file("a", 0, 1).modified_datetime().year, 1970)
        self.assertIsNone(ListingEntry.directory("a").modified_datetime())
