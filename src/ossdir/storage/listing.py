"""Directory listings rebuilt from delimited object listings."""
from __future__ import annotations
import typing as t
import zrlog
from ossdir.util import HaltFlag
from .base import ListingEntry, BackendError, InvalidArgumentError
from .client import ObjectStoreClient
from .paths import PathPrefixer


DEFAULT_MAX_KEYS = 1000
DEFAULT_MAX_DEPTH = 64
DELIMITER = "/"


class ListingEngine:
    """Lists virtual directories page by page.

        Each page of a listing with the "/" delimiter contains the common
        prefixes directly below the requested prefix (the subdirectories)
        and the objects directly inside it (the files). A zero-byte object
        whose key is the listed prefix itself is the directory marker and is
        not reported.

        list() is a best-effort scan: a backend failure on any page, at any
        depth, yields an empty list rather than a truncated one. Callers that
        must tell "empty" from "failed" use list_strict() or iter_entries().
    """

    def __init__(self,
                 client: ObjectStoreClient,
                 bucket: str,
                 prefixer: PathPrefixer,
                 max_keys: int = DEFAULT_MAX_KEYS,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 halt_flag: HaltFlag = None):
        if max_keys < 1 or max_keys > 1000:
            raise InvalidArgumentError(f"Listing page size must be between 1 and 1000, not [{max_keys}]", 1004)
        self._client = client
        self._bucket = bucket
        self._prefixer = prefixer
        self._max_keys = max_keys
        self._max_depth = max_depth
        self._halt_flag = halt_flag
        self._log = zrlog.get_logger("ossdir.listing")

    def list(self, directory: str = "", recursive: bool = False) -> list[ListingEntry]:
        try:
            return self.list_strict(directory, recursive)
        except BackendError:
            self._log.warning(f"Listing of [{directory}] failed, reporting it as empty", exc_info=True)
            return []

    def list_strict(self, directory: str = "", recursive: bool = False) -> list[ListingEntry]:
        return [x for x in self.iter_entries(directory, recursive)]

    def iter_entries(self, directory: str = "", recursive: bool = False, _depth: int = 0) -> t.Iterable[ListingEntry]:
        if _depth > self._max_depth:
            raise InvalidArgumentError(f"Listing of [{directory}] exceeds the maximum depth of {self._max_depth}", 1004)
        for page in self._pages(self._prefixer.to_directory_key(directory)):
            for prefix in HaltFlag.iterate(page.prefixes, self._halt_flag, True):
                sub_dir = self._prefixer.to_directory_path(prefix)
                if sub_dir == directory.strip('/'):
                    # keys with repeated slashes produce a prefix naming the listed directory again
                    self._log.debug(f"Skipping self-referential prefix [{prefix}]")
                    continue
                yield ListingEntry.directory(sub_dir)
                if recursive:
                    yield from self.iter_entries(sub_dir, True, _depth + 1)
            for obj in HaltFlag.iterate(page.objects, self._halt_flag, True):
                yield ListingEntry.file(
                    self._prefixer.to_virtual_path(obj.key),
                    obj.last_modified,
                    obj.size
                )

    def iter_keys(self, directory: str = "") -> t.Iterable[str]:
        """Every object key below the directory, its marker included, from an undelimited scan."""
        for page in self._pages(self._prefixer.to_directory_key(directory), ""):
            for obj in HaltFlag.iterate(page.objects, self._halt_flag, True):
                yield obj.key

    def _pages(self, prefix: str, delimiter: str = DELIMITER):
        marker = ""
        while True:
            page = self._client.list_objects(
                self._bucket,
                prefix=prefix,
                delimiter=delimiter,
                marker=marker,
                max_keys=self._max_keys
            )
            if prefix and delimiter:
                page.objects = [
                    obj for obj in page.objects
                    if not (obj.size == 0 and obj.key == prefix)
                ]
            yield page
            marker = page.next_marker
            if marker == "":
                break
