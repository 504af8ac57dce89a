"""Conversion between virtual paths and object keys."""
import re
from .base import InvalidKeyError


_DUPLICATE_SEPARATORS = re.compile(r"/{2,}")


def normalize_prefix(prefix: str) -> str:
    """Strip surrounding slashes from a root prefix and give a non-empty prefix one trailing slash."""
    prefix = _DUPLICATE_SEPARATORS.sub('/', (prefix or "").strip().strip('/'))
    return f"{prefix}/" if prefix else ""


class PathPrefixer:
    """Maps caller paths onto keys below a fixed root prefix.

        A virtual path of "a/b.txt" with a prefix of "root" becomes
        the key "root/a/b.txt". The empty virtual path maps to the
        bare prefix, which is what a listing of the root needs.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = normalize_prefix(prefix)

    def to_object_key(self, path: str) -> str:
        path = (path or "").lstrip('/')
        return _DUPLICATE_SEPARATORS.sub('/', f"{self.prefix}{path}")

    def to_directory_key(self, path: str) -> str:
        key = self.to_object_key(path)
        if key and not key.endswith('/'):
            key += '/'
        return key

    def to_virtual_path(self, key: str) -> str:
        if not key.startswith(self.prefix):
            raise InvalidKeyError(key, self.prefix)
        return key[len(self.prefix):]

    def to_directory_path(self, key: str) -> str:
        """Virtual path of a directory key, without its trailing slash."""
        return self.to_virtual_path(key).rstrip('/')
