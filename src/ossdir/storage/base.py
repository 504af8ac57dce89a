from __future__ import annotations
import datetime
import functools
import pathlib
import enum
import typing as t
from ossdir.util import OSSDirError


class Visibility(enum.Enum):
    """Caller-facing access levels, mapped onto backend ACLs."""

    PUBLIC = "public"
    PRIVATE = "private"


class StorageError(OSSDirError):
    """Error class specifically for storage errors."""

    def __init__(self, msg, code, is_recoverable: bool = False):
        super().__init__(msg, "STORAGE", code, is_recoverable=is_recoverable)


class BackendError(StorageError):
    """The object storage client reported a failure."""
    pass


class RenameIncompleteError(BackendError):
    """The copy step of a rename succeeded but the source could not be removed."""

    def __init__(self, msg, source: str, destination: str):
        super().__init__(msg, 2020, True)
        self.source = source
        self.destination = destination


class InvalidArgumentError(StorageError):
    """A caller supplied a value the adapter cannot work with."""
    pass


class InvalidKeyError(InvalidArgumentError):

    def __init__(self, key: str, prefix: str):
        super().__init__(f"Object key [{key}] is outside of the root prefix [{prefix}]", 1001)
        self.key = key


class UnsupportedOperationError(StorageError):
    """The backend cannot provide the requested capability."""

    def __init__(self, msg, code: int = 3000):
        super().__init__(msg, code)


def local_file_error_wrap(cb):
    """Converts typical local file-system errors into appropriate StorageErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except StorageError:
            raise
        except FileNotFoundError as ex:
            raise StorageError(f"Local file not found", 1102) from ex
        except PermissionError as ex:
            raise StorageError(f"Access to local file denied", 1103, True) from ex
        except IsADirectoryError as ex:
            raise StorageError(f"Local file is a directory", 1104) from ex
        except NotADirectoryError as ex:
            raise StorageError(f"Local directory is not a directory", 1105) from ex
        except OSError as ex:
            raise StorageError(f"Exception processing local file: {ex.__class__.__name__}: {str(ex)}", 1100) from ex

    return _inner


class ListingEntry:
    """One node found while listing a directory, either a file or a directory."""

    FILE = "file"
    DIR = "dir"

    def __init__(self, entry_type: str, path: str, timestamp: t.Optional[int] = None, size: t.Optional[int] = None):
        self.type = entry_type
        self.path = path
        self.timestamp = timestamp
        self.size = size

    @staticmethod
    def file(path: str, timestamp: t.Optional[int], size: int) -> ListingEntry:
        return ListingEntry(ListingEntry.FILE, path, timestamp, size)

    @staticmethod
    def directory(path: str) -> ListingEntry:
        return ListingEntry(ListingEntry.DIR, path)

    def is_dir(self) -> bool:
        return self.type == ListingEntry.DIR

    def name(self) -> str:
        return self.path[self.path.rfind('/') + 1:]

    def modified_datetime(self) -> t.Optional[datetime.datetime]:
        if self.timestamp is None:
            return None
        return datetime.datetime.fromtimestamp(self.timestamp, datetime.timezone.utc)

    def as_dict(self) -> dict:
        if self.is_dir():
            return {'type': self.type, 'path': self.path}
        return {
            'type': self.type,
            'path': self.path,
            'timestamp': self.timestamp,
            'size': self.size,
        }

    def __eq__(self, other):
        if not isinstance(other, ListingEntry):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        if self.is_dir():
            return f"<ListingEntry dir {self.path}>"
        return f"<ListingEntry file {self.path} size={self.size}>"


class StorageAdapter:
    """Hierarchical file-storage contract.

        Paths are slash-separated virtual paths relative to the adapter's root,
        with the empty string denoting the root itself. Directories are plain
        path segments; callers never add a trailing slash.
    """

    def has(self, path: str) -> bool:
        """Check if a file exists at the path."""
        raise NotImplementedError

    def directory_exists(self, path: str) -> bool:
        """Check if the path contains anything or has been created as a directory."""
        raise NotImplementedError

    def read(self, path: str) -> bytes:
        """Read the whole file."""
        raise NotImplementedError

    def read_stream(self, path: str) -> t.BinaryIO:
        """Open the file for reading."""
        raise NotImplementedError

    def list_contents(self, directory: str = "", recursive: bool = False) -> list[ListingEntry]:
        """List the files and directories in a directory."""
        raise NotImplementedError

    def search(self, pattern: t.Optional[str], directory: str = "", recursive: bool = True) -> t.Iterable[ListingEntry]:
        """Find all files whose name matches the pattern."""
        raise NotImplementedError

    def get_metadata(self, path: str) -> dict[str, str]:
        """Retrieve all metadata of a file."""
        raise NotImplementedError

    def get_size(self, path: str) -> int:
        raise NotImplementedError

    def get_mimetype(self, path: str) -> t.Optional[str]:
        raise NotImplementedError

    def get_timestamp(self, path: str) -> t.Optional[int]:
        raise NotImplementedError

    def get_visibility(self, path: str) -> Visibility:
        raise NotImplementedError

    def set_visibility(self, path: str, visibility: t.Union[Visibility, str]) -> bool:
        raise NotImplementedError

    def write(self, path: str, contents: t.Union[bytes, str], options: t.Optional[t.Mapping] = None) -> dict:
        """Write a new file."""
        raise NotImplementedError

    def update(self, path: str, contents: t.Union[bytes, str], options: t.Optional[t.Mapping] = None) -> dict:
        """Replace the contents of a file."""
        raise NotImplementedError

    def write_stream(self, path: str, stream, options: t.Optional[t.Mapping] = None) -> dict:
        """Write a new file from a readable object."""
        raise NotImplementedError

    def update_stream(self, path: str, stream, options: t.Optional[t.Mapping] = None) -> dict:
        raise NotImplementedError

    def upload(self, local_path: pathlib.Path, path: str, allow_overwrite: bool = False, options: t.Optional[t.Mapping] = None) -> dict:
        """Upload a local file."""
        raise NotImplementedError

    def download(self, path: str, local_path: pathlib.Path, allow_overwrite: bool = False):
        """Download a file to a local path."""
        raise NotImplementedError

    def rename(self, path: str, new_path: str) -> bool:
        raise NotImplementedError

    def copy(self, path: str, new_path: str) -> bool:
        raise NotImplementedError

    def delete(self, path: str) -> bool:
        raise NotImplementedError

    def delete_directory(self, path: str) -> bool:
        raise NotImplementedError

    def create_directory(self, path: str, options: t.Optional[t.Mapping] = None) -> dict:
        raise NotImplementedError

    def temporary_url(self, path: str, expiration=None, options: t.Optional[dict] = None) -> str:
        """Get a time-limited URL for the file."""
        raise NotImplementedError

    def public_url(self, path: str, options: t.Optional[dict] = None) -> str:
        """Get a URL for the file without any credentials."""
        raise NotImplementedError

    def get_url(self, path: str) -> str:
        raise NotImplementedError
