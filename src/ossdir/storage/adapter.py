"""Hierarchical storage adapter for OSS buckets.

    Every operation maps its virtual paths to object keys, calls the object
    storage client and normalizes the result. Failures reported by the client
    surface as BackendError for everything except list_contents(), which
    reports an empty directory instead (see ListingEngine.list()).

    Known consistency gap: rename() copies the object and then deletes the
    source. If the delete fails, both objects exist afterwards and
    RenameIncompleteError is raised so the caller can clean up.
"""
from __future__ import annotations
import email.utils
import fnmatch
import io
import pathlib
import typing as t
import zrlog
from ossdir.util import HaltFlag, Readable
from .base import (
    StorageAdapter, ListingEntry, Visibility, StorageError, BackendError,
    RenameIncompleteError, InvalidArgumentError, local_file_error_wrap
)
from .client import ObjectStoreClient
from .listing import ListingEngine, DEFAULT_MAX_KEYS, DEFAULT_MAX_DEPTH
from .options import WriteOptions
from .paths import PathPrefixer
from .urls import UrlSigner, DEFAULT_EXPIRES
from .visibility import VisibilityTranslator


DEFAULT_CHUNK_SIZE = 1048576

# Declared metadata options and the request header each one is sent as
META_OPTION_HEADERS = {
    'size': 'Content-Length',
    'mimetype': 'Content-Type',
}

ACL_HEADER = 'x-oss-object-acl'


class OssAdapter(StorageAdapter):

    def __init__(self,
                 client: ObjectStoreClient,
                 bucket: str,
                 prefix: str = "",
                 expires: int = DEFAULT_EXPIRES,
                 default_visibility: t.Union[None, str, Visibility] = None,
                 max_keys: int = DEFAULT_MAX_KEYS,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 halt_flag: HaltFlag = None):
        self.bucket = bucket
        self._client = client
        self._halt_flag = halt_flag
        self._default_visibility = VisibilityTranslator.parse(default_visibility) if default_visibility else None
        self.prefixer = PathPrefixer(prefix)
        self.visibility = VisibilityTranslator(client)
        self.listing = ListingEngine(client, bucket, self.prefixer, max_keys, max_depth, halt_flag)
        self.signer = UrlSigner(client, bucket, expires)
        self._log = zrlog.get_logger("ossdir.adapter")

    def __str__(self):
        return f"oss://{self.bucket}/{self.prefixer.prefix}"

    def has(self, path: str) -> bool:
        return self._client.exists(self.bucket, self.prefixer.to_object_key(path))

    def directory_exists(self, path: str) -> bool:
        listing = self._client.list_objects(
            self.bucket,
            prefix=self.prefixer.to_directory_key(path),
            max_keys=1
        )
        return bool(listing.objects or listing.prefixes)

    def read(self, path: str) -> bytes:
        return self._client.get_object(self.bucket, self.prefixer.to_object_key(path))

    def read_stream(self, path: str) -> t.BinaryIO:
        return io.BytesIO(self.read(path))

    def list_contents(self, directory: str = "", recursive: bool = False) -> list[ListingEntry]:
        return self.listing.list(directory, recursive)

    def search(self, pattern: t.Optional[str], directory: str = "", recursive: bool = True) -> t.Iterable[ListingEntry]:
        for entry in self.listing.iter_entries(directory, recursive):
            if entry.is_dir():
                continue
            if pattern is None or fnmatch.fnmatch(entry.name(), pattern):
                yield entry

    def get_metadata(self, path: str) -> dict[str, str]:
        return self._client.get_object_meta(self.bucket, self.prefixer.to_object_key(path))

    def get_size(self, path: str) -> int:
        return int(self.get_metadata(path).get('content-length', 0))

    def get_mimetype(self, path: str) -> t.Optional[str]:
        return self.get_metadata(path).get('content-type')

    def get_timestamp(self, path: str) -> t.Optional[int]:
        last_modified = self.get_metadata(path).get('last-modified')
        if not last_modified:
            return None
        try:
            return int(email.utils.parsedate_to_datetime(last_modified).timestamp())
        except (TypeError, ValueError) as ex:
            raise BackendError(f"Invalid last-modified header [{last_modified}] for [{path}]", 2012) from ex

    def get_visibility(self, path: str) -> Visibility:
        return self.visibility.resolve(self.bucket, self.prefixer.to_object_key(path))

    def set_visibility(self, path: str, visibility: t.Union[Visibility, str]) -> bool:
        acl = VisibilityTranslator.to_acl(visibility)
        self._client.put_object_acl(self.bucket, self.prefixer.to_object_key(path), acl)
        return True

    def write(self, path: str, contents: t.Union[bytes, str], options: t.Optional[t.Mapping] = None) -> dict:
        if isinstance(contents, str):
            contents = contents.encode('utf-8')
        key = self.prefixer.to_object_key(path)
        result = self._client.put_object(self.bucket, key, contents, self._backend_options(options))
        self._log.debug(f"Wrote {len(contents)} bytes to [{key}]")
        return {
            'type': ListingEntry.FILE,
            'path': path,
            'size': len(contents),
            **result,
        }

    def update(self, path: str, contents: t.Union[bytes, str], options: t.Optional[t.Mapping] = None) -> dict:
        return self.write(path, contents, options)

    def write_stream(self, path: str, stream, options: t.Optional[t.Mapping] = None) -> dict:
        if not isinstance(stream, Readable):
            raise InvalidArgumentError(f"Stream for [{path}] is not readable", 1006)
        return self.write(path, b''.join(self._read_in_chunks(stream)), options)

    def update_stream(self, path: str, stream, options: t.Optional[t.Mapping] = None) -> dict:
        return self.write_stream(path, stream, options)

    @local_file_error_wrap
    def upload(self, local_path: pathlib.Path, path: str, allow_overwrite: bool = False, options: t.Optional[t.Mapping] = None) -> dict:
        if (not allow_overwrite) and self.has(path):
            raise InvalidArgumentError(f"Path [{path}] already exists, cannot overwrite", 1005, True)
        with open(local_path, "rb") as src:
            return self.write_stream(path, src, options)

    def download(self, path: str, local_path: pathlib.Path, allow_overwrite: bool = False):
        local_path = pathlib.Path(local_path)
        if (not allow_overwrite) and local_path.exists():
            raise InvalidArgumentError(f"Path [{local_path}] already exists, cannot download from [{path}]", 1005, True)
        contents = self.read(path)
        try:
            self._local_write(local_path, contents)
        except StorageError as ex:
            local_path.unlink(True)
            raise ex

    @local_file_error_wrap
    def _local_write(self, local_path: pathlib.Path, contents: bytes):
        with open(local_path, "wb") as dest:
            dest.write(contents)

    def _read_in_chunks(self, readable, buffer_size: int = DEFAULT_CHUNK_SIZE) -> t.Iterable[bytes]:
        if self._halt_flag:
            self._halt_flag.breakpoint()
        x = readable.read(buffer_size)
        while x:
            yield x.encode('utf-8') if isinstance(x, str) else x
            if self._halt_flag:
                self._halt_flag.breakpoint()
            x = readable.read(buffer_size)

    def rename(self, path: str, new_path: str) -> bool:
        source = self.prefixer.to_object_key(path)
        target = self.prefixer.to_object_key(new_path)
        self._client.copy_object(self.bucket, source, self.bucket, target)
        try:
            self._client.delete_object(self.bucket, source)
        except BackendError as ex:
            self._log.error(f"Renamed [{path}] to [{new_path}] but the source could not be removed, both now exist")
            raise RenameIncompleteError(
                f"Copied [{path}] to [{new_path}] but could not remove the source: {str(ex)}",
                path,
                new_path
            ) from ex
        return True

    def copy(self, path: str, new_path: str) -> bool:
        self._client.copy_object(
            self.bucket,
            self.prefixer.to_object_key(path),
            self.bucket,
            self.prefixer.to_object_key(new_path)
        )
        return True

    def delete(self, path: str) -> bool:
        return self._client.delete_object(self.bucket, self.prefixer.to_object_key(path))

    def delete_directory(self, path: str) -> bool:
        directory_key = self.prefixer.to_directory_key(path)
        if directory_key == self.prefixer.prefix:
            raise InvalidArgumentError("Refusing to delete the root directory", 1007)
        keys = [key for key in self.listing.iter_keys(path)]
        if directory_key not in keys:
            keys.append(directory_key)
        self._log.info(f"Deleting directory [{path}] ({len(keys)} keys)")
        if self._client.supports_batch_delete():
            self._client.delete_objects(self.bucket, keys)
        else:
            for key in keys:
                self._client.delete_object(self.bucket, key)
        return True

    def create_directory(self, path: str, options: t.Optional[t.Mapping] = None) -> dict:
        key = self.prefixer.to_directory_key(path)
        self._client.put_object(self.bucket, key, b'', self._backend_options(options))
        return {'type': ListingEntry.DIR, 'path': path}

    def temporary_url(self, path: str, expiration=None, options: t.Optional[dict] = None) -> str:
        return self.signer.temporary_url(self.prefixer.to_object_key(path), expiration, options)

    def public_url(self, path: str, options: t.Optional[dict] = None) -> str:
        return self.signer.public_url(self.prefixer.to_object_key(path), options)

    def get_url(self, path: str) -> str:
        return self.public_url(path)

    def _backend_options(self, options: t.Union[None, t.Mapping, WriteOptions]) -> dict:
        wo = WriteOptions.from_mapping(options, META_OPTION_HEADERS.keys())
        headers = dict(wo.headers)
        if wo.content_type:
            _set_header(headers, 'Content-Type', wo.content_type)
        if wo.content_md5:
            _set_header(headers, 'Content-MD5', wo.content_md5)
        for option, header in META_OPTION_HEADERS.items():
            value = getattr(wo, option)
            if value is not None and _find_header(headers, header) is None:
                headers[header] = str(value)
        visibility = wo.visibility or self._default_visibility
        if visibility is not None:
            _set_header(headers, ACL_HEADER, VisibilityTranslator.to_acl(visibility))
        return {'headers': headers} if headers else {}


def _find_header(headers: dict, name: str) -> t.Optional[str]:
    """Key of the header called name in any letter case, if present."""
    name = name.lower()
    for key in headers:
        if key.lower() == name:
            return key
    return None


def _set_header(headers: dict, name: str, value: str):
    existing = _find_header(headers, name)
    if existing is not None:
        del headers[existing]
    headers[name] = value
