"""Object storage client interface used by the adapter."""
from __future__ import annotations
import typing as t
from .base import UnsupportedOperationError


ACL_DEFAULT = "default"
ACL_PRIVATE = "private"
ACL_PUBLIC_READ = "public-read"

HTTP_GET = "GET"


class ObjectSummary:
    """An object returned from a listing."""

    def __init__(self, key: str, size: int, last_modified: t.Optional[int] = None):
        self.key = key
        self.size = size
        self.last_modified = last_modified

    def __repr__(self):
        return f"<ObjectSummary {self.key} size={self.size}>"


class ObjectListing:
    """One page of a delimited listing.

        An empty next_marker means there are no more pages.
    """

    def __init__(self,
                 next_marker: str = "",
                 prefixes: t.Optional[list[str]] = None,
                 objects: t.Optional[list[ObjectSummary]] = None):
        self.next_marker = next_marker or ""
        self.prefixes = prefixes or []
        self.objects = objects or []


class ObjectStoreClient:
    """Primitive operations of a flat key/value object store.

        Implementations raise BackendError (or another StorageError) for every
        failure reported by the store.
    """

    def exists(self, bucket: str, key: str) -> bool:
        raise NotImplementedError

    def get_object(self, bucket: str, key: str) -> bytes:
        raise NotImplementedError

    def put_object(self, bucket: str, key: str, data: bytes, options: t.Optional[dict] = None) -> dict:
        """Store an object. Options may hold 'headers' (dict)."""
        raise NotImplementedError

    def copy_object(self, source_bucket: str, source_key: str, target_bucket: str, target_key: str) -> dict:
        raise NotImplementedError

    def delete_object(self, bucket: str, key: str) -> bool:
        raise NotImplementedError

    def supports_batch_delete(self) -> bool:
        """Check if delete_objects() is available."""
        return False

    def delete_objects(self, bucket: str, keys: list[str]) -> list[str]:
        """Delete several objects, returning the deleted keys."""
        raise UnsupportedOperationError(f"Batch deletes are not supported by {self.__class__.__name__}")

    def list_objects(self,
                     bucket: str,
                     prefix: str = "",
                     delimiter: str = "",
                     marker: str = "",
                     max_keys: int = 1000) -> ObjectListing:
        raise NotImplementedError

    def get_object_meta(self, bucket: str, key: str) -> dict[str, str]:
        """Object headers, with lower-cased names."""
        raise NotImplementedError

    def get_object_acl(self, bucket: str, key: str) -> str:
        raise NotImplementedError

    def get_bucket_acl(self, bucket: str) -> str:
        raise NotImplementedError

    def put_object_acl(self, bucket: str, key: str, acl: str) -> dict:
        raise NotImplementedError

    def sign_url(self, bucket: str, key: str, expires: int, method: str = HTTP_GET, options: t.Optional[dict] = None) -> str:
        """Build a signed URL. Options may hold 'headers' and 'params' (extra query parameters)."""
        raise NotImplementedError
