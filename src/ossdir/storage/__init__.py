"""
    Provides hierarchical file storage on top of OSS buckets.

    In general, one should use the StorageController to get an adapter for a
    configured bucket. The adapter exposes directory-oriented operations and
    translates them into the key-based operations of the object store.

    Object stores have no directories. This component adopts the usual
    convention that a directory is a key prefix ending in a slash, optionally
    backed by a zero-byte "directory marker" object with that exact key so
    that empty directories can exist. Callers never write the trailing slash
    themselves: "reports/2024" is a directory if keys below "reports/2024/"
    exist or its marker does.

    Visibility is reduced to public or private. Objects that inherit the
    bucket ACL report the bucket's visibility.
"""
from .core import StorageController, build_adapter
from .base import (
    StorageAdapter, ListingEntry, Visibility, StorageError, BackendError,
    RenameIncompleteError, InvalidArgumentError, InvalidKeyError, UnsupportedOperationError
)
from .adapter import OssAdapter
from .client import ObjectStoreClient, ObjectListing, ObjectSummary
