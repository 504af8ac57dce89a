"""Object storage client for Aliyun OSS, built on oss2."""
import functools
import typing as t
import oss2
import oss2.exceptions as oe
import zrlog
from .base import BackendError
from .client import ObjectStoreClient, ObjectListing, ObjectSummary, HTTP_GET


# OSS rejects batch deletes of more than 1000 keys
MAX_BATCH_DELETE = 1000


def _describe(ex: oe.OssError) -> str:
    code = getattr(ex, 'code', '') or ''
    message = getattr(ex, 'message', '') or ''
    if code or message:
        return f"{code} {message}".strip()
    return str(ex)


def wrap_oss_errors(cb):
    """Converts oss2 exceptions into BackendErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except oe.RequestError as ex:
            raise BackendError(f"OSS: Connection error: {ex.__class__.__name__}: {_describe(ex)}", 2001, True) from ex
        except oe.ServerError as ex:
            status = getattr(ex, 'status', 0) or 0
            if status == 403:
                raise BackendError(f"OSS: Access denied: {ex.__class__.__name__}: {_describe(ex)}", 2003) from ex
            elif status == 404:
                raise BackendError(f"OSS: Resource not found: {ex.__class__.__name__}: {_describe(ex)}", 2004) from ex
            raise BackendError(f"OSS: {ex.__class__.__name__}: {_describe(ex)}", 2000, status >= 500) from ex
        except oe.OssError as ex:
            raise BackendError(f"OSS: Client error: {ex.__class__.__name__}: {_describe(ex)}", 2010) from ex

    return _inner


class OssClient(ObjectStoreClient):
    """ObjectStoreClient backed by oss2.Bucket objects, one per bucket name."""

    def __init__(self,
                 auth: t.Union[oss2.Auth, oss2.StsAuth, oss2.AnonymousAuth],
                 endpoint: str,
                 connect_timeout: t.Optional[float] = None,
                 enable_crc: bool = True):
        self._auth = auth
        self._endpoint = endpoint
        self._connect_timeout = connect_timeout
        self._enable_crc = enable_crc
        self._buckets = {}
        self._log = zrlog.get_logger("ossdir.oss")

    @staticmethod
    def build(endpoint: str,
              access_key_id: str,
              access_key_secret: str,
              security_token: t.Optional[str] = None,
              **kwargs):
        if security_token:
            auth = oss2.StsAuth(access_key_id, access_key_secret, security_token)
        else:
            auth = oss2.Auth(access_key_id, access_key_secret)
        return OssClient(auth, endpoint, **kwargs)

    def bucket(self, bucket: str) -> oss2.Bucket:
        if bucket not in self._buckets:
            self._buckets[bucket] = oss2.Bucket(
                self._auth,
                self._endpoint,
                bucket,
                connect_timeout=self._connect_timeout,
                enable_crc=self._enable_crc
            )
        return self._buckets[bucket]

    @wrap_oss_errors
    def exists(self, bucket: str, key: str) -> bool:
        return self.bucket(bucket).object_exists(key)

    @wrap_oss_errors
    def get_object(self, bucket: str, key: str) -> bytes:
        return self.bucket(bucket).get_object(key).read()

    @wrap_oss_errors
    def put_object(self, bucket: str, key: str, data: bytes, options: t.Optional[dict] = None) -> dict:
        options = options or {}
        result = self.bucket(bucket).put_object(key, data, headers=options.get('headers') or None)
        return {
            'etag': result.etag,
            'request_id': result.request_id,
        }

    @wrap_oss_errors
    def copy_object(self, source_bucket: str, source_key: str, target_bucket: str, target_key: str) -> dict:
        result = self.bucket(target_bucket).copy_object(source_bucket, source_key, target_key)
        return {
            'etag': result.etag,
            'request_id': result.request_id,
        }

    @wrap_oss_errors
    def delete_object(self, bucket: str, key: str) -> bool:
        self.bucket(bucket).delete_object(key)
        return True

    def supports_batch_delete(self) -> bool:
        return True

    @wrap_oss_errors
    def delete_objects(self, bucket: str, keys: list[str]) -> list[str]:
        deleted = []
        for start in range(0, len(keys), MAX_BATCH_DELETE):
            result = self.bucket(bucket).batch_delete_objects(keys[start:start + MAX_BATCH_DELETE])
            deleted.extend(result.deleted_keys)
        return deleted

    @wrap_oss_errors
    def list_objects(self,
                     bucket: str,
                     prefix: str = "",
                     delimiter: str = "",
                     marker: str = "",
                     max_keys: int = 1000) -> ObjectListing:
        result = self.bucket(bucket).list_objects(
            prefix=prefix,
            delimiter=delimiter,
            marker=marker,
            max_keys=max_keys
        )
        return ObjectListing(
            result.next_marker if result.is_truncated else "",
            list(result.prefix_list),
            [ObjectSummary(x.key, x.size, x.last_modified) for x in result.object_list]
        )

    @wrap_oss_errors
    def get_object_meta(self, bucket: str, key: str) -> dict[str, str]:
        result = self.bucket(bucket).head_object(key)
        return {k.lower(): v for k, v in result.headers.items()}

    @wrap_oss_errors
    def get_object_acl(self, bucket: str, key: str) -> str:
        return self.bucket(bucket).get_object_acl(key).acl

    @wrap_oss_errors
    def get_bucket_acl(self, bucket: str) -> str:
        return self.bucket(bucket).get_bucket_acl().acl

    @wrap_oss_errors
    def put_object_acl(self, bucket: str, key: str, acl: str) -> dict:
        result = self.bucket(bucket).put_object_acl(key, acl)
        return {'request_id': result.request_id}

    @wrap_oss_errors
    def sign_url(self, bucket: str, key: str, expires: int, method: str = HTTP_GET, options: t.Optional[dict] = None) -> str:
        options = options or {}
        self._log.debug(f"Signing {method} URL for [{key}] valid for {expires} seconds")
        return self.bucket(bucket).sign_url(
            method,
            key,
            expires,
            headers=options.get('headers') or None,
            params=options.get('params') or None
        )
