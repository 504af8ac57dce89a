import typing as t
import zrlog
from .base import Visibility, InvalidArgumentError, BackendError
from .client import ObjectStoreClient, ACL_DEFAULT, ACL_PRIVATE, ACL_PUBLIC_READ


class VisibilityTranslator:
    """Maps public/private visibility onto OSS access control lists.

        Objects created without an explicit ACL report "default", meaning
        they inherit the ACL of their bucket. That value is resolved by
        reading the bucket ACL and is never handed back to callers.
    """

    def __init__(self, client: ObjectStoreClient):
        self._client = client
        self._log = zrlog.get_logger("ossdir.visibility")

    @staticmethod
    def parse(visibility: t.Union[Visibility, str]) -> Visibility:
        if isinstance(visibility, Visibility):
            return visibility
        if isinstance(visibility, str):
            try:
                return Visibility(visibility.strip().lower())
            except ValueError:
                pass
        raise InvalidArgumentError(f"Invalid visibility [{visibility}]", 1003)

    @staticmethod
    def to_acl(visibility: t.Union[Visibility, str]) -> str:
        if VisibilityTranslator.parse(visibility) == Visibility.PUBLIC:
            return ACL_PUBLIC_READ
        return ACL_PRIVATE

    @staticmethod
    def from_acl(acl: str) -> Visibility:
        if acl == ACL_DEFAULT:
            raise InvalidArgumentError("Inherited ACL must be resolved against the bucket", 1003)
        return Visibility.PRIVATE if acl == ACL_PRIVATE else Visibility.PUBLIC

    def resolve(self, bucket: str, key: str) -> Visibility:
        acl = self._client.get_object_acl(bucket, key)
        if acl == ACL_DEFAULT:
            self._log.debug(f"Object [{key}] inherits its ACL, checking bucket [{bucket}]")
            acl = self._client.get_bucket_acl(bucket)
            if acl == ACL_DEFAULT:
                raise BackendError(f"Bucket [{bucket}] reported an inherited ACL", 2011)
        return VisibilityTranslator.from_acl(acl)
