import datetime
import math
import time
import typing as t
from urllib.parse import urlsplit, unquote_plus
from .base import InvalidArgumentError
from .client import ObjectStoreClient, HTTP_GET


DEFAULT_EXPIRES = 3600

# Query parameters that carry the request signature of a V1 signed URL,
# security-token being present when signing with STS credentials
SIGNING_QUERY_PARAMS = ('OSSAccessKeyId', 'Expires', 'Signature', 'security-token')


def strip_signature(url: str) -> str:
    """Remove the signing parameters from a signed URL, keeping everything else as-is."""
    parts = urlsplit(url)
    kept = []
    for item in parts.query.split('&'):
        if item == "":
            continue
        name = unquote_plus(item.split('=', 1)[0])
        if name not in SIGNING_QUERY_PARAMS:
            kept.append(item)
    base_url = f"{parts.scheme}://{parts.netloc}{parts.path}"
    return f"{base_url}?{'&'.join(kept)}" if kept else base_url


class UrlSigner:

    def __init__(self,
                 client: ObjectStoreClient,
                 bucket: str,
                 default_expires: int = DEFAULT_EXPIRES,
                 clock: t.Callable[[], float] = time.time):
        if default_expires is None or default_expires <= 0:
            raise InvalidArgumentError(f"Default expiry must be positive, not [{default_expires}]", 1002)
        self._client = client
        self._bucket = bucket
        self._default_expires = int(default_expires)
        self._clock = clock

    def resolve_expiry(self, expiration: t.Union[None, int, float, datetime.timedelta, datetime.datetime] = None) -> int:
        """Number of seconds a link should stay valid.

            A datetime is an absolute expiration instant (naive values are
            treated as UTC), a timedelta or a number is a window in seconds
            and None selects the configured default.
        """
        if expiration is None:
            return self._default_expires
        if isinstance(expiration, datetime.datetime):
            if expiration.tzinfo is None:
                expiration = expiration.replace(tzinfo=datetime.timezone.utc)
            seconds = math.ceil(expiration.timestamp() - self._clock())
        elif isinstance(expiration, datetime.timedelta):
            seconds = math.ceil(expiration.total_seconds())
        elif isinstance(expiration, (int, float)) and not isinstance(expiration, bool):
            seconds = math.ceil(expiration)
        else:
            raise InvalidArgumentError(f"Unsupported expiration value [{expiration!r}]", 1002)
        if seconds <= 0:
            raise InvalidArgumentError(f"Link expiry must be in the future, got {seconds} seconds", 1002)
        return seconds

    def temporary_url(self, key: str, expiration=None, options: t.Optional[dict] = None, method: str = HTTP_GET) -> str:
        return self._client.sign_url(
            self._bucket,
            key,
            self.resolve_expiry(expiration),
            method,
            options or {}
        )

    def public_url(self, key: str, options: t.Optional[dict] = None) -> str:
        return strip_signature(self.temporary_url(key, None, options))
