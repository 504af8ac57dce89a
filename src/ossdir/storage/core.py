from autoinject import injector
import typing as t
import zirconium as zr
import zrlog
from ossdir.util import ConfigError, HaltFlag
from .adapter import OssAdapter
from .client import ObjectStoreClient
from .listing import DEFAULT_MAX_KEYS, DEFAULT_MAX_DEPTH
from .oss import OssClient
from .urls import DEFAULT_EXPIRES


REQUIRED_KEYS = ('endpoint', 'bucket', 'access_key_id', 'access_key_secret')
ALLOWED_KEYS = REQUIRED_KEYS + (
    'security_token', 'prefix', 'expires', 'default_visibility',
    'max_keys', 'max_depth', 'enable_crc', 'connect_timeout',
)


@injector.injectable_global
class StorageController:
    """Builds adapters from the [ossdir.adapters.NAME] configuration sections.

        [ossdir.adapters.default]
        endpoint = "https://oss-cn-hangzhou.aliyuncs.com"
        bucket = "my-bucket"
        access_key_id = "..."
        access_key_secret = "..."
        prefix = "uploads"
    """

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self):
        self._log = zrlog.get_logger("ossdir.storage")

    def adapter_names(self) -> list[str]:
        return list(self.config.as_dict(("ossdir", "adapters"), default={}).keys())

    def get_adapter(self, name: str = "default", halt_flag: HaltFlag = None) -> OssAdapter:
        settings = self.config.as_dict(("ossdir", "adapters", name), default=None)
        if not settings:
            raise ConfigError(f"No storage adapter named [{name}] is configured", 1000)
        self._log.debug(f"Building storage adapter [{name}]")
        return build_adapter(settings, halt_flag=halt_flag)


def build_adapter(settings: dict, client: t.Optional[ObjectStoreClient] = None, halt_flag: HaltFlag = None) -> OssAdapter:
    """Build an adapter from a settings dictionary, creating an OssClient unless one is given."""
    for key in settings:
        if key not in ALLOWED_KEYS:
            raise ConfigError(f"Invalid storage configuration key [{key}]", 1001)
    required = REQUIRED_KEYS if client is None else ('bucket',)
    missing = [key for key in required if not settings.get(key)]
    if missing:
        raise ConfigError(f"Missing storage configuration keys [{', '.join(missing)}]", 1002)
    if client is None:
        client = OssClient.build(
            settings['endpoint'],
            settings['access_key_id'],
            settings['access_key_secret'],
            security_token=settings.get('security_token'),
            connect_timeout=_as_number(settings, 'connect_timeout', None, float),
            enable_crc=_as_bool(settings, 'enable_crc', True)
        )
    return OssAdapter(
        client,
        settings['bucket'],
        prefix=settings.get('prefix') or "",
        expires=_as_number(settings, 'expires', DEFAULT_EXPIRES),
        default_visibility=settings.get('default_visibility') or None,
        max_keys=_as_number(settings, 'max_keys', DEFAULT_MAX_KEYS),
        max_depth=_as_number(settings, 'max_depth', DEFAULT_MAX_DEPTH),
        halt_flag=halt_flag
    )


def _as_number(settings: dict, key: str, default, cast=int):
    if settings.get(key) is None:
        return default
    try:
        return cast(settings[key])
    except (TypeError, ValueError) as ex:
        raise ConfigError(f"Storage configuration key [{key}] must be a number", 1003) from ex


def _as_bool(settings: dict, key: str, default: bool) -> bool:
    value = settings.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lvalue = value.strip().lower()
        if lvalue in ('true', 'yes', 'on', '1'):
            return True
        if lvalue in ('false', 'no', 'off', '0'):
            return False
    raise ConfigError(f"Storage configuration key [{key}] must be true or false", 1004)
