from __future__ import annotations
import typing as t
import zrlog
from .base import Visibility
from .visibility import VisibilityTranslator


class WriteOptions:
    """Options recognized when writing an object.

        Built from a mapping with from_mapping(); keys that are not
        recognized are ignored.
    """

    def __init__(self,
                 headers: t.Optional[dict[str, str]] = None,
                 content_type: t.Optional[str] = None,
                 content_md5: t.Optional[str] = None,
                 visibility: t.Optional[Visibility] = None,
                 size: t.Optional[int] = None,
                 mimetype: t.Optional[str] = None):
        self.headers = dict(headers) if headers else {}
        self.content_type = content_type
        self.content_md5 = content_md5
        self.visibility = visibility
        self.size = size
        self.mimetype = mimetype

    @staticmethod
    def from_mapping(options: t.Union[None, t.Mapping, WriteOptions], meta_options: t.Iterable[str] = ()) -> WriteOptions:
        if isinstance(options, WriteOptions):
            return options
        wo = WriteOptions()
        if not options:
            return wo
        meta_options = set(meta_options)
        for key in options:
            value = options[key]
            lkey = key.lower()
            if lkey == 'headers':
                wo.headers = dict(value or {})
            elif lkey == 'content-type':
                wo.content_type = value
            elif lkey == 'content-md5':
                wo.content_md5 = value
            elif lkey == 'visibility':
                wo.visibility = VisibilityTranslator.parse(value) if value else None
            elif lkey in meta_options:
                setattr(wo, lkey, value)
            else:
                zrlog.get_logger("ossdir.options").debug(f"Ignoring unrecognized write option [{key}]")
        return wo
