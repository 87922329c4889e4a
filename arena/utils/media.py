import mimetypes
from pathlib import PurePath
from typing import Union

UNKNOWN_MEDIA_TYPE = "unknown"


def guess_media_type(path: Union[str, PurePath]) -> str:
    """파일 확장자로 MIME 타입 추정 (알 수 없으면 "unknown")"""
    media_type, _ = mimetypes.guess_type(str(path))
    return media_type or UNKNOWN_MEDIA_TYPE
