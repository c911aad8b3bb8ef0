from enum import Enum
from typing import Optional


class AttachmentKind(str, Enum):
    """附件的媒体类别，决定前端使用哪种标签展示"""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"

    @classmethod
    def from_extension(cls, extension: str) -> Optional["AttachmentKind"]:
        return _EXTENSION_KINDS.get(extension.lower())

    @classmethod
    def from_path(cls, path: Optional[str]) -> Optional["AttachmentKind"]:
        if not path or "." not in path:
            return None
        return cls.from_extension(path.rsplit(".", 1)[-1])


_EXTENSION_KINDS = {
    "jpg": AttachmentKind.IMAGE,
    "png": AttachmentKind.IMAGE,
    "gif": AttachmentKind.IMAGE,
    "webp": AttachmentKind.IMAGE,
    "bmp": AttachmentKind.IMAGE,
    "webm": AttachmentKind.VIDEO,
    "mp4": AttachmentKind.VIDEO,
    "mp3": AttachmentKind.AUDIO,
}
