import logging
from typing import FrozenSet

import filetype

from board.dto.attachment import AttachmentDecision, AttachmentUpload
from shared.config import DEFAULT_MAX_ATTACHMENT_BYTES
from shared.enum.attachment_kind import AttachmentKind
from shared.exceptions import AttachmentRejected

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS: FrozenSet[str] = frozenset(
    {"jpg", "png", "gif", "webp", "bmp", "webm", "mp4", "mp3"}
)


class AttachmentValidator:
    """
    附件校验器。

    以服务端探测到的文件类型为准，不信任客户端提交的文件名扩展名，
    避免伪造扩展名绕过校验。
    """

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
        allowed_extensions: FrozenSet[str] = ALLOWED_EXTENSIONS,
    ):
        if max_bytes <= 0:
            raise ValueError("附件大小上限必须大于0")
        self.max_bytes = max_bytes
        self.allowed_extensions = allowed_extensions

    def validate(self, upload: AttachmentUpload) -> AttachmentDecision:
        """
        校验上传内容，通过时返回规范扩展名与媒体类别，
        否则抛出 AttachmentRejected。
        """
        size = upload.size
        if size > self.max_bytes:
            raise AttachmentRejected(
                f"文件大小 {size} 字节超过限制（最大 {self.max_bytes // (1024 * 1024)}MB）",
                oversize=True,
            )
        if not upload.data:
            raise AttachmentRejected("文件内容为空或无法读取")

        file_type = filetype.guess(upload.data)
        if file_type is None:
            raise AttachmentRejected("无法识别的文件类型")

        extension = file_type.extension.lower()
        kind = AttachmentKind.from_extension(extension)
        if extension not in self.allowed_extensions or kind is None:
            raise AttachmentRejected(f"不支持的文件类型: {extension}")

        logger.debug(
            f"附件 {upload.filename!r} 校验通过: {file_type.mime}, {size} 字节"
        )
        return AttachmentDecision(extension=extension, mime=file_type.mime, kind=kind)
