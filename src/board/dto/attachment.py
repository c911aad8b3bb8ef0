from typing import Optional

from pydantic import BaseModel, Field

from shared.enum.attachment_kind import AttachmentKind


class AttachmentUpload(BaseModel):
    """一次待校验的上传"""

    filename: Optional[str] = Field(None, description="客户端提交的原始文件名，仅用于日志")
    data: bytes = Field(..., description="上传内容")
    declared_size: Optional[int] = Field(None, description="客户端声明的大小（字节）")

    @property
    def size(self) -> int:
        return max(len(self.data), self.declared_size or 0)


class AttachmentDecision(BaseModel):
    """附件校验通过后的结果"""

    extension: str = Field(..., description="存储使用的规范扩展名")
    mime: str = Field(..., description="探测得到的 MIME 类型")
    kind: AttachmentKind = Field(..., description="媒体类别")
