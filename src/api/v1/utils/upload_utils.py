"""表单上传相关的工具函数"""

from typing import Optional

from fastapi import UploadFile

from board.dto.attachment import AttachmentUpload


async def read_upload(
    file: Optional[UploadFile], max_bytes: int
) -> Optional[AttachmentUpload]:
    """
    读取表单中的文件字段。
    最多读取 max_bytes + 1 字节，足以判断是否超限，又不会把超大文件整个读进内存。
    没有选择文件（文件名为空）时返回 None。
    """
    if file is None or not file.filename:
        return None
    try:
        data = await file.read(max_bytes + 1)
    finally:
        await file.close()
    return AttachmentUpload(
        filename=file.filename,
        data=data,
        declared_size=file.size,
    )
