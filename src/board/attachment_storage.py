import asyncio
import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """
    将通过校验的附件写入上传目录。
    文件名由展示标签加随机串组成，并发上传不会互相覆盖。
    """

    def __init__(self, upload_dir: str, url_prefix: str = "uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.strip("/")

    def _write(self, filename: str, data: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        # "xb" 模式：目标已存在时直接失败，绝不覆盖
        with open(self.upload_dir / filename, "xb") as f:
            f.write(data)

    async def save(self, data: bytes, display_id: str, extension: str) -> str:
        """写入文件并返回要记录到帖子上的相对路径"""
        filename = f"{display_id}_{uuid.uuid4().hex}.{extension}"
        await asyncio.to_thread(self._write, filename, data)
        logger.info(f"附件已保存: {self.upload_dir / filename}")
        return f"{self.url_prefix}/{filename}"

    def resolve(self, stored_path: str) -> Path:
        """把帖子上记录的相对路径还原成磁盘路径"""
        return self.upload_dir / Path(stored_path).name

    async def discard(self, stored_path: str) -> None:
        """删除已写入的附件，文件不存在时忽略"""
        path = self.resolve(stored_path)
        await asyncio.to_thread(path.unlink, True)
        logger.info(f"已清理附件: {path}")
