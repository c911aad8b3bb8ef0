class BoardError(Exception):
    """论坛核心操作的异常基类"""


class ValidationError(BoardError):
    """输入内容不合法（例如正文为空）"""


class NotFound(BoardError):
    """引用的帖子或主题不存在"""


class AttachmentRejected(BoardError):
    """附件未通过校验（类型不支持、超过大小上限或无法读取）"""

    def __init__(self, reason: str, oversize: bool = False):
        super().__init__(reason)
        self.reason = reason
        self.oversize = oversize


class StoreError(BoardError):
    """持久化层读写失败"""
