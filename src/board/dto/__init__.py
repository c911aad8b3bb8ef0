from board.dto.attachment import AttachmentDecision, AttachmentUpload
from board.dto.thread_views import ThreadPageEntry, ThreadView

__all__ = [
    "AttachmentDecision",
    "AttachmentUpload",
    "ThreadPageEntry",
    "ThreadView",
]
