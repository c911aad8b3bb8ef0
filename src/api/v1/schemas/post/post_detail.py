from typing import Optional

from pydantic import BaseModel, Field

from shared.enum.attachment_kind import AttachmentKind
from shared.models.post import Post


class PostDetail(BaseModel):
    """API 响应中单个帖子（根帖或回复）的信息"""

    id: int = Field(description="帖子ID")
    content: str = Field(description="正文")
    parent_id: Optional[int] = Field(None, description="所属根帖ID，根帖为空")
    reply_sequence: Optional[int] = Field(None, description="主题内回复序号，根帖为空")
    display_id: Optional[str] = Field(None, description="根帖展示标签")
    created_at: int = Field(description="创建时间（Unix 秒）")
    bumped_at: int = Field(description="最后活跃时间（Unix 秒）")
    attachment: Optional[str] = Field(None, description="附件地址")
    attachment_kind: Optional[AttachmentKind] = Field(None, description="附件类别")

    @classmethod
    def from_post(cls, post: Post) -> "PostDetail":
        return cls(
            id=post.id,  # type: ignore[arg-type]
            content=post.content,
            parent_id=post.parent_id,
            reply_sequence=post.reply_sequence,
            display_id=post.display_id,
            created_at=post.created_at,
            bumped_at=post.bumped_at,
            attachment=f"/{post.attachment}" if post.attachment else None,
            attachment_kind=AttachmentKind.from_path(post.attachment),
        )
