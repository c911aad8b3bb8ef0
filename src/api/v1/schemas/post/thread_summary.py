from pydantic import BaseModel, Field

from api.v1.schemas.post.post_detail import PostDetail


class ThreadSummary(BaseModel):
    """首页中的一个主题"""

    root: PostDetail = Field(description="根帖")
    reply_count: int = Field(description="回复数")
