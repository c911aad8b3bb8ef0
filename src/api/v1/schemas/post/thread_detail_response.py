from typing import List

from pydantic import BaseModel, Field

from api.v1.schemas.post.post_detail import PostDetail


class ThreadDetailResponse(BaseModel):
    """主题详情响应，回复按序号倒序"""

    root: PostDetail = Field(description="根帖")
    replies: List[PostDetail] = Field(default_factory=list, description="回复列表")
