from typing import List, Optional

from pydantic import BaseModel, Field

from api.v1.schemas.post.thread_summary import ThreadSummary


class ThreadPageResponse(BaseModel):
    """首页分页响应"""

    page: int = Field(description="当前页码，从 1 开始")
    page_size: int = Field(description="每页主题数")
    previous_page: Optional[int] = Field(None, description="上一页页码，第一页为空")
    next_page: int = Field(description="下一页页码")
    results: List[ThreadSummary]
