from api.v1.schemas.post.post_detail import PostDetail
from api.v1.schemas.post.thread_detail_response import ThreadDetailResponse
from api.v1.schemas.post.thread_page_response import ThreadPageResponse
from api.v1.schemas.post.thread_summary import ThreadSummary

__all__ = [
    "PostDetail",
    "ThreadDetailResponse",
    "ThreadPageResponse",
    "ThreadSummary",
]
