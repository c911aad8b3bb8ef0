from dataclasses import dataclass, field
from typing import List

from shared.models.post import Post


@dataclass(frozen=True)
class ThreadPageEntry:
    """首页中的一个主题：根帖及其回复数"""

    root: Post
    reply_count: int


@dataclass(frozen=True)
class ThreadView:
    """主题详情：根帖与按序号倒序排列的回复"""

    root: Post
    replies: List[Post] = field(default_factory=list)
