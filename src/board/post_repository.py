import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import asc, desc, func, select

from shared.models.post import Post

logger = logging.getLogger(__name__)


class PostRepository:
    """
    封装 posts 表的数据库操作。
    只负责 flush，不负责 commit，事务边界由调用方（BoardService）控制。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, post: Post) -> int:
        """写入一条帖子，返回数据库分配的 ID"""
        self.session.add(post)
        await self.session.flush()
        await self.session.refresh(post)
        return post.id  # type: ignore[return-value]

    async def get_by_id(self, post_id: int) -> Optional[Post]:
        statement = select(Post).where(Post.id == post_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_roots(self, limit: int, offset: int) -> List[Post]:
        """
        按最后活跃时间倒序列出根帖。
        时间相同时按插入顺序（ID 升序）保持稳定。
        """
        statement = (
            select(Post)
            .where(Post.parent_id.is_(None))  # type: ignore
            .order_by(desc(Post.timestamp), asc(Post.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_replies(self, parent_id: int) -> List[Post]:
        """列出某个根帖下的全部回复，按回复序号倒序（最新的在前）"""
        statement = (
            select(Post)
            .where(Post.parent_id == parent_id)
            .order_by(desc(Post.reply_id))
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_replies(self, parent_id: int) -> int:
        statement = (
            select(func.count()).select_from(Post).where(Post.parent_id == parent_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none() or 0

    async def next_reply_sequence(self, parent_id: int) -> Optional[int]:
        """
        原子地为根帖分配下一个回复序号。

        使用单条 UPDATE ... RETURNING 自增根帖上的计数器，
        语句本身会拿到写锁，并发回复不会读到相同的序号。
        parent_id 不是已存在的根帖时返回 None。
        """
        statement = (
            update(Post)
            .where(Post.id == parent_id, Post.parent_id.is_(None))  # type: ignore
            .values(last_reply_id=Post.last_reply_id + 1)
            .returning(Post.last_reply_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def bump_timestamp(self, root_id: int, timestamp: int) -> bool:
        """刷新根帖的最后活跃时间。更新到记录时返回 True"""
        statement = (
            update(Post)
            .where(Post.id == root_id, Post.parent_id.is_(None))  # type: ignore
            .values(timestamp=timestamp)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount > 0
