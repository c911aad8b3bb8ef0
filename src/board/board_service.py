import logging
import secrets
import string
import time
from typing import AsyncIterator, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from board.attachment_storage import AttachmentStorage
from board.attachment_validator import AttachmentValidator
from board.dto.attachment import AttachmentUpload
from board.dto.thread_views import ThreadPageEntry, ThreadView
from board.post_repository import PostRepository
from shared.exceptions import AttachmentRejected, NotFound, StoreError, ValidationError
from shared.models.post import Post

logger = logging.getLogger(__name__)

DISPLAY_ID_LENGTH = 5
DISPLAY_ID_ALPHABET = string.ascii_letters + string.digits
DEFAULT_PAGE_SIZE = 10

# SQLite INTEGER 的上限，超出范围的 ID 不可能存在
MAX_POST_ID = 2**63 - 1


def generate_display_id(length: int = DISPLAY_ID_LENGTH) -> str:
    """生成根帖的展示标签，只是装饰用，不检查是否重复"""
    return "".join(secrets.choice(DISPLAY_ID_ALPHABET) for _ in range(length))


def now_seconds() -> int:
    return int(time.time())


class BoardService:
    """
    论坛核心服务：发主题、回复、首页分页与主题详情。

    服务本身不持有任何帖子状态，每个操作各自打开一个会话（一个事务），
    并在所有退出路径上释放。
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        validator: AttachmentValidator,
        storage: AttachmentStorage,
        page_size: int = DEFAULT_PAGE_SIZE,
        strict_attachments: bool = False,
        clock: Callable[[], int] = now_seconds,
    ):
        if page_size < 1:
            raise ValueError("每页主题数必须大于0")
        self.session_factory = session_factory
        self.validator = validator
        self.storage = storage
        self.page_size = page_size
        self.strict_attachments = strict_attachments
        self.clock = clock

    @staticmethod
    def _clean_content(content: Optional[str]) -> str:
        cleaned = (content or "").strip()
        if not cleaned:
            raise ValidationError("内容不能为空")
        return cleaned

    @staticmethod
    def _ensure_post_id(post_id: int) -> None:
        if not 1 <= post_id <= MAX_POST_ID:
            raise NotFound(f"主题 {post_id} 不存在")

    async def create_thread(
        self, content: str, attachment: Optional[AttachmentUpload] = None
    ) -> Post:
        """
        发布新主题。

        附件校验失败时默认丢弃附件、照常发帖；
        strict_attachments 开启时直接抛出 AttachmentRejected，不写入任何数据。
        """
        content = self._clean_content(content)
        display_id = generate_display_id()

        decision = None
        if attachment is not None:
            try:
                decision = self.validator.validate(attachment)
            except AttachmentRejected as e:
                if self.strict_attachments:
                    raise
                logger.warning(
                    f"附件 {attachment.filename!r} 被拒绝，主题将不带附件发布: {e.reason}"
                )

        attachment_path = None
        if attachment is not None and decision is not None:
            try:
                attachment_path = await self.storage.save(
                    attachment.data, display_id, decision.extension
                )
            except OSError as e:
                if self.strict_attachments:
                    raise AttachmentRejected(f"附件写入失败: {e}") from e
                logger.error(f"附件写入失败，主题将不带附件发布: {e}", exc_info=True)

        timestamp = self.clock()
        post = Post(
            content=content,
            parent_id=None,
            reply_id=None,
            display_id=display_id,
            timestamp=timestamp,
            created_at=timestamp,
            attachment=attachment_path,
        )

        async with self.session_factory() as session:
            repository = PostRepository(session)
            try:
                await repository.insert(post)
                await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"发布主题失败: {e}", exc_info=True)
                await session.rollback()
                if attachment_path:
                    try:
                        await self.storage.discard(attachment_path)
                    except OSError as discard_error:
                        logger.error(
                            f"清理附件 {attachment_path} 失败: {discard_error}",
                            exc_info=True,
                        )
                raise StoreError("发布主题失败") from e

        logger.info(f"新主题 {post.id} ({display_id}) 已发布")
        return post

    async def create_reply(self, parent_id: int, content: str) -> Post:
        """
        回复主题。

        分配序号、写入回复、刷新根帖活跃时间三步在同一事务内完成，
        任一步失败整体回滚。
        """
        content = self._clean_content(content)
        self._ensure_post_id(parent_id)

        async with self.session_factory() as session:
            repository = PostRepository(session)
            try:
                # 先自增计数器：既拿到写锁，也顺带确认根帖存在
                reply_sequence = await repository.next_reply_sequence(parent_id)
                if reply_sequence is None:
                    await session.rollback()
                    raise NotFound(f"主题 {parent_id} 不存在")

                timestamp = self.clock()
                reply = Post(
                    content=content,
                    parent_id=parent_id,
                    reply_id=reply_sequence,
                    display_id=None,
                    timestamp=timestamp,
                    created_at=timestamp,
                )
                await repository.insert(reply)
                await repository.bump_timestamp(parent_id, timestamp)
                await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"回复主题 {parent_id} 失败: {e}", exc_info=True)
                await session.rollback()
                raise StoreError(f"回复主题 {parent_id} 失败") from e

        logger.info(f"主题 {parent_id} 收到第 {reply_sequence} 条回复 {reply.id}")
        return reply

    async def iter_threads_page(
        self, page: int = 1, page_size: Optional[int] = None
    ) -> AsyncIterator[ThreadPageEntry]:
        """
        按最后活跃时间倒序逐个产出某一页的主题。
        回复数在产出对应主题时才去查询；每次调用都重新查询。
        """
        page = max(page, 1)
        if page_size is None:
            page_size = self.page_size
        page_size = max(page_size, 1)
        offset = (page - 1) * page_size

        async with self.session_factory() as session:
            repository = PostRepository(session)
            try:
                roots = await repository.list_roots(limit=page_size, offset=offset)
                for root in roots:
                    reply_count = await repository.count_replies(root.id)  # type: ignore[arg-type]
                    yield ThreadPageEntry(root=root, reply_count=reply_count)
            except SQLAlchemyError as e:
                logger.error(f"读取第 {page} 页主题失败: {e}", exc_info=True)
                raise StoreError(f"读取第 {page} 页主题失败") from e

    async def list_threads_page(
        self, page: int = 1, page_size: Optional[int] = None
    ) -> List[ThreadPageEntry]:
        return [entry async for entry in self.iter_threads_page(page, page_size)]

    async def get_thread(self, root_id: int) -> ThreadView:
        """获取主题详情，回复按序号倒序（最新的在前）"""
        self._ensure_post_id(root_id)

        async with self.session_factory() as session:
            repository = PostRepository(session)
            try:
                root = await repository.get_by_id(root_id)
                if root is None or not root.is_root:
                    raise NotFound(f"主题 {root_id} 不存在")
                replies = await repository.list_replies(root_id)
            except SQLAlchemyError as e:
                logger.error(f"读取主题 {root_id} 失败: {e}", exc_info=True)
                raise StoreError(f"读取主题 {root_id} 失败") from e

        return ThreadView(root=root, replies=replies)
