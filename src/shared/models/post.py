from typing import Optional

from sqlmodel import Column, Field, SQLModel, Text, UniqueConstraint


class Post(SQLModel, table=True):
    """
    帖子模型。
    parent_id 为空的是主题帖（根帖），否则是挂在根帖下的回复。
    """

    __tablename__ = "posts"  # type: ignore

    # 同一主题内的回复序号不允许重复
    __table_args__ = (
        UniqueConstraint("parent_id", "reply_id", name="uq_posts_parent_reply"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    content: str = Field(sa_column=Column(Text, nullable=False))

    parent_id: Optional[int] = Field(
        default=None, foreign_key="posts.id", index=True, description="所属根帖ID"
    )
    reply_id: Optional[int] = Field(
        default=None, description="主题内的回复序号，从 1 开始连续递增"
    )
    display_id: Optional[str] = Field(
        default=None, description="根帖的 5 位展示标签，不保证唯一"
    )

    # 根帖：最后活跃时间（有新回复时刷新）；回复：创建时间
    timestamp: int = Field(index=True, nullable=False)
    created_at: int = Field(nullable=False, description="创建时间（Unix 秒）")

    attachment: Optional[str] = Field(default=None, description="附件相对路径")

    # 根帖上的回复计数器，分配回复序号时原子自增
    last_reply_id: int = Field(
        default=0, nullable=False, sa_column_kwargs={"server_default": "0"}
    )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def reply_sequence(self) -> Optional[int]:
        return self.reply_id

    @property
    def bumped_at(self) -> int:
        return self.timestamp

    def __repr__(self):
        kind = "root" if self.is_root else f"reply#{self.reply_id}->{self.parent_id}"
        return f"<Post(id={self.id}, {kind}, timestamp={self.timestamp})>"
