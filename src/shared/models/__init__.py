from .post import Post

# 这一行是为了让 Alembic/SQLModel 能够发现所有模型
__all__ = [
    "Post",
]
