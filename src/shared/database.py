import logging
import os

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from shared.config import load_config

# 确保表被导入，以便 SQLModel.metadata.create_all 能够工作
from shared.models import Post  # noqa: F401

logger = logging.getLogger(__name__)


def build_database_url(db_path: str) -> str:
    return f"sqlite+aiosqlite:///{db_path}"


def register_sqlite_pragmas(engine: AsyncEngine) -> None:
    """为每个新的 SQLite 连接开启 WAL，读写互不阻塞。"""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


def create_engine_for(db_path: str, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(build_database_url(db_path), echo=echo)
    register_sqlite_pragmas(engine)
    return engine


DB_PATH = load_config()["db_path"]

async_engine = create_engine_for(DB_PATH)

AsyncSessionFactory = async_sessionmaker(
    bind=async_engine,
    expire_on_commit=False,
)


async def init_db(engine: AsyncEngine = async_engine, db_path: str = DB_PATH):
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(f"数据库已初始化: {db_path}")


async def close_db(engine: AsyncEngine = async_engine):
    """
    关闭数据库引擎，释放连接池。
    """
    logger.info("正在关闭数据库连接池...")
    await engine.dispose()
    logger.info("数据库连接池已关闭。")
