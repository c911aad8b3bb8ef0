import sys

if sys.platform != "win32":
    try:
        import uvloop

        uvloop.install()
        print("uvloop 已启用。")
    except ImportError:
        print("未找到 uvloop，将使用默认的 asyncio 事件循环。")


import asyncio
import logging
from pathlib import Path

import uvicorn

from api.main import app as fastapi_app
from api.v1.dependencies.board import initialize_board_service
from board.attachment_storage import AttachmentStorage
from board.attachment_validator import AttachmentValidator
from board.board_service import BoardService
from shared.config import DEFAULT_MAX_ATTACHMENT_BYTES, load_config
from shared.database import AsyncSessionFactory, close_db, init_db

logger = logging.getLogger(__name__)


def build_board_service(config: dict) -> BoardService:
    """根据配置组装论坛服务"""
    board_config = config.get("board", {})
    attachment_config = config.get("attachment", {})
    validator = AttachmentValidator(
        max_bytes=attachment_config.get("max_bytes", DEFAULT_MAX_ATTACHMENT_BYTES)
    )
    storage = AttachmentStorage(config["upload_dir"])
    return BoardService(
        session_factory=AsyncSessionFactory,
        validator=validator,
        storage=storage,
        page_size=board_config.get("page_size", 10),
        strict_attachments=board_config.get("strict_attachments", False),
    )


async def main():
    config = load_config()

    # 配置日志记录
    logging.basicConfig(
        level=config.get("log_level", "INFO"),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    await init_db()
    Path(config["upload_dir"]).mkdir(parents=True, exist_ok=True)

    initialize_board_service(build_board_service(config))
    logger.info("论坛服务已就绪")

    api_config = config.get("api", {})
    uvicorn_config = uvicorn.Config(
        app=fastapi_app,
        host=api_config.get("host", "0.0.0.0"),
        port=api_config.get("port", 8000),
        log_level="info",
    )
    server = uvicorn.Server(uvicorn_config)

    try:
        await server.serve()
    finally:
        initialize_board_service(None)
        await close_db()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("服务关闭。")
