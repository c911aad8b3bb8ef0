import logging
from typing import Optional

from fastapi import HTTPException, status

from board.board_service import BoardService

logger = logging.getLogger(__name__)

# 全局变量，在应用启动时注入
_BOARD_SERVICE: Optional[BoardService] = None


def initialize_board_service(service: Optional[BoardService]):
    """在应用启动时调用，注入论坛服务实例"""
    global _BOARD_SERVICE
    _BOARD_SERVICE = service
    if service is not None:
        logger.info("论坛服务已注入 API")


async def get_board_service() -> BoardService:
    if _BOARD_SERVICE is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="论坛服务未初始化"
        )
    return _BOARD_SERVICE
