"""主题与回复相关路由"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from api.v1.dependencies.board import get_board_service
from api.v1.schemas.post import (
    PostDetail,
    ThreadDetailResponse,
    ThreadPageResponse,
    ThreadSummary,
)
from api.v1.utils.upload_utils import read_upload
from board.board_service import BoardService
from shared.exceptions import AttachmentRejected, NotFound, StoreError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/threads", tags=["主题"])


@router.get("", summary="分页获取主题列表", response_model=ThreadPageResponse)
async def list_threads(
    page: int = Query(1, description="页码，从 1 开始；小于 1 按 1 处理"),
    service: BoardService = Depends(get_board_service),
):
    """按最后活跃时间倒序返回一页主题及各自的回复数"""
    page = max(page, 1)
    try:
        entries = await service.list_threads_page(page)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="读取主题列表失败"
        )

    return ThreadPageResponse(
        page=page,
        page_size=service.page_size,
        previous_page=page - 1 if page > 1 else None,
        next_page=page + 1,
        results=[
            ThreadSummary(
                root=PostDetail.from_post(entry.root), reply_count=entry.reply_count
            )
            for entry in entries
        ],
    )


@router.get("/{root_id}", summary="获取主题详情", response_model=ThreadDetailResponse)
async def get_thread(
    root_id: int,
    service: BoardService = Depends(get_board_service),
):
    """返回根帖及全部回复，回复按序号倒序"""
    try:
        view = await service.get_thread(root_id)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="读取主题失败"
        )

    return ThreadDetailResponse(
        root=PostDetail.from_post(view.root),
        replies=[PostDetail.from_post(reply) for reply in view.replies],
    )


@router.post(
    "",
    summary="发布主题",
    response_model=PostDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_thread(
    content: str = Form("", description="正文"),
    file: Optional[UploadFile] = File(None, description="可选的图片/视频/音频附件"),
    service: BoardService = Depends(get_board_service),
):
    """
    发布新主题

    - content: 正文（必填，去除首尾空白后不能为空）
    - file: 附件（可选，最大 20MB）
    """
    attachment = await read_upload(file, service.validator.max_bytes)
    try:
        post = await service.create_thread(content, attachment)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AttachmentRejected as e:
        raise HTTPException(
            status_code=413
            if e.oversize
            else status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=e.reason,
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="发布主题失败"
        )
    return PostDetail.from_post(post)


@router.post(
    "/{root_id}/replies",
    summary="回复主题",
    response_model=PostDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_reply(
    root_id: int,
    content: str = Form("", description="正文"),
    service: BoardService = Depends(get_board_service),
):
    """回复主题，主题会被顶到首页最前"""
    try:
        reply = await service.create_reply(root_id, content)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="回复失败"
        )
    return PostDetail.from_post(reply)
