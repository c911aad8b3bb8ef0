"""HTML 页面路由：首页、发帖、回复、主题页"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse

from api.v1.dependencies.board import get_board_service
from api.v1.utils.upload_utils import read_upload
from board.board_service import BoardService
from shared.exceptions import AttachmentRejected, NotFound, StoreError, ValidationError
from webpage.renderer import render_error, render_feed, render_thread

logger = logging.getLogger(__name__)

router = APIRouter(tags=["页面"])


def _error_page(status_code: int, message: str) -> HTMLResponse:
    return HTMLResponse(render_error(message), status_code=status_code)


@router.get("/", response_class=HTMLResponse, summary="首页")
async def index(
    page: int = 1,
    service: BoardService = Depends(get_board_service),
):
    page = max(page, 1)
    try:
        entries = await service.list_threads_page(page)
    except StoreError:
        return _error_page(status.HTTP_500_INTERNAL_SERVER_ERROR, "读取主题列表失败")
    return HTMLResponse(render_feed(entries, page))


@router.post("/submit", summary="发布主题")
async def submit(
    content: str = Form(""),
    file: Optional[UploadFile] = File(None),
    service: BoardService = Depends(get_board_service),
):
    attachment = await read_upload(file, service.validator.max_bytes)
    try:
        await service.create_thread(content, attachment)
    except ValidationError as e:
        return _error_page(status.HTTP_400_BAD_REQUEST, str(e))
    except AttachmentRejected as e:
        return _error_page(status.HTTP_400_BAD_REQUEST, e.reason)
    except StoreError:
        return _error_page(status.HTTP_500_INTERNAL_SERVER_ERROR, "发布主题失败")
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/submit_reply/{parent_id}", summary="回复主题")
async def submit_reply(
    parent_id: int,
    content: str = Form(""),
    service: BoardService = Depends(get_board_service),
):
    try:
        await service.create_reply(parent_id, content)
    except ValidationError as e:
        return _error_page(status.HTTP_400_BAD_REQUEST, str(e))
    except NotFound as e:
        return _error_page(status.HTTP_404_NOT_FOUND, str(e))
    except StoreError:
        return _error_page(status.HTTP_500_INTERNAL_SERVER_ERROR, "回复失败")
    return RedirectResponse(
        url=f"/reply/{parent_id}", status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/reply/{post_id}", response_class=HTMLResponse, summary="主题页")
async def reply_page(
    post_id: int,
    service: BoardService = Depends(get_board_service),
):
    try:
        view = await service.get_thread(post_id)
    except NotFound as e:
        return _error_page(status.HTTP_404_NOT_FOUND, str(e))
    except StoreError:
        return _error_page(status.HTTP_500_INTERNAL_SERVER_ERROR, "读取主题失败")
    return HTMLResponse(render_thread(view))
