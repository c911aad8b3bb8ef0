import pytest
import pytest_asyncio
from pathlib import Path
from typing import AsyncGenerator

import httpx
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlmodel import SQLModel

import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from shared.models.post import Post  # noqa: F401
from api.main import app
from api.v1.dependencies.board import initialize_board_service
from board.attachment_storage import AttachmentStorage
from board.attachment_validator import AttachmentValidator
from board.board_service import BoardService

# 使用内存数据库进行测试
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
EXE_BYTES = b"MZ" + b"\x00" * 1022


class FakeClock:
    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    await engine.dispose()


def build_service(session_factory, upload_dir: Path, **kwargs) -> BoardService:
    return BoardService(
        session_factory=session_factory,
        validator=AttachmentValidator(),
        storage=AttachmentStorage(str(upload_dir)),
        clock=FakeClock(),
        **kwargs,
    )


@pytest_asyncio.fixture
async def client(session_factory, tmp_path: Path) -> AsyncGenerator[httpx.AsyncClient, None]:
    """注入论坛服务并提供一个直连 ASGI 应用的客户端"""
    initialize_board_service(build_service(session_factory, tmp_path / "uploads"))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    initialize_board_service(None)


# ───────────────────────────────  JSON API  ──────────────────────────────────
@pytest.mark.asyncio
async def test_health(client: httpx.AsyncClient):
    response = await client.get("/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_service_not_initialized():
    """测试服务未注入时返回 503"""
    initialize_board_service(None)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        response = await c.get("/v1/threads")
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_create_and_list_threads(client: httpx.AsyncClient):
    """测试发帖后出现在首页，且分页信息正确"""
    response = await client.post("/v1/threads", data={"content": "hello"})
    assert response.status_code == 201
    created = response.json()
    assert created["content"] == "hello"
    assert len(created["display_id"]) == 5
    assert created["parent_id"] is None
    assert created["reply_sequence"] is None
    assert created["bumped_at"] == created["created_at"]

    response = await client.get("/v1/threads", params={"page": 0})
    assert response.status_code == 200
    body = response.json()
    assert body["page"] == 1
    assert body["previous_page"] is None
    assert body["next_page"] == 2
    assert body["page_size"] == 10
    assert [t["root"]["id"] for t in body["results"]] == [created["id"]]
    assert body["results"][0]["reply_count"] == 0

    response = await client.get("/v1/threads", params={"page": 2})
    body = response.json()
    assert body["previous_page"] == 1
    assert body["results"] == []


@pytest.mark.asyncio
async def test_create_thread_empty_content(client: httpx.AsyncClient):
    response = await client.post("/v1/threads", data={"content": "   "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_replies_and_thread_detail(client: httpx.AsyncClient):
    """测试回复后详情按序号倒序，主题被顶到最前"""
    root = (await client.post("/v1/threads", data={"content": "hello"})).json()
    other = (await client.post("/v1/threads", data={"content": "other"})).json()

    for content in ("r1", "r2"):
        response = await client.post(
            f"/v1/threads/{root['id']}/replies", data={"content": content}
        )
        assert response.status_code == 201

    detail = (await client.get(f"/v1/threads/{root['id']}")).json()
    assert [r["content"] for r in detail["replies"]] == ["r2", "r1"]
    assert [r["reply_sequence"] for r in detail["replies"]] == [2, 1]
    assert detail["root"]["bumped_at"] == detail["replies"][0]["created_at"]

    feed = (await client.get("/v1/threads")).json()
    assert [t["root"]["id"] for t in feed["results"]] == [root["id"], other["id"]]
    assert feed["results"][0]["reply_count"] == 2


@pytest.mark.asyncio
async def test_reply_errors(client: httpx.AsyncClient):
    root = (await client.post("/v1/threads", data={"content": "hello"})).json()

    response = await client.post("/v1/threads/9999/replies", data={"content": "x"})
    assert response.status_code == 404

    response = await client.post(
        f"/v1/threads/{root['id']}/replies", data={"content": ""}
    )
    assert response.status_code == 400

    response = await client.get("/v1/threads/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_upload_attachment(client: httpx.AsyncClient, tmp_path: Path):
    """测试上传图片附件"""
    response = await client.post(
        "/v1/threads",
        data={"content": "picture"},
        files={"file": ("cat.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["attachment"].startswith("/uploads/")
    assert body["attachment"].endswith(".png")
    assert body["attachment_kind"] == "image"
    assert (tmp_path / "uploads" / body["attachment"].rsplit("/", 1)[-1]).exists()


@pytest.mark.asyncio
async def test_rejected_upload_is_dropped(client: httpx.AsyncClient):
    """测试默认策略下不合法的附件被丢弃"""
    response = await client.post(
        "/v1/threads",
        data={"content": "virus"},
        files={"file": ("setup.exe", EXE_BYTES, "application/octet-stream")},
    )
    assert response.status_code == 201
    assert response.json()["attachment"] is None


@pytest.mark.asyncio
async def test_rejected_upload_in_strict_mode(session_factory, tmp_path: Path):
    """测试严格模式下不合法的附件返回 415"""
    initialize_board_service(
        build_service(session_factory, tmp_path / "uploads", strict_attachments=True)
    )
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post(
                "/v1/threads",
                data={"content": "virus"},
                files={"file": ("setup.exe", EXE_BYTES, "application/octet-stream")},
            )
            assert response.status_code == 415
            feed = (await c.get("/v1/threads")).json()
            assert feed["results"] == []
    finally:
        initialize_board_service(None)


# ───────────────────────────────  HTML 页面  ──────────────────────────────────
@pytest.mark.asyncio
async def test_submit_redirects_to_feed(client: httpx.AsyncClient):
    response = await client.post("/submit", data={"content": "<b>hi</b>"})
    assert response.status_code == 303
    assert response.headers["location"] == "/"

    page = await client.get("/")
    assert page.status_code == 200
    assert "&lt;b&gt;hi&lt;/b&gt;" in page.text
    assert "<b>hi</b>" not in page.text
    assert "Reply (0)" in page.text
    assert "Previous" not in page.text
    assert 'href="/?page=2"' in page.text


@pytest.mark.asyncio
async def test_feed_pagination_links(client: httpx.AsyncClient):
    page = await client.get("/", params={"page": 3})
    assert 'href="/?page=2" class="button">Previous' in page.text
    assert 'href="/?page=4" class="button">Next' in page.text


@pytest.mark.asyncio
async def test_submit_empty_content(client: httpx.AsyncClient):
    response = await client.post("/submit", data={"content": ""})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reply_pages(client: httpx.AsyncClient):
    """测试回复表单跳转到主题页，主题页按序号倒序展示回复"""
    root = (await client.post("/v1/threads", data={"content": "hello"})).json()

    for content in ("first reply", "second reply"):
        response = await client.post(
            f"/submit_reply/{root['id']}", data={"content": content}
        )
        assert response.status_code == 303
        assert response.headers["location"] == f"/reply/{root['id']}"

    page = await client.get(f"/reply/{root['id']}")
    assert page.status_code == 200
    assert page.text.index("Reply 2") < page.text.index("Reply 1")
    assert f'action="/submit_reply/{root["id"]}"' in page.text

    response = await client.post("/submit_reply/9999", data={"content": "x"})
    assert response.status_code == 404

    response = await client.get("/reply/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_out_of_range_ids_return_404(client: httpx.AsyncClient):
    """测试超出 SQLite 整数范围的 ID 返回 404 而不是崩溃"""
    huge = 2**70

    response = await client.get(f"/reply/{huge}")
    assert response.status_code == 404

    response = await client.post(f"/submit_reply/{huge}", data={"content": "x"})
    assert response.status_code == 404

    response = await client.get(f"/v1/threads/{huge}")
    assert response.status_code == 404

    response = await client.post(f"/v1/threads/{huge}/replies", data={"content": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_feed_renders_uploaded_image(client: httpx.AsyncClient):
    """测试通过表单上传的图片在首页和主题页以 img 标签展示"""
    response = await client.post(
        "/submit",
        data={"content": "picture"},
        files={"file": ("cat.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 303

    page = await client.get("/")
    assert "<img src='/uploads/" in page.text
    assert "class='post-image'" in page.text

    root = (await client.get("/v1/threads")).json()["results"][0]["root"]
    thread = await client.get(f"/reply/{root['id']}")
    assert f"<img src='{root['attachment']}'" in thread.text
