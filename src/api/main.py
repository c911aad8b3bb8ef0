from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from shared.config import load_config
from webpage import routes as pages

from .v1.routers import threads

# 读取配置
config = load_config()
api_config = config.get("api", {})
enable_docs = api_config.get("enable_docs", True)
cors_origins = api_config.get("cors_origins") or ["*"]

# 根据配置决定是否启用文档
docs_url = "/docs" if enable_docs else None
redoc_url = "/redoc" if enable_docs else None

app = FastAPI(
    title="Anonymous Board API",
    description="匿名论坛 API 服务",
    version="1.0.0",
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_tags=[
        {"name": "系统", "description": "系统相关接口"},
        {"name": "主题", "description": "主题与回复"},
        {"name": "页面", "description": "HTML 页面"},
    ],
)

# 配置 CORS
if "*" in cors_origins:
    allowed_origins = ["*"]
    allow_credentials = False  # "*" 不能与 credentials 同时使用
else:
    allowed_origins = cors_origins
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,  # 预检请求缓存1小时
)

# 启用 GZip 压缩
app.add_middleware(GZipMiddleware, minimum_size=1000)

# 包含路由
app.include_router(threads.router, prefix="/v1")
app.include_router(pages.router)

# 上传的附件；目录在启动时创建
app.mount(
    "/uploads",
    StaticFiles(directory=config["upload_dir"], check_dir=False),
    name="uploads",
)


@app.get("/v1/health", summary="健康检查", tags=["系统"])
async def health_check():
    """API 服务健康检查端点"""
    return {"status": "ok"}
