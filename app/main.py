"""FastAPI应用入口"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import settings
from app.routers import feeds
from app.services.cache_service import FeedCache
from app.services.feed_service import FeedCacheService, FeedFetcher
from app.utils.clock import Clock
from app.utils.http_client import HttpClient
from app.utils.logger import logger


def build_feed_service(clock: Optional[Clock] = None) -> FeedCacheService:
    """组装缓存、HTTP 客户端、抓取器与编排服务"""
    http_client = HttpClient(
        timeout=settings.feed_timeout,
        retry_count=settings.feed_retry_count,
    )
    return FeedCacheService(
        cache=FeedCache(settings.feed_cache_ttl),
        fetcher=FeedFetcher(http_client),
        clock=clock or Clock(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭"""
    logger.info(f"{settings.app_name} v{settings.app_version} 启动成功")
    logger.info(f"API文档地址: http://{settings.host}:{settings.port}/docs")
    yield
    logger.info(f"{settings.app_name} 正在关闭...")
    http_client = getattr(app.state.feed_service.fetcher, "http_client", None)
    if isinstance(http_client, HttpClient):
        await http_client.close()
        logger.info("订阅源 HTTP 客户端已关闭")


def create_app(feed_service: Optional[FeedCacheService] = None) -> FastAPI:
    """
    创建FastAPI应用

    Args:
        feed_service: 订阅源服务，不传则按配置创建（测试可注入假抓取器与固定时钟）
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="个人主页订阅源接口服务",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 头与 OPTIONS 预检由 feeds 路由自行处理，不挂 CORSMiddleware
    app.state.feed_service = feed_service or build_feed_service()

    # 注册路由
    app.include_router(feeds.router, prefix="/api", tags=["订阅源"])

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        """任何不支持的请求方法统一返回 {"error": "Method not allowed"}"""
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        headers = dict(exc.headers or {})
        headers.update(feeds.cors_headers())
        return JSONResponse(status_code=405, content={"error": "Method not allowed"}, headers=headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """全局异常处理器"""
        logger.opt(exception=exc).error(f"未处理的异常: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    async def root():
        """根路径"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @app.get("/health")
    async def health_check():
        """健康检查"""
        return {"status": "healthy"}

    return app


app = create_app()
