"""订阅源 API 路由（Playbook 分页列表 / Thoughts 旧版列表）"""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from app.config import settings
from app.exceptions import NoDataAvailable
from app.models.feed import FeedErrorResponse, FeedResponse, LegacyPost, PaginationRequest
from app.services.feed_service import FeedCacheService, fallback_legacy_posts, get_feed_definition
from app.services.pagination import build_feed_response
from app.utils.logger import logger

router = APIRouter()


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def get_feed_service(request: Request) -> FeedCacheService:
    """从应用状态获取订阅源服务（依赖注入）"""
    return request.app.state.feed_service


@router.get("/playbook-feed", response_model=FeedResponse)
async def playbook_feed(
    response: Response,
    page: Optional[str] = Query(default=None, description="页码，从 1 开始"),
    limit: Optional[str] = Query(default=None, description="每页条数，默认 6"),
    service: FeedCacheService = Depends(get_feed_service),
):
    """
    Playbook 文章列表（分页 + 10 分钟内存缓存）

    抓取失败时依次降级为过期缓存、空列表；只有意外错误才返回 500，
    且响应体结构与空列表一致。
    """
    response.headers.update(cors_headers())
    try:
        pagination = PaginationRequest.from_query(page, limit, settings.playbook_default_limit)
        result = await service.get_posts(get_feed_definition("playbook"))
        data = build_feed_response(result, pagination)
    except Exception as e:
        logger.exception(f"playbook-feed 严重错误: {e}")
        return JSONResponse(
            status_code=500,
            content=FeedErrorResponse().model_dump(by_alias=True),
            headers=cors_headers(),
        )

    response.headers["Cache-Control"] = f"public, max-age={settings.browser_cache_max_age}"
    return data


@router.get("/substack-feed", response_model=List[LegacyPost])
async def substack_feed(
    response: Response,
    service: FeedCacheService = Depends(get_feed_service),
):
    """
    Thoughts 旧版列表（最多 10 条，无分页）

    始终返回 200 且不为空：无可用数据时返回固定兜底内容。
    """
    response.headers.update(cors_headers())
    posts: List[LegacyPost] = []
    try:
        result = await service.require_posts(get_feed_definition("thoughts"))
        posts = list(result.posts)
    except NoDataAvailable as e:
        logger.warning(f"{e}，返回兜底内容")
    except Exception as e:
        logger.exception(f"substack-feed 意外错误，返回兜底内容: {e}")

    if not posts:
        posts = fallback_legacy_posts(service.clock)
    return posts


@router.options("/playbook-feed", include_in_schema=False)
@router.options("/substack-feed", include_in_schema=False)
async def feed_options():
    """CORS 预检：200 且无响应体（其余方法的 405 由 main 中的异常处理器返回）"""
    return Response(status_code=200, headers=cors_headers())
