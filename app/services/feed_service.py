"""订阅源服务：抓取 RSS/Atom、规范化条目、带缓存与降级的编排"""
import io
from typing import Any, Callable, Dict, List, Optional, Sequence
import httpx
import feedparser
from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict
from app.config import settings, get_feed_config
from app.exceptions import FetchFailed, NoDataAvailable, CriticalError
from app.models.feed import Post, LegacyPost, FeedPost, FeedResult, FetchState
from app.services.cache_service import FeedCache, cache_key
from app.utils.clock import Clock
from app.utils.http_client import HttpClient
from app.utils.logger import logger

# 无摘要时正文截取长度
_SNIPPET_LENGTH = 200

UNTITLED = "Untitled Post"
NO_CONTENT = "No content available"
NO_LINK = "#"


def _text(value: Any) -> str:
    """将任意字段值转为去空白字符串，None 视为空"""
    if value is None:
        return ""
    return str(value).strip()


def _html_to_text(value: Any) -> str:
    """HTML 片段转纯文本"""
    s = _text(value)
    if not s:
        return ""
    return " ".join(BeautifulSoup(s, "html.parser").get_text(" ").split())


def _body(item: Dict[str, Any]) -> str:
    """条目正文（content:encoded 等），取第一段"""
    content = item.get("content")
    if isinstance(content, (list, tuple)) and content:
        first = content[0]
        if isinstance(first, dict):
            return _text(first.get("value"))
        return _text(first)
    return _text(content)


def _excerpt(item: Dict[str, Any]) -> str:
    return _html_to_text(item.get("summary"))


def normalize_post(item: Dict[str, Any], clock: Clock) -> Post:
    """
    原始条目 -> Post

    缺失字段使用固定默认值；没有发布时间时取当前时间。
    """
    snippet = _excerpt(item)
    if not snippet:
        body = _body(item)
        snippet = body[:_SNIPPET_LENGTH] + "..." if body else NO_CONTENT
    pub_date = _text(item.get("published")) or _text(item.get("updated")) or clock.isoformat(clock.now())
    return Post(
        title=_text(item.get("title")) or UNTITLED,
        content_snippet=snippet,
        link=_text(item.get("link")) or NO_LINK,
        pub_date=pub_date,
    )


def normalize_legacy_post(item: Dict[str, Any], clock: Optional[Clock] = None) -> LegacyPost:
    """原始条目 -> LegacyPost（旧版 Thoughts 列表，缺失字段为空字符串）"""
    return LegacyPost(
        title=_text(item.get("title")),
        description=_excerpt(item) or _body(item),
        pub_date=_text(item.get("published")),
        link=_text(item.get("link")),
    )


def fallback_legacy_posts(clock: Clock) -> List[LegacyPost]:
    """Thoughts 列表兜底内容：抓取失败且无缓存时返回，保证列表不为空"""
    return [
        LegacyPost(
            title="Welcome to My Thoughts",
            description=(
                "Exploring ideas at the intersection of technology, entrepreneurship, "
                "and human behavior. More posts coming soon!"
            ),
            pub_date=clock.isoformat(clock.now()),
            link=settings.thoughts_home_url,
        )
    ]


class FeedDefinition(BaseModel):
    """订阅源定义：地址、条数上限与规范化函数"""
    model_config = ConfigDict(frozen=True)
    name: str
    url: str
    normalizer: Callable[..., FeedPost]
    max_items: Optional[int] = None


def get_feed_definition(feed_name: str) -> FeedDefinition:
    """按名称构建订阅源定义（playbook / thoughts）"""
    config = get_feed_config(feed_name)
    normalizer = normalize_legacy_post if feed_name == "thoughts" else normalize_post
    return FeedDefinition(
        name=feed_name,
        url=config["url"],
        normalizer=normalizer,
        max_items=config["max_items"],
    )


class FeedFetcher:
    """抓取并解析订阅源文档"""

    def __init__(self, http_client: HttpClient):
        self.http_client = http_client

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.feed_user_agent,
            "Accept": settings.feed_accept,
        }

    async def fetch_items(self, url: str) -> List[Dict[str, Any]]:
        """
        抓取订阅源并返回原始条目列表

        Raises:
            FetchFailed: 网络错误/超时、非 2xx 响应、或文档不是有效订阅源
        """
        try:
            content = await self.http_client.get_content(url, headers=self.headers)
        except httpx.HTTPStatusError as e:
            raise FetchFailed(url, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise FetchFailed(url, f"{type(e).__name__}: {e}") from e

        parsed = feedparser.parse(io.BytesIO(content))
        entries = parsed.get("entries")
        if not parsed.get("version") and not entries:
            raise FetchFailed(url, "Invalid RSS feed structure")
        items = list(entries or [])
        logger.info(f"订阅源 {url} 拉取到 {len(items)} 条")
        return items


class FeedCacheService:
    """带缓存的抓取编排：新鲜缓存 -> 重新抓取 -> 过期缓存 -> 空列表"""

    def __init__(self, cache: FeedCache, fetcher: FeedFetcher, clock: Optional[Clock] = None):
        self.cache = cache
        self.fetcher = fetcher
        self.clock = clock or Clock()

    def _normalize(self, feed: FeedDefinition, items: Sequence[Dict[str, Any]]) -> List[FeedPost]:
        if feed.max_items is not None:
            items = items[: feed.max_items]
        try:
            return [feed.normalizer(item, self.clock) for item in items]
        except Exception as e:
            raise CriticalError(f"normalization failed for feed '{feed.name}'", cause=e) from e

    async def get_posts(self, feed: FeedDefinition) -> FeedResult:
        """
        获取订阅源文章列表，每个请求最多抓取一次

        抓取失败时不会淘汰或覆盖已有缓存条目。
        """
        key = cache_key(feed.url)
        now = self.clock.now()
        entry = self.cache.get(key)

        if entry is not None and entry.is_fresh(now):
            logger.info(f"使用缓存数据: feed={feed.name}, count={len(entry.data)}")
            return FeedResult(posts=entry.data, state=FetchState.FRESH_HIT, last_fetch=entry.timestamp)

        logger.info(f"抓取最新订阅源: feed={feed.name}, url={feed.url}")
        try:
            items = await self.fetcher.fetch_items(feed.url)
        except FetchFailed as e:
            logger.warning(f"订阅源抓取失败: {e}")
            if entry is not None:
                logger.info(f"抓取失败，使用过期缓存: feed={feed.name}, count={len(entry.data)}")
                return FeedResult(posts=entry.data, state=FetchState.STALE_FALLBACK, last_fetch=entry.timestamp)
            logger.info(f"抓取失败且无缓存，返回空列表: feed={feed.name}")
            return FeedResult(posts=(), state=FetchState.EMPTY_FALLBACK, last_fetch=now)

        posts = self._normalize(feed, items)
        new_entry = self.cache.put(key, posts, now)
        logger.info(f"已缓存 {len(new_entry.data)} 条，有效期 {int(self.cache.ttl.total_seconds())} 秒: feed={feed.name}")
        return FeedResult(posts=new_entry.data, state=FetchState.REFRESHED, last_fetch=new_entry.timestamp)

    async def require_posts(self, feed: FeedDefinition) -> FeedResult:
        """
        同 get_posts，但无任何可用数据时抛出 NoDataAvailable

        Raises:
            NoDataAvailable: 抓取失败且没有缓存
        """
        result = await self.get_posts(feed)
        if result.state == FetchState.EMPTY_FALLBACK:
            raise NoDataAvailable(feed.name)
        return result
