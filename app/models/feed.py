"""订阅源数据模型（对外 JSON 字段为驼峰命名）"""
import re
from enum import Enum
from typing import List, Optional, Tuple, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 6


class Post(BaseModel):
    """规范化后的文章（Playbook）"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)
    title: str
    content_snippet: str
    link: str
    pub_date: str


class LegacyPost(BaseModel):
    """旧版 Thoughts 列表项：description 代替 contentSnippet"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)
    title: str
    description: str
    pub_date: str
    link: str


FeedPost = Union[Post, LegacyPost]


class CacheEntry(BaseModel):
    """缓存条目，写入后不可变，只会被整体替换"""
    model_config = ConfigDict(frozen=True)
    data: Tuple[FeedPost, ...]
    timestamp: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at


def _parse_int(value: Optional[str], default: int) -> int:
    """按前缀解析整数；缺失、非数字或 0 时使用默认值"""
    if value is None:
        return default
    m = _INT_PREFIX.match(str(value))
    if not m:
        return default
    return int(m.group(1)) or default


class PaginationRequest(BaseModel):
    """分页参数（page 从 1 开始），不做范围校验"""
    model_config = ConfigDict(frozen=True)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "PaginationRequest":
        return cls(
            page=_parse_int(page, DEFAULT_PAGE),
            limit=_parse_int(limit, default_limit),
        )


class FeedResponse(BaseModel):
    """分页文章列表响应"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
    posts: List[Post]
    has_more: bool
    current_page: int
    total_posts: int
    cached: Optional[bool] = None
    last_fetch: Optional[int] = None  # epoch 毫秒


class FeedErrorResponse(BaseModel):
    """严重错误时的 500 响应，结构与空列表成功响应一致"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
    error: str = "RSS feed temporarily unavailable"
    message: str = "Please try again in a few moments"
    posts: List[Post] = []
    has_more: bool = False
    current_page: int = 1
    total_posts: int = 0


class FetchState(str, Enum):
    """单次请求的缓存/抓取结果状态"""
    FRESH_HIT = "FRESH_HIT"
    REFRESHED = "REFRESHED"
    STALE_FALLBACK = "STALE_FALLBACK"
    EMPTY_FALLBACK = "EMPTY_FALLBACK"


class FeedResult(BaseModel):
    """编排器返回值"""
    model_config = ConfigDict(frozen=True)
    posts: Tuple[FeedPost, ...]
    state: FetchState
    last_fetch: datetime

    @property
    def cached(self) -> bool:
        return self.state == FetchState.FRESH_HIT
