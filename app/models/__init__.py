"""数据模型模块"""
from app.models.feed import (
    Post,
    LegacyPost,
    CacheEntry,
    PaginationRequest,
    FeedResponse,
    FeedErrorResponse,
    FetchState,
    FeedResult,
)

__all__ = [
    "Post",
    "LegacyPost",
    "CacheEntry",
    "PaginationRequest",
    "FeedResponse",
    "FeedErrorResponse",
    "FetchState",
    "FeedResult",
]
