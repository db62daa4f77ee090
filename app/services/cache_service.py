"""订阅源内存缓存服务"""
from typing import Dict, Optional, Sequence
from datetime import datetime, timedelta
from app.models.feed import CacheEntry, FeedPost
from app.config import settings
from app.utils.logger import logger


def cache_key(url: str) -> str:
    """每个订阅源地址对应一个固定缓存键"""
    return f"feed:{url}"


class FeedCache:
    """缓存服务类：按缓存键保存最近一次成功抓取的文章列表"""

    def __init__(self, ttl_seconds: Optional[int] = None):
        """
        初始化缓存服务

        Args:
            ttl_seconds: 缓存有效期（秒），默认取 settings.feed_cache_ttl
        """
        self.ttl = timedelta(
            seconds=settings.feed_cache_ttl if ttl_seconds is None else ttl_seconds
        )
        self._store: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        读取缓存条目（不判断是否过期）

        过期条目仍会返回，由调用方决定是否作为抓取失败时的回退数据。
        """
        return self._store.get(key)

    def put(self, key: str, posts: Sequence[FeedPost], now: datetime) -> CacheEntry:
        """
        写入新的缓存条目，整体替换旧条目

        Args:
            key: 缓存键
            posts: 规范化后的文章列表
            now: 抓取时间

        Returns:
            新写入的缓存条目
        """
        entry = CacheEntry(
            data=tuple(posts),
            timestamp=now,
            expires_at=now + self.ttl,
        )
        self._store[key] = entry
        logger.info(f"写入缓存: key={key}, count={len(entry.data)}, 过期时间={entry.expires_at.isoformat()}")
        return entry

    def clear(self, key: Optional[str] = None) -> None:
        """清除指定缓存键，不传则清空全部"""
        if key is None:
            self._store.clear()
        else:
            self._store.pop(key, None)
        logger.info(f"清除缓存: key={key or '*'}")
