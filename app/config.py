"""配置管理模块"""
from pydantic_settings import BaseSettings
from typing import Dict, Any


class Settings(BaseSettings):
    """应用配置"""

    # 应用配置
    app_name: str = "Portfolio Feed API"
    app_version: str = "1.0.0"
    debug: bool = False

    # 服务器配置
    host: str = "0.0.0.0"
    port: int = 5000

    # 日志配置
    log_level: str = "INFO"
    log_file: str = "logs/app.log"

    # 订阅源地址（Playbook 分页列表 / Thoughts 旧版列表）
    playbook_feed_url: str = "https://shivacharanmandhapuram.substack.com/feed"
    thoughts_feed_url: str = "https://feeds.simplecast.com/54nAGcIl"
    thoughts_home_url: str = "https://shivacharanmandhapuram.substack.com"

    # 订阅源抓取配置
    feed_timeout: int = 15  # 请求超时（秒）
    feed_retry_count: int = 1  # 每个请求只抓取一次，不重试
    feed_user_agent: str = "Mozilla/5.0 (compatible; RSS-Parser)"
    feed_accept: str = "application/rss+xml, application/xml, text/xml"

    # 缓存配置
    feed_cache_ttl: int = 600  # 内存缓存有效期（秒），固定 10 分钟
    browser_cache_max_age: int = 300  # 浏览器缓存 Cache-Control max-age（秒）

    # 分页与条数
    playbook_default_limit: int = 6
    thoughts_max_items: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# 全局配置实例
settings = Settings()


def get_feed_config(feed_name: str) -> Dict[str, Any]:
    """获取指定订阅源的配置"""
    configs = {
        "playbook": {
            "url": settings.playbook_feed_url,
            "max_items": None,
        },
        "thoughts": {
            "url": settings.thoughts_feed_url,
            "max_items": settings.thoughts_max_items,
        },
    }

    if feed_name not in configs:
        raise ValueError(f"Unsupported feed: {feed_name}")

    return configs[feed_name]
