"""订阅源服务异常定义"""
from typing import Optional


class FeedError(Exception):
    """订阅源相关异常基类"""
    pass


class FetchFailed(FeedError):
    """抓取失败：网络错误、超时、非 2xx 响应或文档没有条目集合"""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        self.message = f"Failed to fetch feed '{url}': {detail}"
        super().__init__(self.message)


class NoDataAvailable(FeedError):
    """抓取失败且没有任何缓存可用"""

    def __init__(self, feed_name: str):
        self.feed_name = feed_name
        self.message = f"No data available for feed '{feed_name}'"
        super().__init__(self.message)


class CriticalError(FeedError):
    """回退流程之外的意外错误（如解析/规范化代码缺陷）"""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        self.cause = cause
        self.message = f"Critical feed error: {detail}"
        super().__init__(self.message)
