"""分页与响应组装"""
from typing import List, Sequence, Tuple
from app.models.feed import FeedPost, FeedResponse, FeedResult, PaginationRequest
from app.utils.clock import Clock


def paginate(posts: Sequence[FeedPost], request: PaginationRequest) -> Tuple[List[FeedPost], bool]:
    """
    截取 [offset, offset + limit) 区间

    越界只会得到空页或不完整的最后一页；负数偏移同样得到空页。
    返回 (当前页, 是否还有更多)
    """
    start = max(request.offset, 0)
    end = max(request.offset + request.limit, 0)
    page_items = list(posts[start:end])
    has_more = request.offset + request.limit < len(posts)
    return page_items, has_more


def build_feed_response(result: FeedResult, request: PaginationRequest) -> FeedResponse:
    """由编排结果与分页参数组装 FeedResponse"""
    page_items, has_more = paginate(result.posts, request)
    return FeedResponse(
        posts=page_items,
        has_more=has_more,
        current_page=request.page,
        total_posts=len(result.posts),
        cached=result.cached,
        last_fetch=Clock.to_millis(result.last_fetch),
    )
