"""时钟抽象：缓存过期判断与默认发布时间都从这里取“当前时间”，便于测试注入"""
from datetime import datetime, timedelta, timezone


class Clock:
    """系统时钟（UTC）"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def isoformat(dt: datetime) -> str:
        """格式化为 2024-01-01T00:00:00.000Z"""
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

    @staticmethod
    def to_millis(dt: datetime) -> int:
        """转为 epoch 毫秒"""
        return int(dt.timestamp() * 1000)


class FrozenClock(Clock):
    """固定时钟，可手动推进，用于测试 TTL 与回退逻辑"""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now
