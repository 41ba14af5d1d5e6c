"""
时间工具
所有时间统一使用 UTC 且带时区信息
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """当前 UTC 时间（带时区），作为默认时钟注入各服务"""
    return datetime.now(timezone.utc)


def ensure_aware_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """
    确保 datetime 带时区信息

    - 无时区的时间视为 UTC（SQLite 读出的时间不带时区）
    - 带时区的时间统一转换为 UTC
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """过期判定：expires_at 存在且不晚于当前时间"""
    if expires_at is None:
        return False
    return ensure_aware_datetime(expires_at) <= ensure_aware_datetime(now)
