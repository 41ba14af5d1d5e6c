"""
过期时间计算策略

纯函数：给定 (过期请求, 当前时间, 服务器策略)，结果是确定的，不读取全局配置。

过期请求（hint）有三种形式：
- int: 保留小时数（<= 0 表示请求永不过期）
- str: 绝对时间 "YYYY-MM-DD H"（日期 + 小时，按 UTC 解释）
- None: 未指定

返回值为带时区的绝对过期时间，None 表示永不过期。
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union
import re

from splatbin.config import ExpiryPolicy
from splatbin.utils.timeutil import ensure_aware_datetime

ExpirationHint = Union[int, str, None]

DATE_HOUR_PATTERN = re.compile(r'^(\d{4}-\d{2}-\d{2})\s+(\d{1,2})$')

# 决策原因，仅用于日志审计，不落库
REASON_REQUESTED = "requested"
REASON_CLAMPED = "clamped"
REASON_EVERLASTING = "everlasting"
REASON_SERVER_HORIZON = "server_horizon"
REASON_SERVER_UNLIMITED = "server_unlimited"


def parse_expiration_hint(expires_hours: Optional[str] = None, expires: Optional[str] = None) -> ExpirationHint:
    """
    将表单/查询参数转换为过期请求

    expires_hours 能解析为整数时优先使用；否则使用非空的 expires 字符串；都没有则为 None
    """
    if expires_hours is not None and str(expires_hours).strip():
        try:
            return int(str(expires_hours).strip())
        except ValueError:
            pass
    if expires is not None and expires.strip():
        return expires.strip()
    return None


def parse_date_hour(value: str) -> Optional[datetime]:
    """解析 "YYYY-MM-DD H" 格式，格式或数值非法时返回 None"""
    match = DATE_HOUR_PATTERN.match(value.strip())
    if not match:
        return None
    date_str, hour_str = match.groups()
    hour = int(hour_str)
    if hour > 23:
        return None
    try:
        day = datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        return None
    return day.replace(hour=hour, tzinfo=timezone.utc)


def _horizon(now: datetime, policy: ExpiryPolicy) -> Optional[datetime]:
    if policy.max_hours is None:
        return None
    return now + timedelta(hours=policy.max_hours)


def _never(now: datetime, policy: ExpiryPolicy) -> Tuple[Optional[datetime], str]:
    """请求永不过期（或未指定）时的处理"""
    if policy.allow_everlasting:
        return None, REASON_EVERLASTING
    horizon = _horizon(now, policy)
    if horizon is None:
        return None, REASON_SERVER_UNLIMITED
    return horizon, REASON_SERVER_HORIZON


def _clamp(requested: datetime, now: datetime, policy: ExpiryPolicy) -> Tuple[Optional[datetime], str]:
    horizon = _horizon(now, policy)
    if horizon is not None and requested > horizon:
        return horizon, REASON_CLAMPED
    return requested, REASON_REQUESTED


def decide_expiration(hint: ExpirationHint, now: datetime, policy: ExpiryPolicy) -> Tuple[Optional[datetime], str]:
    """计算过期时间并返回采用的规则"""
    now = ensure_aware_datetime(now)

    if hint is None:
        return _never(now, policy)

    if isinstance(hint, str):
        requested = parse_date_hour(hint)
        # 非法格式或不是未来时间，视为未指定
        if requested is None or requested <= now:
            return _never(now, policy)
        return _clamp(requested, now, policy)

    hours = int(hint)
    if hours <= 0:
        return _never(now, policy)
    # 先按小时数截断，超大的请求值不会溢出
    if policy.max_hours is not None and hours > policy.max_hours:
        return _horizon(now, policy), REASON_CLAMPED
    try:
        requested = now + timedelta(hours=hours)
    except OverflowError:
        # 仅在服务器不限制保留时长时可能发生
        return _never(now, policy)
    return _clamp(requested, now, policy)


def compute_expiration(hint: ExpirationHint, now: datetime, policy: ExpiryPolicy) -> Optional[datetime]:
    """计算绝对过期时间，None 表示永不过期"""
    return decide_expiration(hint, now, policy)[0]
