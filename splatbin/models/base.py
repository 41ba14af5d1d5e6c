from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from splatbin.utils.timeutil import ensure_aware_datetime, utcnow

# 定义基类，所有模型继承此类
Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    统一按 UTC 存储的时间类型

    写入前转换为无时区的 UTC 时间，读出后补上 UTC 时区，
    保证 SQLite 和其他数据库下比较结果一致
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_aware_datetime(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        return ensure_aware_datetime(value)


class BaseModel(Base):
    """通用模型基类，提取公共字段"""
    __abstract__ = True  # 标记为抽象类，不生成实际表

    created_at = Column(UTCDateTime, default=utcnow, nullable=False, comment="创建时间")
