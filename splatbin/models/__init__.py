"""模型统一导出入口，供Alembic和业务代码调用"""
from .base import Base
from .upload import Upload

# 暴露所有模型类，便于Alembic自动生成迁移脚本
__all__ = ["Base", "Upload"]
