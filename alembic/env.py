# alembic/env.py
from logging.config import fileConfig
import sys
from pathlib import Path

from sqlalchemy import engine_from_config, pool
from alembic import context

# -------------------------- 核心配置：添加项目路径 + 导入模型 --------------------------
# __file__ = alembic/env.py → 父目录是alembic → 再父目录是项目根目录
sys.path.append(str(Path(__file__).resolve().parent.parent))

# 从模型统一入口导入Base（__init__.py已导出所有模型）
from splatbin.models import Base
from splatbin.config import settings

config = context.config

# 配置日志（读取alembic.ini中的日志设置）
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 数据库地址统一从应用配置读取（环境变量 / .env）
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    离线模式：仅需数据库URL，无需实际连接数据库
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    在线模式：需要创建数据库引擎并建立连接
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # 迁移脚本无需连接池
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite 不支持大部分 ALTER TABLE，使用批量模式
            render_as_batch=connection.dialect.name == "sqlite",
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
