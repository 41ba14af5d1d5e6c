from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def create_db_engine(database_url: str) -> Engine:
    """
    创建数据库引擎

    SQLite 需要关闭同线程检查（请求处理和清理任务在不同线程中访问）
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=False,  # 禁用预连接，避免导入时就连接数据库
        pool_recycle=3600,
        echo=False
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
