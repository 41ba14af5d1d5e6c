from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import logging

from splatbin.config import Settings, settings
from splatbin.dependencies import build_services
from splatbin.errors import register_error_handlers
from splatbin.extensions import create_db_engine
from splatbin.models import Base
from splatbin.services.reaper_service import ReaperScheduler
from splatbin.utils.timeutil import utcnow
import splatbin.routes.api as api_router
import splatbin.routes.health as health_router
import splatbin.routes.web as web_router

logger = logging.getLogger(__name__)

static_dir = Path(__file__).resolve().parent / "static"


def create_app(app_settings: Optional[Settings] = None, clock: Callable[[], datetime] = utcnow) -> FastAPI:
    """
    创建应用

    参数：
    - app_settings: 配置（默认读取环境变量 / .env）
    - clock: 时钟函数（测试中可注入模拟时间）
    """
    app_settings = app_settings or settings
    engine = create_db_engine(app_settings.DATABASE_URL)
    services = build_services(app_settings, engine, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        应用生命周期管理
        - 启动时：创建数据库表（如果不存在）和上传目录，启动定时清理任务
        - 关闭时：停止定时清理任务，释放数据库连接
        """
        try:
            logger.info("正在检查并创建数据库表（如果不存在）...")
            Base.metadata.create_all(bind=engine)
            services.content.ensure_root()
            logger.info(f"数据库表检查完成，上传目录: {services.content.root}")
        except Exception as e:
            logger.error(f"初始化失败: {e}")
            raise RuntimeError(
                f"数据库或上传目录初始化失败: {e}\n"
                "请检查 DATABASE_URL 和 UPLOAD_DIR 配置，然后重新启动应用。"
            ) from e

        scheduler = None
        if app_settings.REAPER_ENABLED:
            scheduler = ReaperScheduler(services.reaper, app_settings.REAPER_INTERVAL_SECONDS)
            scheduler.start()

        yield

        if scheduler is not None:
            await scheduler.stop()
        engine.dispose()

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.services = services

    register_error_handlers(app)

    # 挂载静态文件目录
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    else:
        logger.warning(f"静态文件目录不存在: {static_dir}")

    # 注册路由
    app.include_router(health_router.router)
    app.include_router(api_router.router)
    app.include_router(web_router.router)

    return app


app = create_app()
