from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker
from datetime import datetime, timezone
from pathlib import Path
import os

from splatbin.dependencies import Services, get_services
from splatbin.utils.response import success_response

router = APIRouter(tags=["系统状态"])


def _database_status(session_factory: sessionmaker) -> str:
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
        return "connected"
    except Exception as e:
        error_msg = str(e)
        # 截断错误信息，避免太长
        if len(error_msg) > 50:
            error_msg = error_msg[:50] + "..."
        return f"disconnected ({error_msg})"


def _storage_status(root: Path) -> str:
    return "writable" if root.is_dir() and os.access(root, os.W_OK) else "unavailable"


@router.get("/health")
async def check_health(services: Services = Depends(get_services)):
    """
    服务健康检查：元数据库连接与上传目录是否可写
    """
    db_status = await run_in_threadpool(_database_status, services.session_factory)
    storage_status = _storage_status(services.content.root)
    healthy = db_status == "connected" and storage_status == "writable"

    return success_response(data={
        "status": "healthy" if healthy else "degraded",
        "database": db_status,
        "storage": storage_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": services.settings.APP_NAME,
        "version": services.settings.APP_VERSION,
    })
