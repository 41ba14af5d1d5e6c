import logging
import uvicorn

from splatbin.config import settings


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


if __name__ == "__main__":
    configure_logging()

    print("=" * 50)
    print(f"🚀 {settings.APP_NAME} 文件分享服务")
    print("=" * 50)
    print(f"   • 上传目录: {settings.UPLOAD_DIR}")
    print(f"   • 数据库: {settings.DATABASE_URL}")
    max_hours = "不限制" if settings.EXPIRY_MAX_HOURS <= 0 else f"{settings.EXPIRY_MAX_HOURS} 小时"
    print(f"   • 最大保留时长: {max_hours}")
    print(f"   • 最大上传大小: {settings.UPLOAD_MAX_SIZE_MB}MB")
    print("   • 按 Ctrl+C 停止服务器")
    print("=" * 50)

    uvicorn.run(
        "splatbin.main:app",
        host="0.0.0.0",
        port=3000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
