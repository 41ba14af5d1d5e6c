from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from splatbin.templating import templates
from splatbin.utils.response import error_response

logger = logging.getLogger(__name__)


class SplatbinError(HTTPException):
    """业务异常基类，携带 HTTP 状态码和面向用户的提示信息"""

    def __init__(self, status_code=400, detail="请求错误", code=None, msg=None):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code if code is not None else status_code
        self.msg = msg if msg is not None else detail


class InvalidRequestError(SplatbinError):
    def __init__(self, detail: str = "请提供文本内容或上传文件"):
        super().__init__(status_code=400, detail=detail)


class UploadNotFoundError(SplatbinError):
    def __init__(self, upload_id: str = None, detail: str = None):
        super().__init__(
            status_code=404,
            detail=detail or (f"文件 {upload_id} 不存在" if upload_id else "文件不存在"),
            msg="文件不存在"
        )
        self.upload_id = upload_id


class UploadExpiredError(SplatbinError):
    def __init__(self, upload_id: str = None):
        super().__init__(status_code=410, detail="文件已过期", msg="文件已过期")
        self.upload_id = upload_id


class PayloadTooLargeError(SplatbinError):
    def __init__(self, limit_bytes: int):
        limit_mb = limit_bytes / (1024 * 1024)
        super().__init__(status_code=413, detail=f"文件过大（最大 {limit_mb:g}MB）")
        self.limit_bytes = limit_bytes


class DuplicateKeyError(SplatbinError):
    """文件ID冲突（极少发生，按内部错误处理）"""

    def __init__(self, upload_id: str = None):
        super().__init__(status_code=500, detail="文件ID冲突，请重试", msg="内部错误")
        self.upload_id = upload_id


class StorageFailureError(SplatbinError):
    def __init__(self, detail: str = "存储失败"):
        super().__init__(status_code=500, detail=detail, msg="存储失败")


def _surface(request: Request) -> str:
    """根据请求路径判断错误的呈现方式：json / text / html"""
    path = request.url.path
    if path.startswith("/api/"):
        return "json"
    if path.startswith("/raw/") or path.startswith("/download/"):
        return "text"
    return "html"


def _render_error(request: Request, status_code: int, message: str):
    surface = _surface(request)
    if surface == "json":
        return JSONResponse(status_code=status_code, content=error_response(status_code, message))
    if surface == "text":
        return PlainTextResponse(message, status_code=status_code)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message, "status_code": status_code},
        status_code=status_code,
    )


def register_error_handlers(app) -> None:
    @app.exception_handler(SplatbinError)
    async def splatbin_error_handler(request: Request, exc: SplatbinError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} 失败: {exc.detail}")
        return _render_error(request, exc.status_code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "请求错误"
        return _render_error(request, exc.status_code, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {request.method} {request.url.path}")
        return _render_error(request, 500, "服务器内部错误")
