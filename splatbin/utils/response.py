from typing import Any, Optional
from pydantic import BaseModel


class Envelope(BaseModel):
    """/api 错误与 /health 使用的统一响应外壳"""
    code: int
    msg: str
    data: Optional[Any] = None


# 上传接口可能返回的错误，用于 OpenAPI 文档
API_ERROR_RESPONSES = {
    400: {"model": Envelope, "description": "未上传文件或参数不合法"},
    413: {"model": Envelope, "description": "文件超过大小限制"},
    500: {"model": Envelope, "description": "存储失败"},
}


def success_response(data: Any = None, msg: str = "success") -> dict:
    return Envelope(code=200, msg=msg, data=data).model_dump()


def error_response(status_code: int, msg: str, data: Any = None) -> dict:
    """错误响应，code 与 HTTP 状态码一致"""
    return Envelope(code=status_code, msg=msg, data=data).model_dump()
