from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from typing import Optional
import logging

from splatbin.dependencies import Services, get_services, public_base_url
from splatbin.errors import InvalidRequestError
from splatbin.schemas.upload import UploadResponse
from splatbin.services.expiration_service import parse_expiration_hint
from splatbin.services.upload_service import FilePayload
from splatbin.utils.response import API_ERROR_RESPONSES

logger = logging.getLogger(__name__)

router = APIRouter(tags=["上传接口"], prefix="/api")


@router.post("/upload", response_model=UploadResponse, responses=API_ERROR_RESPONSES)
async def api_upload(
    request: Request,
    file: Optional[UploadFile] = File(None),
    custom_name: Optional[str] = Form(None),
    expires: Optional[str] = Form(None),
    expires_hours: Optional[str] = Form(None),
    expires_query: Optional[str] = Query(None, alias="expires"),
    expires_hours_query: Optional[str] = Query(None, alias="expires_hours"),
    services: Services = Depends(get_services),
):
    """
    命令行上传接口（curl -F file=@example.txt）

    参数：
    - file: 上传的文件
    - custom_name: 自定义文件名（可选）
    - expires_hours / expires: 过期时间，可作为 Form 数据或查询参数传递
      expires_hours 无法解析为整数时忽略，改用 expires

    返回：
    - id, url, raw_url, expires_at
    """
    if file is None or not file.filename:
        logger.debug("API 上传请求缺少文件")
        raise InvalidRequestError("未上传文件")

    # 兼容处理：优先使用 Form 数据，如果没有则使用查询参数
    hint = parse_expiration_hint(
        expires_hours if expires_hours is not None else expires_hours_query,
        expires if expires is not None else expires_query,
    )

    payload = FilePayload(
        stream=file.file,
        filename=file.filename,
        content_type=file.content_type,
        size=file.size,
    )
    result = await run_in_threadpool(services.uploads.submit, payload, custom_name, hint)

    urls = result.urls(public_base_url(request))
    return UploadResponse(
        id=result.id,
        url=urls["url"],
        raw_url=urls["raw_url"],
        expires_at=result.expires_at,
    )
