"""
浏览器页面与文件访问接口

- /f/{id}: 渲染页面（文本内联展示 / 二进制下载页）
- /raw/{id}: 原始内容（inline）
- /download/{id}: 强制下载（attachment）
"""
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool
from typing import BinaryIO, Optional
from urllib.parse import quote

from splatbin.dependencies import Services, get_services
from splatbin.services.content_store import CHUNK_SIZE
from splatbin.services.expiration_service import parse_expiration_hint
from splatbin.services.retrieval_service import LiveUpload
from splatbin.services.upload_service import FilePayload, select_payload
from splatbin.templating import templates

router = APIRouter(tags=["页面"])


def content_disposition(disposition: str, filename: str) -> str:
    """构造 Content-Disposition，非 ASCII 文件名使用 RFC 5987 编码"""
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


def _iter_file(stream: BinaryIO):
    try:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


async def _stream_upload(services: Services, upload_id: str, disposition: str) -> StreamingResponse:
    live: LiveUpload = await run_in_threadpool(services.retrieval.resolve, upload_id)
    # 先打开文件再返回响应，清理任务随后删除文件也不影响本次读取
    stream = await run_in_threadpool(services.retrieval.open, live)
    record = live.record

    if disposition == "inline" and record.is_text:
        media_type = "text/plain; charset=utf-8"
    else:
        media_type = record.content_type or "application/octet-stream"

    return StreamingResponse(
        _iter_file(stream),
        media_type=media_type,
        headers={
            "Content-Disposition": content_disposition(disposition, record.display_name),
            "Content-Length": str(record.size_bytes),
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.get("/")
async def index(request: Request, services: Services = Depends(get_services)):
    """上传首页"""
    policy = services.uploads.expiry_policy
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": services.settings.APP_NAME,
            "max_hours": policy.max_hours,
            "allow_everlasting": policy.allow_everlasting,
            "max_size_mb": services.settings.UPLOAD_MAX_SIZE_MB,
        },
    )


@router.post("/upload")
async def upload_form(
    text_content: Optional[str] = Form(None),
    custom_name: Optional[str] = Form(None),
    expires_hours: Optional[str] = Form(None),
    expires: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
):
    """
    网页表单上传（文本内容或文件）

    成功后重定向到查看页面
    """
    file_payload = None
    if file is not None:
        file_payload = FilePayload(
            stream=file.file,
            filename=file.filename,
            content_type=file.content_type,
            size=file.size,
        )

    payload = select_payload(text_content, file_payload)
    hint = parse_expiration_hint(expires_hours, expires)
    result = await run_in_threadpool(services.uploads.submit, payload, custom_name, hint)

    return RedirectResponse(url=f"/f/{result.id}", status_code=303)


@router.get("/f/{upload_id}")
async def view_upload(upload_id: str, request: Request, services: Services = Depends(get_services)):
    """查看页面：文本内联展示，二进制文件显示下载页"""
    live: LiveUpload = await run_in_threadpool(services.retrieval.resolve, upload_id)
    context = {
        "app_name": services.settings.APP_NAME,
        "file": live.record,
        "id": live.record.id,
    }

    if live.record.is_text:
        context["content"] = await run_in_threadpool(services.retrieval.read_text, live)
        return templates.TemplateResponse(request, "text.html", context)

    return templates.TemplateResponse(request, "file.html", context)


@router.get("/raw/{upload_id}")
async def raw_upload(upload_id: str, services: Services = Depends(get_services)):
    """原始内容（inline）"""
    return await _stream_upload(services, upload_id, "inline")


@router.get("/download/{upload_id}")
async def download_upload(upload_id: str, services: Services = Depends(get_services)):
    """强制下载（attachment）"""
    return await _stream_upload(services, upload_id, "attachment")
