from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Optional, Union
import mimetypes
import logging

from splatbin.config import ExpiryPolicy
from splatbin.errors import InvalidRequestError, PayloadTooLargeError, SplatbinError, StorageFailureError
from splatbin.schemas.upload import UploadRecord
from splatbin.services.content_store import ContentStore
from splatbin.services.expiration_service import ExpirationHint, decide_expiration
from splatbin.services.metadata_store import MetadataStore
from splatbin.utils.identifier import generate_unique_upload_id
from splatbin.utils.timeutil import utcnow
from splatbin.utils.validation import clean_display_name, extract_extension, is_text_file

logger = logging.getLogger(__name__)

DEFAULT_PASTE_NAME = "paste.txt"


@dataclass
class TextPayload:
    """粘贴的文本内容"""
    content: str


@dataclass
class FilePayload:
    """上传的文件（stream 为可读的二进制文件对象）"""
    stream: BinaryIO
    filename: Optional[str]
    content_type: Optional[str] = None
    size: Optional[int] = None


Payload = Union[TextPayload, FilePayload]


@dataclass(frozen=True)
class UploadResult:
    record: UploadRecord
    expiry_reason: str

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def expires_at(self) -> Optional[datetime]:
        return self.record.expires_at

    def urls(self, base_url: str) -> dict:
        base = base_url.rstrip("/")
        return {
            "url": f"{base}/f/{self.id}",
            "raw_url": f"{base}/raw/{self.id}",
        }


def select_payload(text_content: Optional[str], file: Optional[FilePayload]) -> Payload:
    """
    从请求中选择上传内容

    - 空白文本、没有文件名的文件视为未提供
    - 同时提供文本和文件时拒绝请求，避免隐式优先级
    """
    has_text = bool(text_content and text_content.strip())
    has_file = file is not None and bool(file.filename)
    if has_text and has_file:
        raise InvalidRequestError("请只提供文本内容或文件中的一种")
    if has_text:
        return TextPayload(content=text_content)
    if has_file:
        return file
    raise InvalidRequestError()


class UploadService:
    """
    上传编排服务

    校验 → 计算过期时间 → 生成ID → 写入文件 → 写入元数据，
    元数据写入失败时删除已写入的文件，不留下孤立文件
    """

    def __init__(
        self,
        metadata: MetadataStore,
        content: ContentStore,
        expiry_policy: ExpiryPolicy,
        max_upload_size_bytes: int,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.metadata = metadata
        self.content = content
        self.expiry_policy = expiry_policy
        self.max_upload_size_bytes = max_upload_size_bytes
        self.clock = clock

    def _is_taken(self, upload_id: str) -> bool:
        # 数据库中没有记录，但磁盘上残留同名文件的ID也不能使用
        if self.metadata.exists(upload_id):
            return True
        return self.content.exists(upload_id) or any(self.content.root.glob(f"{upload_id}.*"))

    def submit(
        self,
        payload: Optional[Payload],
        display_name_hint: Optional[str] = None,
        expiration_hint: ExpirationHint = None,
    ) -> UploadResult:
        if payload is None:
            raise InvalidRequestError()

        custom_name = clean_display_name(display_name_hint)

        if isinstance(payload, TextPayload):
            if not payload.content or not payload.content.strip():
                raise InvalidRequestError()
            data = payload.content.encode("utf-8")
            if len(data) > self.max_upload_size_bytes:
                raise PayloadTooLargeError(self.max_upload_size_bytes)
            display_name = custom_name or DEFAULT_PASTE_NAME
            extension = extract_extension(display_name) or ".txt"
            content_type = "text/plain"
            is_text = True
            source = data
        else:
            if not payload.filename:
                raise InvalidRequestError()
            if payload.size is not None and payload.size > self.max_upload_size_bytes:
                raise PayloadTooLargeError(self.max_upload_size_bytes)
            display_name = custom_name or clean_display_name(payload.filename) or "file"
            extension = extract_extension(display_name)
            content_type = payload.content_type or mimetypes.guess_type(display_name)[0]
            is_text = is_text_file(content_type, display_name)
            source = payload.stream

        now = self.clock()
        expires_at, expiry_reason = decide_expiration(expiration_hint, now, self.expiry_policy)

        upload_id = generate_unique_upload_id(self._is_taken)
        stored_name = upload_id + extension

        size = self.content.write(stored_name, source, size_limit=self.max_upload_size_bytes)

        record = UploadRecord(
            id=upload_id,
            stored_name=stored_name,
            display_name=display_name,
            extension=extension,
            size_bytes=size,
            content_type=content_type,
            is_text=is_text,
            expires_at=expires_at,
        )

        try:
            self.metadata.insert(record)
        except Exception as e:
            # 补偿：元数据写入失败，删除刚写入的文件
            self.content.delete(stored_name)
            logger.error(f"元数据写入失败，已删除文件: id={upload_id}, stored_name={stored_name}, error={e}")
            if isinstance(e, SplatbinError):
                raise
            raise StorageFailureError("元数据写入失败") from e

        logger.info(
            f"上传成功: id={upload_id}, name={display_name}, size={size}, "
            f"is_text={is_text}, expires_at={expires_at}, expiry_rule={expiry_reason}"
        )
        return UploadResult(record=record, expiry_reason=expiry_reason)
