from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable
import logging

from splatbin.errors import UploadExpiredError, UploadNotFoundError
from splatbin.schemas.upload import UploadRecord
from splatbin.services.content_store import ContentStore
from splatbin.services.metadata_store import MetadataStore
from splatbin.utils.timeutil import is_expired, utcnow
from splatbin.utils.validation import validate_upload_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveUpload:
    """未过期且磁盘文件存在的上传记录"""
    record: UploadRecord
    path: Path


class RetrievalService:
    """
    查询与读取服务

    过期判定在读取时进行，与清理任务是否已经执行无关
    """

    def __init__(self, metadata: MetadataStore, content: ContentStore, clock: Callable[[], datetime] = utcnow):
        self.metadata = metadata
        self.content = content
        self.clock = clock

    def resolve(self, upload_id: str) -> LiveUpload:
        """
        解析文件ID

        异常：
        - UploadNotFoundError: ID 不存在、格式非法，或记录存在但磁盘文件缺失
        - UploadExpiredError: 记录已过期（无论是否已被清理）
        """
        if not validate_upload_id(upload_id):
            raise UploadNotFoundError(upload_id)

        record = self.metadata.get(upload_id)

        if is_expired(record.expires_at, self.clock()):
            logger.debug(f"文件已过期: id={upload_id}, expires_at={record.expires_at}")
            raise UploadExpiredError(upload_id)

        if not self.content.exists(record.stored_name):
            logger.warning(f"元数据存在但磁盘文件缺失: id={upload_id}, stored_name={record.stored_name}")
            raise UploadNotFoundError(upload_id, detail="文件不存在（磁盘文件缺失）")

        return LiveUpload(record=record, path=self.content.path(record.stored_name))

    def open(self, live: LiveUpload) -> BinaryIO:
        return self.content.open(live.record.stored_name)

    def read_text(self, live: LiveUpload) -> str:
        return self.content.read_text(live.record.stored_name)
