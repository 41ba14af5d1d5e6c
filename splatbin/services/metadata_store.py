from datetime import datetime
from typing import List
import threading
import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from splatbin.errors import DuplicateKeyError, StorageFailureError, UploadNotFoundError
from splatbin.models.upload import Upload
from splatbin.schemas.upload import UploadRecord
from splatbin.utils.timeutil import ensure_aware_datetime

logger = logging.getLogger(__name__)

# 写操作（插入/删除）在进程内串行执行，读操作不加锁
_write_lock = threading.Lock()


class MetadataStore:
    """
    上传记录元数据存储

    每次调用使用独立的会话和事务，对外只返回不可变的 UploadRecord，
    读取方不会看到写了一半的记录
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def insert(self, record: UploadRecord) -> UploadRecord:
        """
        插入上传记录

        异常：
        - DuplicateKeyError: ID 已存在
        - StorageFailureError: 数据库错误
        """
        row = Upload(**record.model_dump())
        with _write_lock:
            with self._session() as db:
                try:
                    if db.get(Upload, record.id) is not None:
                        raise DuplicateKeyError(record.id)
                    db.add(row)
                    db.commit()
                except IntegrityError as e:
                    db.rollback()
                    logger.warning(f"插入上传记录冲突: id={record.id}, error={e}")
                    raise DuplicateKeyError(record.id) from e
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(f"插入上传记录失败: id={record.id}, error={e}")
                    raise StorageFailureError("元数据写入失败") from e
        return record

    def get(self, upload_id: str) -> UploadRecord:
        """查询上传记录，不存在时抛出 UploadNotFoundError"""
        try:
            with self._session() as db:
                row = db.get(Upload, upload_id)
                if row is None:
                    raise UploadNotFoundError(upload_id)
                return UploadRecord.model_validate(row)
        except SQLAlchemyError as e:
            logger.error(f"查询上传记录失败: id={upload_id}, error={e}")
            raise StorageFailureError("元数据读取失败") from e

    def exists(self, upload_id: str) -> bool:
        try:
            with self._session() as db:
                return db.get(Upload, upload_id) is not None
        except SQLAlchemyError as e:
            raise StorageFailureError("元数据读取失败") from e

    def list_expired(self, now: datetime) -> List[UploadRecord]:
        """返回所有 expires_at 不为空且不晚于 now 的记录（仅供清理任务使用）"""
        now = ensure_aware_datetime(now)
        stmt = (
            select(Upload)
            .where(Upload.expires_at.is_not(None))
            .where(Upload.expires_at <= now)
            .order_by(Upload.expires_at.asc())
        )
        try:
            with self._session() as db:
                return [UploadRecord.model_validate(row) for row in db.scalars(stmt)]
        except SQLAlchemyError as e:
            logger.error(f"查询过期记录失败: {e}")
            raise StorageFailureError("元数据读取失败") from e

    def delete(self, upload_id: str) -> bool:
        """
        删除上传记录（幂等，记录不存在不视为错误）

        返回：是否实际删除了记录
        """
        with _write_lock:
            with self._session() as db:
                try:
                    result = db.execute(delete(Upload).where(Upload.id == upload_id))
                    db.commit()
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(f"删除上传记录失败: id={upload_id}, error={e}")
                    raise StorageFailureError("元数据删除失败") from e
        return result.rowcount > 0
