from sqlalchemy import Column, String, BigInteger, Boolean, Index
from .base import BaseModel, UTCDateTime


class Upload(BaseModel):
    """上传记录表（创建后只读，过期后由清理任务删除）"""
    __tablename__ = "uploads"

    id = Column(String(16), primary_key=True, comment="文件ID（对外公开的短ID）")
    stored_name = Column(String(64), nullable=False, comment="磁盘文件名（ID+扩展名）")
    display_name = Column(String(255), nullable=False, comment="展示名称（自定义名称或原始文件名）")
    extension = Column(String(32), nullable=False, default="", comment="扩展名")
    size_bytes = Column(BigInteger, nullable=False, comment="文件大小（字节）")
    content_type = Column(String(255), comment="文件MIME类型")
    is_text = Column(Boolean, nullable=False, default=False, comment="是否按文本内联展示")
    expires_at = Column(UTCDateTime, nullable=True, comment="过期时间（空表示永不过期）")

    __table_args__ = (
        Index("ix_uploads_expires_at", "expires_at"),
    )

    def __repr__(self):
        return f"<Upload(id={self.id}, display_name={self.display_name}, expires_at={self.expires_at})>"
