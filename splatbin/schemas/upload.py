from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadRecord(BaseModel):
    """上传记录（不可变，与数据库会话无关）"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    stored_name: str
    display_name: str
    extension: str = ""
    size_bytes: int = Field(..., ge=0)
    content_type: Optional[str] = None
    is_text: bool = False
    expires_at: Optional[datetime] = None


class UploadResponse(BaseModel):
    """上传成功响应模型（/api/upload）"""
    id: str
    url: str
    raw_url: str
    expires_at: Optional[datetime] = None
