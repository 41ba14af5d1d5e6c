from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from splatbin.config import Settings
from splatbin.extensions import create_session_factory
from splatbin.services.content_store import ContentStore
from splatbin.services.metadata_store import MetadataStore
from splatbin.services.reaper_service import Reaper
from splatbin.services.retrieval_service import RetrievalService
from splatbin.services.upload_service import UploadService
from splatbin.utils.timeutil import utcnow


@dataclass
class Services:
    """应用内各服务实例，启动时按配置组装一次"""
    settings: Settings
    session_factory: sessionmaker
    metadata: MetadataStore
    content: ContentStore
    uploads: UploadService
    retrieval: RetrievalService
    reaper: Reaper


def build_services(settings: Settings, engine: Engine, clock: Callable[[], datetime] = utcnow) -> Services:
    session_factory = create_session_factory(engine)
    metadata = MetadataStore(session_factory)
    content = ContentStore(settings.UPLOAD_DIR)
    return Services(
        settings=settings,
        session_factory=session_factory,
        metadata=metadata,
        content=content,
        uploads=UploadService(
            metadata,
            content,
            expiry_policy=settings.expiry_policy(),
            max_upload_size_bytes=settings.max_upload_size_bytes,
            clock=clock,
        ),
        retrieval=RetrievalService(metadata, content, clock=clock),
        reaper=Reaper(metadata, content, clock=clock),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def public_base_url(request: Request) -> str:
    """对外访问地址：优先使用配置的 PUBLIC_URL"""
    configured = get_services(request).settings.PUBLIC_URL
    return (configured or str(request.base_url)).rstrip("/")
