from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
import asyncio
import logging

from starlette.concurrency import run_in_threadpool

from splatbin.services.content_store import ContentStore
from splatbin.services.metadata_store import MetadataStore
from splatbin.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ReapReport:
    """单次清理结果"""
    scanned: int = 0
    reaped: List[str] = field(default_factory=list)
    missing_files: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class Reaper:
    """
    过期文件清理

    每次执行：查询所有过期记录 → 逐条删除磁盘文件和元数据。
    单条记录失败只记录日志，不影响其他记录；未删除干净的记录
    元数据仍然满足过期条件，下次执行时会再次被处理
    """

    def __init__(self, metadata: MetadataStore, content: ContentStore, clock: Callable[[], datetime] = utcnow):
        self.metadata = metadata
        self.content = content
        self.clock = clock

    def run_once(self, now: Optional[datetime] = None) -> ReapReport:
        now = now or self.clock()
        report = ReapReport()

        expired = self.metadata.list_expired(now)
        report.scanned = len(expired)
        if not expired:
            logger.debug("没有发现过期的文件")
            return report

        logger.info(f"发现 {len(expired)} 个过期文件，开始清理...")

        for record in expired:
            try:
                if not self.content.delete(record.stored_name):
                    logger.warning(f"磁盘文件已不存在: id={record.id}, stored_name={record.stored_name}")
                    report.missing_files.append(record.id)
                self.metadata.delete(record.id)
                report.reaped.append(record.id)
                logger.debug(f"已清理过期文件: id={record.id}, expires_at={record.expires_at}")
            except Exception as e:
                report.failed.append(record.id)
                logger.error(f"清理过期文件失败: id={record.id}, error={e}", exc_info=True)

        logger.info(
            f"清理完成: 删除 {len(report.reaped)} 条记录, "
            f"{len(report.missing_files)} 个文件已提前缺失, "
            f"{len(report.failed)} 条失败"
        )
        return report


class ReaperScheduler:
    """
    定时清理任务

    在应用生命周期内运行，按固定间隔执行 Reaper.run_once；
    关闭时直接取消，执行中的清理可以安全中断（下次启动会重新扫描）
    """

    def __init__(self, reaper: Reaper, interval_seconds: float):
        self.reaper = reaper
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> Optional[ReapReport]:
        try:
            return await run_in_threadpool(self.reaper.run_once)
        except Exception as e:
            logger.error(f"定时清理任务失败: {e}", exc_info=True)
            return None

    async def _loop(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"定时清理任务已启动，间隔 {self.interval_seconds} 秒")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("定时清理任务已停止")
