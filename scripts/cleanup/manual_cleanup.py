"""
手动清理过期文件脚本

功能：
- 显示当前已过期但尚未清理的文件
- 执行一次清理（删除磁盘文件和数据库记录）

使用方法：
    python scripts/cleanup/manual_cleanup.py            # 确认后清理
    python scripts/cleanup/manual_cleanup.py --dry-run  # 只显示，不删除
    python scripts/cleanup/manual_cleanup.py --yes      # 不询问直接清理
"""

import argparse
import logging
import os
import sys

# 添加项目根目录到 Python 路径
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from splatbin.config import settings
from splatbin.dependencies import build_services
from splatbin.extensions import create_db_engine
from splatbin.models import Base
from splatbin.utils.timeutil import utcnow

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def show_expired(services, now):
    """显示已过期的文件"""
    expired = services.metadata.list_expired(now)

    print("\n" + "=" * 60)
    print(f"已过期的文件: {len(expired)} 个")
    print("=" * 60)
    for record in expired[:20]:
        age = (now - record.expires_at).total_seconds() / 3600
        on_disk = "存在" if services.content.exists(record.stored_name) else "缺失"
        print(f"    - {record.id} {record.display_name} (过期于: {record.expires_at}, {age:.1f}小时前, 磁盘文件{on_disk})")
    if len(expired) > 20:
        print(f"    ... 还有 {len(expired) - 20} 个")
    return expired


def main(argv=None):
    parser = argparse.ArgumentParser(description="手动清理过期文件")
    parser.add_argument("--dry-run", action="store_true", help="只显示过期文件，不删除")
    parser.add_argument("--yes", "-y", action="store_true", help="不询问直接清理")
    args = parser.parse_args(argv)

    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    services = build_services(settings, engine)

    try:
        now = utcnow()
        expired = show_expired(services, now)
        if not expired or args.dry_run:
            return 0

        if not args.yes:
            try:
                confirm = input("\n是否继续清理？(y/n): ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                confirm = ""
            if confirm not in ['y', 'yes', '是']:
                print("已取消清理")
                return 0

        report = services.reaper.run_once(now)

        print("\n" + "=" * 60)
        print(f"清理完成！删除 {len(report.reaped)} 条, 文件已缺失 {len(report.missing_files)} 条, 失败 {len(report.failed)} 条")
        print("=" * 60)
        return 1 if report.failed else 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
