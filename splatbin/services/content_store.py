from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging

from splatbin.errors import PayloadTooLargeError, StorageFailureError, UploadNotFoundError
from splatbin.utils.validation import validate_stored_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class ContentStore:
    """
    文件内容存储（本地磁盘，单层目录）

    每条上传记录对应一个以 stored_name 命名的文件
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, stored_name: str) -> Path:
        if not validate_stored_name(stored_name):
            raise UploadNotFoundError(detail="文件名不合法")
        return self.root / stored_name

    def exists(self, stored_name: str) -> bool:
        try:
            return self.path(stored_name).is_file()
        except UploadNotFoundError:
            return False

    def write(self, stored_name: str, source: Union[bytes, BinaryIO], size_limit: Optional[int] = None) -> int:
        """
        写入文件内容（流式写入）

        - 以独占方式创建文件，不会覆盖已有文件
        - 超过 size_limit 时立即中止，删除已写入的部分并抛出 PayloadTooLargeError

        返回：写入的字节数
        """
        target = self.path(stored_name)
        if isinstance(source, (bytes, bytearray)):
            if size_limit is not None and len(source) > size_limit:
                raise PayloadTooLargeError(size_limit)

        written = 0
        try:
            with open(target, "xb") as out:
                if isinstance(source, (bytes, bytearray)):
                    out.write(source)
                    written = len(source)
                else:
                    while True:
                        chunk = source.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        written += len(chunk)
                        if size_limit is not None and written > size_limit:
                            raise PayloadTooLargeError(size_limit)
                        out.write(chunk)
        except FileExistsError as e:
            # 不能删除已存在的文件，它属于另一条记录
            logger.error(f"文件已存在，拒绝覆盖: {stored_name}")
            raise StorageFailureError("文件已存在") from e
        except PayloadTooLargeError:
            target.unlink(missing_ok=True)
            logger.info(f"文件超过大小限制，已删除部分写入: {stored_name}, limit={size_limit}")
            raise
        except OSError as e:
            target.unlink(missing_ok=True)
            logger.error(f"写入文件失败: {stored_name}, error={e}")
            raise StorageFailureError("文件写入失败") from e

        return written

    def open(self, stored_name: str) -> BinaryIO:
        """打开文件用于读取，文件不存在时抛出 UploadNotFoundError"""
        try:
            return open(self.path(stored_name), "rb")
        except FileNotFoundError as e:
            raise UploadNotFoundError(detail="文件不存在") from e

    def read_text(self, stored_name: str) -> str:
        """按 UTF-8 读取文本内容（非法字节替换显示）"""
        with self.open(stored_name) as f:
            return f.read().decode("utf-8", errors="replace")

    def delete(self, stored_name: str) -> bool:
        """
        删除文件（幂等，文件不存在不视为错误）

        返回：是否实际删除了文件
        """
        target = self.path(stored_name)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True
