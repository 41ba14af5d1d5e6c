import os
import re
from typing import Optional

TEXT_MIME_PREFIXES = (
    "text/",
    "application/json",
    "application/xml",
    "application/javascript",
    "application/typescript",
)

TEXT_EXTENSIONS = {
    ".txt", ".md", ".js", ".ts", ".json", ".xml", ".html", ".css",
    ".py", ".java", ".c", ".cpp", ".h", ".hpp", ".rb", ".php", ".go",
    ".rs", ".sh", ".bat", ".yml", ".yaml", ".toml", ".ini", ".cfg",
    ".log", ".sql", ".r", ".m", ".swift", ".kt", ".scala", ".clj",
}

_EXTENSION_PATTERN = re.compile(r'^\.[A-Za-z0-9_-]{1,16}$')


def validate_upload_id(upload_id: str) -> bool:
    """
    验证文件ID格式

    规则：6-16位小写字母或数字（当前生成8位，兼容旧的6位ID）
    """
    return bool(upload_id and re.match(r'^[a-z0-9]{6,16}$', upload_id))


def validate_stored_name(stored_name: str) -> bool:
    """存储文件名只能是单层文件名，不能包含路径分隔符或以点开头"""
    if not stored_name or stored_name.startswith("."):
        return False
    return "/" not in stored_name and "\\" not in stored_name and "\x00" not in stored_name


def clean_display_name(name: Optional[str]) -> Optional[str]:
    """去掉首尾空白和路径部分，空字符串返回 None"""
    if not name:
        return None
    name = name.replace("\\", "/").split("/")[-1].strip()
    name = name.replace("\r", "").replace("\n", "")
    return name[:255] or None


def extract_extension(display_name: str) -> str:
    """从显示名称提取扩展名，不合法的扩展名返回空字符串"""
    ext = os.path.splitext(display_name)[1]
    if _EXTENSION_PATTERN.match(ext):
        return ext
    return ""


def is_text_file(mime_type: Optional[str], filename: str) -> bool:
    """
    判断文件是否按文本方式展示

    仅用于选择展示方式（内联文本 / 下载页），不作为安全边界
    """
    if mime_type and mime_type.lower().startswith(TEXT_MIME_PREFIXES):
        return True
    ext = os.path.splitext(filename)[1].lower()
    return ext in TEXT_EXTENSIONS
