"""
文件ID生成工具
"""
import secrets
import string
from typing import Callable

from splatbin.errors import DuplicateKeyError

# 小写字母+数字，避免大小写混淆
ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8


def generate_upload_id(length: int = ID_LENGTH) -> str:
    """
    生成文件ID（小写字母+数字）

    使用 secrets 模块（密码学安全随机源），ID 不可预测，
    防止通过枚举访问未公开的分享
    """
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(length))


def generate_unique_upload_id(is_taken: Callable[[str], bool], max_attempts: int = 10) -> str:
    """
    生成唯一的文件ID

    参数：
    - is_taken: 检查ID是否已被占用（数据库记录或磁盘文件）
    - max_attempts: 最大尝试次数（防止无限循环）

    异常：
    - DuplicateKeyError: 如果尝试多次后仍无法生成唯一ID
    """
    for _ in range(max_attempts):
        upload_id = generate_upload_id()
        if not is_taken(upload_id):
            return upload_id

    raise DuplicateKeyError()
