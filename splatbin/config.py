from dataclasses import dataclass
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ExpiryPolicy:
    """
    过期策略（服务器端配置，进程生命周期内不可变）

    - max_hours: 最大保留时长（小时），None 表示不限制
    - allow_everlasting: 是否允许永不过期的上传
    """
    max_hours: Optional[int]
    allow_everlasting: bool = True

    @property
    def is_unlimited(self) -> bool:
        return self.max_hours is None


class Settings(BaseSettings):
    APP_NAME: str = "SplatBin"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite:///./splatbin.db"
    UPLOAD_DIR: str = "./uploads"
    # 对外访问地址，未配置时使用请求中的地址
    PUBLIC_URL: Optional[str] = None

    # -1（或 0）表示不限制最大保留时长
    EXPIRY_MAX_HOURS: int = 168
    EXPIRY_ALLOW_EVERLASTING: bool = True
    UPLOAD_MAX_SIZE_MB: int = 100

    REAPER_ENABLED: bool = True
    REAPER_INTERVAL_SECONDS: int = 300

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def expiry_policy(self) -> ExpiryPolicy:
        max_hours = None if self.EXPIRY_MAX_HOURS <= 0 else self.EXPIRY_MAX_HOURS
        return ExpiryPolicy(max_hours=max_hours, allow_everlasting=self.EXPIRY_ALLOW_EVERLASTING)

    @property
    def max_upload_size_bytes(self) -> int:
        return self.UPLOAD_MAX_SIZE_MB * 1024 * 1024


settings = Settings()
