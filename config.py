"""
应用程序配置
"""
# 标准库导包
from pathlib import Path

# 第三方库导包
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用程序设置类"""

    model_config = SettingsConfigDict(
        env_file=".env",  # 支持从.env文件读取配置
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # 应用基本信息
    APP_NAME: str = "Diary"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # 日志配置
    LOG_LEVEL: str = "info"

    # 本地存储根目录（数据库、图片、偏好设置文件都放在这里）
    DATA_DIR: Path = Field(default=Path("data"), description="应用私有数据目录")

    # 数据库配置
    DB_NAME: str = "diary_database"
    DB_TIMEOUT: int = 30

    # 图片存储配置
    IMAGES_DIR_NAME: str = "diary_images"
    THUMBNAILS_DIR_NAME: str = "diary_thumbnails"
    IMAGE_JPEG_QUALITY: int = Field(default=85, ge=1, le=95)
    THUMBNAIL_JPEG_QUALITY: int = Field(default=70, ge=1, le=95)
    THUMBNAIL_TARGET_WIDTH: int = Field(default=300, gt=0)

    # 偏好设置文件名
    PREFERENCES_NAME: str = "diary_settings"

    # 搜索防抖时间（秒）
    SEARCH_DEBOUNCE_SECONDS: float = 0.3

    # 标签默认颜色（ARGB）
    DEFAULT_TAG_COLOR: int = 0xFF6200EE

    # 分页默认大小
    DEFAULT_PAGE_SIZE: int = 20

    @property
    def DATABASE_URL(self) -> str:
        """构建SQLite数据库URL"""
        return f"sqlite+aiosqlite:///{self.DATA_DIR / (self.DB_NAME + '.db')}"

    @property
    def IMAGES_DIR(self) -> Path:
        return self.DATA_DIR / self.IMAGES_DIR_NAME

    @property
    def THUMBNAILS_DIR(self) -> Path:
        return self.DATA_DIR / self.THUMBNAILS_DIR_NAME

    @property
    def PREFERENCES_PATH(self) -> Path:
        return self.DATA_DIR / f"{self.PREFERENCES_NAME}.json"


# 创建设置实例
settings = Settings()
