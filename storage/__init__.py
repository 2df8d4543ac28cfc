"""
Storage层包
提供数据库句柄、变更通知、模型、Repository和偏好设置存储的统一访问接口
"""
# 项目内部导包
from .database import (
    Base,
    Database,
    utc_now,
)
from .observer import (
    ChangeBus,
    LiveQuery,
)
from .models import (
    Mood,
    Weather,
    DiaryEntry,
    DiaryImage,
    Tag,
    DiaryTagCrossRef,
    DiaryWithDetails,
)
from .repositories import (
    BaseRepository,
    DiaryRepository,
    DiaryImageRepository,
    TagRepository,
    DiaryTagRepository,
    build_match_query,
)
from .settings_store import (
    DarkMode,
    FontSize,
    Preferences,
    SettingsStore,
)

__all__ = [
    # 数据库连接相关
    "Base",
    "Database",
    "utc_now",

    # 变更通知
    "ChangeBus",
    "LiveQuery",

    # 模型相关
    "Mood",
    "Weather",
    "DiaryEntry",
    "DiaryImage",
    "Tag",
    "DiaryTagCrossRef",
    "DiaryWithDetails",

    # Repository相关
    "BaseRepository",
    "DiaryRepository",
    "DiaryImageRepository",
    "TagRepository",
    "DiaryTagRepository",
    "build_match_query",

    # 偏好设置
    "DarkMode",
    "FontSize",
    "Preferences",
    "SettingsStore",
]
