"""
Storage models package.
"""
# 项目内部导包
from .enums import Mood, Weather
from .diary_entry import DiaryEntry
from .diary_image import DiaryImage
from .tag import Tag
from .diary_tag import DiaryTagCrossRef
from .diary_with_details import DiaryWithDetails

__all__ = [
    "Mood",
    "Weather",
    "DiaryEntry",
    "DiaryImage",
    "Tag",
    "DiaryTagCrossRef",
    "DiaryWithDetails",
]
