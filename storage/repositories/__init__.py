"""
Storage repositories package.
"""
# 项目内部导包
from .base import BaseRepository
from .diary_repository import DiaryRepository, build_match_query
from .diary_image_repository import DiaryImageRepository
from .tag_repository import TagRepository
from .diary_tag_repository import DiaryTagRepository

__all__ = [
    "BaseRepository",
    "DiaryRepository",
    "DiaryImageRepository",
    "TagRepository",
    "DiaryTagRepository",
    "build_match_query",
]
