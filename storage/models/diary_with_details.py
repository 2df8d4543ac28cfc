"""
DiaryWithDetails - 日记及其图片、标签的联合视图
"""
# 标准库导包
from dataclasses import dataclass, field
from typing import List

# 项目内部导包
from storage.models.diary_entry import DiaryEntry
from storage.models.diary_image import DiaryImage
from storage.models.tag import Tag


@dataclass
class DiaryWithDetails:
    """日记详情：图片按sort_order排列，标签按名称排列"""
    diary: DiaryEntry
    images: List[DiaryImage] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: DiaryEntry) -> "DiaryWithDetails":
        """从已预加载关系的DiaryEntry构建"""
        return cls(diary=entry, images=list(entry.images), tags=list(entry.tags))
