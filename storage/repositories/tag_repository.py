"""
TagRepository - 标签Repository
"""
# 标准库导包
from typing import Optional, List

# 第三方库导包
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.diary_tag import DiaryTagCrossRef
from storage.models.tag import Tag
from storage.repositories.base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """标签Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Tag)

    async def get_all_ordered(self) -> List[Tag]:
        """获取所有标签，按名称排序"""
        return await self.query_by_filters(filters={}, order_by="name", order_desc=False)

    async def get_by_name(self, name: str) -> Optional[Tag]:
        """
        根据名称获取标签（精确匹配）

        Args:
            name: 标签名称

        Returns:
            标签实例或None
        """
        results = await self.query_by_filters(filters={"name": name}, limit=1)
        return results[0] if results else None

    async def insert_if_absent(self, name: str, color: int) -> bool:
        """
        插入标签，同名标签已存在时忽略

        Args:
            name: 标签名称
            color: ARGB颜色

        Returns:
            是否新增了标签
        """
        result = await self.session.execute(
            sqlite_insert(Tag.__table__)
            .values(name=name, color=color)
            .on_conflict_do_nothing(index_elements=["name"])
        )
        return result.rowcount > 0

    async def get_tags_for_diary(self, diary_id: int) -> List[Tag]:
        """
        获取日记关联的所有标签

        Args:
            diary_id: 日记ID

        Returns:
            标签列表（按名称排序）
        """
        result = await self.session.execute(
            select(Tag)
            .join(DiaryTagCrossRef, DiaryTagCrossRef.tag_id == Tag.id)
            .where(DiaryTagCrossRef.diary_id == diary_id)
            .order_by(Tag.name.asc())
        )
        return list(result.scalars().all())
