"""
DiaryTagRepository - 日记标签关联Repository
"""
# 标准库导包
from typing import List, Sequence

# 第三方库导包
from sqlalchemy import select, delete, and_, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.diary_tag import DiaryTagCrossRef
from storage.repositories.base import BaseRepository


class DiaryTagRepository(BaseRepository[DiaryTagCrossRef]):
    """日记标签关联Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DiaryTagCrossRef)

    async def get_tag_ids_by_diary_id(self, diary_id: int) -> List[int]:
        """
        根据日记ID获取所有标签ID

        Args:
            diary_id: 日记ID

        Returns:
            标签ID列表
        """
        result = await self.session.execute(
            select(DiaryTagCrossRef.tag_id)
            .where(DiaryTagCrossRef.diary_id == diary_id)
            .order_by(DiaryTagCrossRef.tag_id)
        )
        return [row[0] for row in result.all()]

    async def add_tag_to_diary(self, diary_id: int, tag_id: int) -> bool:
        """
        为日记添加标签（已存在时忽略）

        Args:
            diary_id: 日记ID
            tag_id: 标签ID

        Returns:
            是否新增了关联
        """
        result = await self.session.execute(
            sqlite_insert(DiaryTagCrossRef.__table__)
            .values(diary_id=diary_id, tag_id=tag_id)
            .on_conflict_do_nothing()
        )
        return result.rowcount > 0

    async def remove_tag_from_diary(self, diary_id: int, tag_id: int) -> bool:
        """
        从日记移除标签

        Args:
            diary_id: 日记ID
            tag_id: 标签ID

        Returns:
            是否删除成功
        """
        result = await self.session.execute(
            delete(DiaryTagCrossRef).where(
                and_(
                    DiaryTagCrossRef.diary_id == diary_id,
                    DiaryTagCrossRef.tag_id == tag_id
                )
            )
        )
        return result.rowcount > 0

    async def replace_diary_tags(self, diary_id: int, tag_ids: Sequence[int]) -> List[int]:
        """
        替换日记的全部标签（先全部删除再逐个插入）

        Args:
            diary_id: 日记ID
            tag_ids: 新的标签ID列表，重复ID会被忽略

        Returns:
            替换后的标签ID列表
        """
        await self.delete_by_diary_id(diary_id)

        for tag_id in tag_ids:
            await self.add_tag_to_diary(diary_id, tag_id)

        return await self.get_tag_ids_by_diary_id(diary_id)

    async def delete_by_diary_id(self, diary_id: int) -> int:
        """
        删除指定日记的所有标签关联

        Args:
            diary_id: 日记ID

        Returns:
            删除的关联数量
        """
        result = await self.session.execute(
            delete(DiaryTagCrossRef).where(DiaryTagCrossRef.diary_id == diary_id)
        )
        return result.rowcount

    async def count_by_tag_id(self, tag_id: int) -> int:
        """统计使用某个标签的日记数量"""
        result = await self.session.execute(
            select(func.count()).select_from(DiaryTagCrossRef).where(DiaryTagCrossRef.tag_id == tag_id)
        )
        return result.scalar_one()
