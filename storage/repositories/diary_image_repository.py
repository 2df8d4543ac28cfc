"""
DiaryImageRepository - 日记图片Repository
"""
# 标准库导包
from typing import List, Sequence

# 第三方库导包
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.diary_image import DiaryImage
from storage.repositories.base import BaseRepository


class DiaryImageRepository(BaseRepository[DiaryImage]):
    """日记图片Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DiaryImage)

    async def get_by_diary_id(self, diary_id: int) -> List[DiaryImage]:
        """
        根据日记ID获取所有图片

        Args:
            diary_id: 日记ID

        Returns:
            图片列表（按sort_order升序）
        """
        result = await self.session.execute(
            select(DiaryImage)
            .where(DiaryImage.diary_id == diary_id)
            .order_by(DiaryImage.sort_order.asc(), DiaryImage.id.asc())
        )
        return list(result.scalars().all())

    async def count_by_diary_id(self, diary_id: int) -> int:
        """统计日记的图片数量"""
        return await self.count(diary_id=diary_id)

    async def update_sort_order(self, image_id: int, sort_order: int) -> bool:
        """
        更新单张图片的排序

        Args:
            image_id: 图片ID
            sort_order: 新的排序值

        Returns:
            是否更新成功
        """
        result = await self.session.execute(
            update(DiaryImage)
            .where(DiaryImage.id == image_id)
            .values(sort_order=sort_order)
        )
        return result.rowcount > 0

    async def renumber(self, diary_id: int, ordered_ids: Sequence[int] = ()) -> List[DiaryImage]:
        """
        重新编排日记图片的sort_order，保证从0开始连续

        ordered_ids中的图片排在前面；未列出的图片保持原有相对顺序排在后面，
        不属于该日记的ID会被忽略。

        Args:
            diary_id: 日记ID
            ordered_ids: 期望的图片ID顺序

        Returns:
            重新编排后的图片列表
        """
        images = await self.get_by_diary_id(diary_id)
        by_id = {image.id: image for image in images}

        ordered: List[DiaryImage] = []
        for image_id in ordered_ids:
            image = by_id.pop(image_id, None)
            if image is not None:
                ordered.append(image)
        ordered.extend(image for image in images if image.id in by_id)

        for index, image in enumerate(ordered):
            if image.sort_order != index:
                await self.update_sort_order(image.id, index)
                image.sort_order = index

        return ordered

    async def delete_by_diary_id(self, diary_id: int) -> int:
        """
        删除指定日记的所有图片记录

        Args:
            diary_id: 日记ID

        Returns:
            删除的图片数量
        """
        result = await self.session.execute(
            delete(DiaryImage).where(DiaryImage.diary_id == diary_id)
        )
        return result.rowcount
