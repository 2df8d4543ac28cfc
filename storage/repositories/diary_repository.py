"""
DiaryRepository - 日记Repository
"""
# 标准库导包
from datetime import date, datetime
from typing import Optional, List

# 第三方库导包
from sqlalchemy import select, update, func, and_, column, table, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

# 项目内部导包
from storage.database import utc_now
from storage.models.diary_entry import DiaryEntry
from storage.models.diary_with_details import DiaryWithDetails
from storage.repositories.base import BaseRepository

# 全文检索影子表（由 storage.database.SEARCH_INDEX_DDL 创建）
diary_entries_fts = table("diary_entries_fts", column("docid"))


def build_match_query(query: str) -> Optional[str]:
    """
    把用户输入转换为全文检索MATCH表达式

    按空白切分，每个词作为前缀匹配（"词*"），多个词之间为AND关系。

    Args:
        query: 用户输入

    Returns:
        MATCH表达式；输入为空白时返回None
    """
    tokens = [token.replace('"', "") for token in query.split()]
    terms = [f'"{token}*"' for token in tokens if token]
    if not terms:
        return None
    return " ".join(terms)


class DiaryRepository(BaseRepository[DiaryEntry]):
    """日记Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DiaryEntry)

    def _visible_query(self):
        """未软删除的日记查询，按创建时间倒序"""
        return (
            select(DiaryEntry)
            .where(DiaryEntry.is_deleted == False)
            .order_by(DiaryEntry.created_at.desc(), DiaryEntry.id.desc())
        )

    def _with_details(self, query):
        return query.options(
            selectinload(DiaryEntry.images),
            selectinload(DiaryEntry.tags)
        )

    async def _fetch_details(self, query) -> List[DiaryWithDetails]:
        result = await self.session.execute(self._with_details(query))
        return [DiaryWithDetails.from_entry(entry) for entry in result.scalars().all()]

    async def get_visible_by_id(self, diary_id: int) -> Optional[DiaryEntry]:
        """
        根据ID获取未删除的日记

        Args:
            diary_id: 日记ID

        Returns:
            日记实例或None（不存在或已软删除）
        """
        result = await self.session.execute(
            select(DiaryEntry).where(
                and_(DiaryEntry.id == diary_id, DiaryEntry.is_deleted == False)
            )
        )
        return result.scalar_one_or_none()

    async def get_with_details_by_id(self, diary_id: int) -> Optional[DiaryWithDetails]:
        """
        根据ID获取未删除日记的详情（图片、标签）

        Args:
            diary_id: 日记ID

        Returns:
            日记详情或None
        """
        query = select(DiaryEntry).where(
            and_(DiaryEntry.id == diary_id, DiaryEntry.is_deleted == False)
        )
        details = await self._fetch_details(query)
        return details[0] if details else None

    async def get_all_with_details(self) -> List[DiaryWithDetails]:
        """获取所有未删除日记的详情，按创建时间倒序"""
        return await self._fetch_details(self._visible_query())

    async def get_paged_with_details(self, limit: int, offset: int) -> List[DiaryWithDetails]:
        """
        分页获取日记详情

        Args:
            limit: 每页数量
            offset: 偏移量

        Returns:
            日记详情列表
        """
        return await self._fetch_details(self._visible_query().limit(limit).offset(offset))

    async def get_between_with_details(
        self,
        start_time: datetime,
        end_time: datetime
    ) -> List[DiaryWithDetails]:
        """
        获取时间范围内的日记详情（闭区间，UTC时间）

        Args:
            start_time: 开始时间
            end_time: 结束时间

        Returns:
            日记详情列表
        """
        query = self._visible_query().where(
            DiaryEntry.created_at.between(start_time, end_time)
        )
        return await self._fetch_details(query)

    async def get_by_local_date(self, day: date) -> List[DiaryWithDetails]:
        """
        获取本地时区某一天的日记详情

        Args:
            day: 本地日期

        Returns:
            日记详情列表
        """
        query = self._visible_query().where(
            func.date(DiaryEntry.created_at, "localtime") == day.isoformat()
        )
        return await self._fetch_details(query)

    async def get_favorites(self) -> List[DiaryEntry]:
        """获取收藏的日记，按创建时间倒序"""
        result = await self.session.execute(
            self._visible_query().where(DiaryEntry.is_favorite == True)
        )
        return list(result.scalars().all())

    async def search(self, query: str) -> List[DiaryEntry]:
        """
        全文检索日记标题和正文

        Args:
            query: 用户输入，按空白分词后做前缀匹配

        Returns:
            匹配的未删除日记（已加载标签），按创建时间倒序
        """
        match_query = build_match_query(query)
        if match_query is None:
            return []

        statement = (
            self._visible_query()
            .join(diary_entries_fts, diary_entries_fts.c.docid == DiaryEntry.id)
            .where(text("diary_entries_fts MATCH :match_query").bindparams(match_query=match_query))
            .options(selectinload(DiaryEntry.tags))
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_dates_with_entries(self) -> List[date]:
        """
        获取有日记的本地日期（日历标记用）

        Returns:
            去重后的日期列表，升序
        """
        local_day = func.date(DiaryEntry.created_at, "localtime")
        result = await self.session.execute(
            select(local_day)
            .where(DiaryEntry.is_deleted == False)
            .distinct()
            .order_by(local_day)
        )
        return [date.fromisoformat(row[0]) for row in result.all() if row[0]]

    async def count_visible(self) -> int:
        """统计未删除的日记数量"""
        return await self.count(is_deleted=False)

    async def soft_delete(self, diary_id: int) -> bool:
        """
        软删除日记（设置删除标记并刷新更新时间）

        Args:
            diary_id: 日记ID

        Returns:
            是否有记录被更新
        """
        result = await self.session.execute(
            update(DiaryEntry)
            .where(DiaryEntry.id == diary_id)
            .values(is_deleted=True, updated_at=utc_now())
        )
        return result.rowcount > 0

    async def update_favorite_status(self, diary_id: int, is_favorite: bool) -> bool:
        """
        更新收藏状态

        Args:
            diary_id: 日记ID
            is_favorite: 是否收藏

        Returns:
            是否有记录被更新
        """
        result = await self.session.execute(
            update(DiaryEntry)
            .where(DiaryEntry.id == diary_id)
            .values(is_favorite=is_favorite, updated_at=utc_now())
        )
        return result.rowcount > 0
