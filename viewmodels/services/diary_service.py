"""
日记服务类
处理日记、图片、标签的保存、删除、查询等业务逻辑
"""
# 标准库导包
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import Settings, settings
from models import DiaryDraft, ExistingDiary, ImageSource
from storage.database import Database, utc_now
from storage.models import DiaryEntry, DiaryImage, DiaryWithDetails, Tag
from storage.observer import LiveQuery
from storage.repositories import (
    DiaryRepository,
    DiaryImageRepository,
    TagRepository,
    DiaryTagRepository,
)
from utils.errors import DiaryNotFoundError, TagNotFoundError
from viewmodels.services.image_storage import ImageStorage, StoredImage

# 配置日志
logger = logging.getLogger(__name__)

T = TypeVar("T")

# 日记详情依赖的表
DETAIL_TABLES = ("diary_entries", "diary_images", "tags", "diary_tag_cross_ref")


class DiaryService:
    """日记服务类"""

    def __init__(
        self,
        database: Database,
        image_storage: Optional[ImageStorage] = None,
        app_settings: Settings = settings
    ):
        """
        初始化日记服务

        Args:
            database: 数据库句柄
            image_storage: 图片文件存储，不传则按配置创建
            app_settings: 应用配置
        """
        self.database = database
        self.image_storage = image_storage or ImageStorage(app_settings)
        self.default_tag_color = app_settings.DEFAULT_TAG_COLOR
        self.default_page_size = app_settings.DEFAULT_PAGE_SIZE

    async def _run(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """在独立会话（单个事务）中执行"""
        async with self.database.get_session() as session:
            return await fn(session)

    def _observe(self, tables: Iterable[str], fn: Callable[[AsyncSession], Awaitable[T]]) -> LiveQuery[T]:
        """创建订阅指定表的持续查询，每次重新查询都使用新会话"""
        return self.database.change_bus.observe(tables, lambda: self._run(fn))

    # ========== 持续查询 ==========

    def observe_all_diaries_with_details(self) -> LiveQuery[List[DiaryWithDetails]]:
        """订阅全部未删除日记（含图片、标签），按创建时间倒序"""
        return self._observe(DETAIL_TABLES, lambda s: DiaryRepository(s).get_all_with_details())

    def observe_diaries_between(self, start_time: datetime, end_time: datetime) -> LiveQuery[List[DiaryWithDetails]]:
        return self._observe(
            DETAIL_TABLES,
            lambda s: DiaryRepository(s).get_between_with_details(start_time, end_time)
        )

    def observe_diaries_for_date(self, day: date) -> LiveQuery[List[DiaryWithDetails]]:
        """订阅本地时区某一天的日记"""
        return self._observe(DETAIL_TABLES, lambda s: DiaryRepository(s).get_by_local_date(day))

    def observe_favorite_diaries(self) -> LiveQuery[List[DiaryEntry]]:
        return self._observe(("diary_entries",), lambda s: DiaryRepository(s).get_favorites())

    def observe_search(self, query: str) -> LiveQuery[List[DiaryEntry]]:
        """订阅全文检索结果（结果附带标签，便于按标签过滤）"""
        return self._observe(
            ("diary_entries", "tags", "diary_tag_cross_ref"),
            lambda s: DiaryRepository(s).search(query)
        )

    def observe_dates_with_entries(self) -> LiveQuery[List[date]]:
        return self._observe(("diary_entries",), lambda s: DiaryRepository(s).get_dates_with_entries())

    def observe_diary_count(self) -> LiveQuery[int]:
        return self._observe(("diary_entries",), lambda s: DiaryRepository(s).count_visible())

    def observe_images(self, diary_id: int) -> LiveQuery[List[DiaryImage]]:
        return self._observe(("diary_images",), lambda s: DiaryImageRepository(s).get_by_diary_id(diary_id))

    def observe_all_tags(self) -> LiveQuery[List[Tag]]:
        return self._observe(("tags",), lambda s: TagRepository(s).get_all_ordered())

    def observe_tags_for_diary(self, diary_id: int) -> LiveQuery[List[Tag]]:
        return self._observe(
            ("tags", "diary_tag_cross_ref"),
            lambda s: TagRepository(s).get_tags_for_diary(diary_id)
        )

    def observe_diary_count_for_tag(self, tag_id: int) -> LiveQuery[int]:
        return self._observe(("diary_tag_cross_ref",), lambda s: DiaryTagRepository(s).count_by_tag_id(tag_id))

    # ========== 单次查询 ==========

    async def get_diary_by_id(self, diary_id: int) -> Optional[DiaryEntry]:
        """按ID直接查询日记（包括已软删除的）"""
        return await self._run(lambda s: DiaryRepository(s).get_by_id(diary_id))

    async def get_diary_with_details_by_id(self, diary_id: int) -> Optional[DiaryWithDetails]:
        """查询未删除日记的详情"""
        return await self._run(lambda s: DiaryRepository(s).get_with_details_by_id(diary_id))

    async def get_diaries_paged(self, limit: Optional[int] = None, offset: int = 0) -> List[DiaryWithDetails]:
        page_size = limit if limit is not None else self.default_page_size
        return await self._run(lambda s: DiaryRepository(s).get_paged_with_details(page_size, offset))

    async def search_diaries(self, query: str) -> List[DiaryEntry]:
        return await self._run(lambda s: DiaryRepository(s).search(query))

    async def get_all_tags(self) -> List[Tag]:
        return await self._run(lambda s: TagRepository(s).get_all_ordered())

    async def get_dates_with_entries(self) -> List[date]:
        return await self._run(lambda s: DiaryRepository(s).get_dates_with_entries())

    # ========== 日记写入 ==========

    async def _store_images(self, image_sources: Sequence[ImageSource]) -> List[StoredImage]:
        """保存图片文件，无法解码的来源被跳过"""
        stored = []
        for source in image_sources:
            result = await self.image_storage.store(source)
            if result is not None:
                stored.append(result)
        return stored

    async def _discard_stored(self, stored: Sequence[StoredImage]) -> None:
        for image in stored:
            await self.image_storage.delete_file(image.image_path)
            await self.image_storage.delete_file(image.thumbnail_path)

    async def save_diary(
        self,
        draft: DiaryDraft,
        image_sources: Sequence[ImageSource] = (),
        tag_ids: Optional[Sequence[int]] = None
    ) -> int:
        """
        保存日记（新建或整行更新），追加图片并设置标签

        Args:
            draft: NewDiary 新建；ExistingDiary 整行更新（updated_at刷新，created_at未提供时保留原值）
            image_sources: 新增图片来源，依次追加在已有图片之后
            tag_ids: 标签ID列表；None表示不修改标签，空列表表示清空

        Returns:
            日记ID

        Raises:
            DiaryNotFoundError: 要更新的日记不存在
        """
        stored = await self._store_images(image_sources)
        fields = draft.model_dump(exclude={"kind", "id", "created_at"})
        now = utc_now()

        try:
            async with self.database.get_session() as session:
                diary_repo = DiaryRepository(session)
                image_repo = DiaryImageRepository(session)

                if isinstance(draft, ExistingDiary):
                    existing = await diary_repo.get_by_id(draft.id)
                    if existing is None:
                        raise DiaryNotFoundError(draft.id)
                    entry = await diary_repo.upsert(DiaryEntry(
                        id=draft.id,
                        created_at=draft.created_at or existing.created_at,
                        updated_at=now,
                        is_deleted=existing.is_deleted,
                        **fields
                    ))
                else:
                    entry = await diary_repo.create(
                        created_at=draft.created_at or now,
                        updated_at=now,
                        **fields
                    )
                diary_id = entry.id

                # 已有图片的sort_order是连续的，新图片从数量开始接着编号
                next_order = await image_repo.count_by_diary_id(diary_id)
                for offset, image in enumerate(stored):
                    await image_repo.create(
                        diary_id=diary_id,
                        image_path=image.image_path,
                        thumbnail_path=image.thumbnail_path,
                        sort_order=next_order + offset
                    )

                if tag_ids is not None:
                    await DiaryTagRepository(session).replace_diary_tags(diary_id, tag_ids)
        except Exception:
            await self._discard_stored(stored)
            raise

        logger.info(f"保存日记成功: diary_id={diary_id}, images={len(stored)}, tags={tag_ids}")
        return diary_id

    async def update_diary(self, draft: ExistingDiary) -> None:
        """整行更新日记字段，不修改图片和标签"""
        await self.save_diary(draft)

    async def delete_diary(self, diary_id: int, permanent: bool = False) -> bool:
        """
        删除日记

        Args:
            diary_id: 日记ID
            permanent: False 软删除；True 删除图片文件和数据库记录（图片、标签关联随外键级联删除）

        Returns:
            是否有日记被删除
        """
        async with self.database.get_session() as session:
            diary_repo = DiaryRepository(session)
            if not permanent:
                deleted = await diary_repo.soft_delete(diary_id)
            else:
                for image in await DiaryImageRepository(session).get_by_diary_id(diary_id):
                    await self.image_storage.delete_image_files(image)
                deleted = await diary_repo.delete_by_id(diary_id)

        logger.info(f"删除日记: diary_id={diary_id}, permanent={permanent}, deleted={deleted}")
        return deleted

    async def toggle_favorite(self, diary_id: int, is_favorite: bool) -> bool:
        return await self._run(lambda s: DiaryRepository(s).update_favorite_status(diary_id, is_favorite))

    # ========== 图片 ==========

    async def add_image_to_diary(self, diary_id: int, source: ImageSource) -> Optional[DiaryImage]:
        """
        为日记追加一张图片

        Args:
            diary_id: 日记ID
            source: 图片来源

        Returns:
            新的图片记录；图片无法解码时返回None

        Raises:
            DiaryNotFoundError: 日记不存在
        """
        if await self.get_diary_by_id(diary_id) is None:
            raise DiaryNotFoundError(diary_id)

        stored = await self.image_storage.store(source)
        if stored is None:
            return None

        try:
            async with self.database.get_session() as session:
                image_repo = DiaryImageRepository(session)
                return await image_repo.create(
                    diary_id=diary_id,
                    image_path=stored.image_path,
                    thumbnail_path=stored.thumbnail_path,
                    sort_order=await image_repo.count_by_diary_id(diary_id)
                )
        except Exception:
            await self._discard_stored([stored])
            raise

    async def delete_image(self, image_id: int) -> bool:
        """
        删除图片：文件、记录，并把剩余图片重新连续编号

        Returns:
            图片是否存在
        """
        async with self.database.get_session() as session:
            image_repo = DiaryImageRepository(session)
            image = await image_repo.get_by_id(image_id)
            if image is None:
                return False

            await self.image_storage.delete_image_files(image)
            await image_repo.delete_by_id(image_id)
            await image_repo.renumber(image.diary_id)

        logger.info(f"删除图片: image_id={image_id}, diary_id={image.diary_id}")
        return True

    async def reorder_images(self, diary_id: int, image_ids: Sequence[int]) -> List[DiaryImage]:
        """
        按给定顺序重排日记图片

        Args:
            diary_id: 日记ID
            image_ids: 期望的图片ID顺序；未列出的图片保持相对顺序排在后面

        Returns:
            重排后的图片列表
        """
        return await self._run(lambda s: DiaryImageRepository(s).renumber(diary_id, image_ids))

    # ========== 标签 ==========

    async def create_tag(self, name: str, color: Optional[int] = None) -> Tag:
        """
        创建标签，同名标签已存在时直接返回已有标签

        Args:
            name: 标签名称（精确匹配）
            color: ARGB颜色，不传使用默认颜色

        Returns:
            标签
        """
        async with self.database.get_session() as session:
            tag_repo = TagRepository(session)
            # 并发创建同名标签时只有一条插入生效
            created = await tag_repo.insert_if_absent(
                name, color if color is not None else self.default_tag_color
            )
            tag = await tag_repo.get_by_name(name)

        if created:
            logger.info(f"创建标签: tag_id={tag.id}, name={name}")
        return tag

    async def update_tag(self, tag_id: int, name: str, color: int) -> Tag:
        """
        修改标签名称和颜色

        Raises:
            TagNotFoundError: 标签不存在
        """
        tag = await self._run(lambda s: TagRepository(s).update_by_id(tag_id, name=name, color=color))
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    async def delete_tag(self, tag_id: int) -> bool:
        """删除标签（日记关联随外键级联删除）"""
        return await self._run(lambda s: TagRepository(s).delete_by_id(tag_id))

    async def set_tags_for_diary(self, diary_id: int, tag_ids: Sequence[int]) -> List[int]:
        """用给定标签替换日记的全部标签"""
        return await self._run(lambda s: DiaryTagRepository(s).replace_diary_tags(diary_id, tag_ids))
