"""
日记编辑ViewModel
"""
# 标准库导包
from typing import Iterable, Optional

# 项目内部导包
from models import EditDiaryUiState, ExistingDiary, ImageSource, NewDiary
from storage.models import DiaryImage, Mood, Tag, Weather
from utils.errors import DiaryNotFoundError
from viewmodels.base import BaseViewModel
from viewmodels.services.diary_service import DiaryService


class EditDiaryViewModel(BaseViewModel[EditDiaryUiState]):
    """新建或编辑日记"""

    def __init__(self, service: DiaryService, default_mood: Mood = Mood.NEUTRAL):
        super().__init__(EditDiaryUiState(mood=default_mood))
        self.service = service

    def start(self) -> None:
        self.collect(self.service.observe_all_tags(), lambda tags: self._update(available_tags=tags))

    async def load_diary(self, diary_id: Optional[int]) -> None:
        """
        加载日记

        Args:
            diary_id: 日记ID；None或0表示新建
        """
        if not diary_id:
            self._update(is_loading=False, diary_id=None)
            return

        try:
            details = await self.service.get_diary_with_details_by_id(diary_id)
        except Exception as e:
            self._fail(e, is_loading=False)
            return
        if details is None:
            self._update(error=str(DiaryNotFoundError(diary_id)), is_loading=False)
            return

        diary = details.diary
        self._update(
            diary_id=diary.id,
            title=diary.title,
            content=diary.content,
            mood=diary.mood,
            weather=diary.weather,
            location=diary.location,
            is_favorite=diary.is_favorite,
            created_at=diary.created_at,
            images=details.images,
            selected_tags=details.tags,
            is_loading=False,
            has_changes=False,
        )

    # ========== 字段编辑 ==========

    def update_title(self, title: str) -> None:
        self._update(title=title, has_changes=True)

    def update_content(self, content: str) -> None:
        self._update(content=content, has_changes=True)

    def update_mood(self, mood: Mood) -> None:
        self._update(mood=mood, has_changes=True)

    def update_weather(self, weather: Optional[Weather]) -> None:
        self._update(weather=weather, has_changes=True)

    def update_location(self, location: Optional[str]) -> None:
        self._update(location=location, has_changes=True)

    # ========== 图片 ==========

    def add_images(self, sources: Iterable[ImageSource]) -> None:
        self._update(pending_images=self.state.pending_images + list(sources), has_changes=True)

    def remove_pending_image(self, source: ImageSource) -> None:
        remaining = [s for s in self.state.pending_images if s != source]
        self._update(pending_images=remaining, has_changes=True)

    async def remove_image(self, image: DiaryImage) -> None:
        """删除已保存的图片（立即生效）"""
        deleted = await self._guard(self.service.delete_image(image.id))
        if deleted is None:
            return
        remaining = [img for img in self.state.images if img.id != image.id]
        self._update(images=remaining, has_changes=True)

    async def reorder_images(self, from_index: int, to_index: int) -> None:
        """移动已保存图片的位置（立即生效）"""
        images = list(self.state.images)
        if not (0 <= from_index < len(images) and 0 <= to_index < len(images)):
            self._update(error=f"图片位置无效: from={from_index}, to={to_index}")
            return
        images.insert(to_index, images.pop(from_index))
        self._update(images=images, has_changes=True)

        if self.state.diary_id is not None:
            await self._guard(self.service.reorder_images(self.state.diary_id, [img.id for img in images]))

    # ========== 标签 ==========

    def toggle_tag(self, tag: Tag) -> None:
        selected = [t for t in self.state.selected_tags if t.id != tag.id]
        if len(selected) == len(self.state.selected_tags):
            selected.append(tag)
        self._update(selected_tags=selected, has_changes=True)

    async def create_and_select_tag(self, name: str, color: Optional[int] = None) -> None:
        if not name.strip():
            self._update(error="标签名称不能为空")
            return

        tag = await self._guard(self.service.create_tag(name.strip(), color))
        if tag is None:
            return
        if all(t.id != tag.id for t in self.state.selected_tags):
            self._update(selected_tags=self.state.selected_tags + [tag], has_changes=True)

    # ========== 保存 ==========

    def has_unsaved_changes(self) -> bool:
        return self.state.has_changes

    async def save_diary(self) -> Optional[int]:
        """
        保存当前编辑内容

        Returns:
            日记ID；校验失败或保存失败时返回None（错误信息写入state.error）
        """
        state = self.state
        if not state.title.strip() and not state.content.strip():
            self._update(error="请输入标题或内容")
            return None

        fields = dict(
            title=state.title,
            content=state.content,
            mood=state.mood,
            weather=state.weather,
            location=state.location,
            is_favorite=state.is_favorite,
            created_at=state.created_at,
        )
        draft = NewDiary(**fields) if state.diary_id is None else ExistingDiary(id=state.diary_id, **fields)

        self._update(is_saving=True)
        diary_id = await self._guard(
            self.service.save_diary(
                draft,
                image_sources=state.pending_images,
                tag_ids=[tag.id for tag in state.selected_tags]
            ),
            is_saving=False
        )
        if diary_id is None:
            return None

        details = await self._guard(self.service.get_diary_with_details_by_id(diary_id), is_saving=False)
        self._update(
            diary_id=diary_id,
            images=details.images if details else state.images,
            created_at=details.diary.created_at if details else state.created_at,
            pending_images=[],
            is_saving=False,
            has_changes=False,
        )
        return diary_id
