"""
数据模型定义
保存日记用的草稿模型，以及各界面的状态模型
"""
# 标准库导包
from datetime import date, datetime
from pathlib import Path
from typing import Optional, List, Set, Union, Literal

# 第三方库导包
from pydantic import BaseModel, ConfigDict, Field

# 项目内部导包
from storage.models import DiaryEntry, DiaryImage, DiaryWithDetails, Mood, Tag, Weather
from storage.settings_store import DarkMode, FontSize


# ========== 保存草稿 ==========

class DiaryFields(BaseModel):
    """日记可编辑字段"""
    title: str = ""
    content: str = ""
    mood: Mood = Mood.NEUTRAL
    weather: Optional[Weather] = None
    location: Optional[str] = None
    is_favorite: bool = False
    created_at: Optional[datetime] = None  # 为空时：新日记取当前时间，已有日记保留原值


class NewDiary(DiaryFields):
    """尚未保存的新日记"""
    kind: Literal["new"] = "new"


class ExistingDiary(DiaryFields):
    """已保存过的日记"""
    kind: Literal["existing"] = "existing"
    id: int = Field(gt=0)


DiaryDraft = Union[NewDiary, ExistingDiary]

# 待保存的图片来源：文件路径或原始字节
ImageSource = Union[str, Path, bytes]


# ========== 界面状态 ==========

class UiState(BaseModel):
    """界面状态基类（不可变，通过model_copy整体替换）"""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    error: Optional[str] = None


class HomeUiState(UiState):
    """首页状态"""
    diaries: List[DiaryWithDetails] = Field(default_factory=list)
    is_loading: bool = True
    total_count: int = 0


class EditDiaryUiState(UiState):
    """编辑页状态"""
    diary_id: Optional[int] = None
    title: str = ""
    content: str = ""
    mood: Mood = Mood.NEUTRAL
    weather: Optional[Weather] = None
    location: Optional[str] = None
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    images: List[DiaryImage] = Field(default_factory=list)
    pending_images: List[ImageSource] = Field(default_factory=list)
    selected_tags: List[Tag] = Field(default_factory=list)
    available_tags: List[Tag] = Field(default_factory=list)
    is_loading: bool = True
    is_saving: bool = False
    has_changes: bool = False

    @property
    def is_new_diary(self) -> bool:
        return self.diary_id is None


class SearchUiState(UiState):
    """搜索页状态"""
    search_query: str = ""
    search_results: List[DiaryEntry] = Field(default_factory=list)
    is_searching: bool = False
    selected_moods: Set[Mood] = Field(default_factory=set)
    selected_tag_ids: Set[int] = Field(default_factory=set)
    available_tags: List[Tag] = Field(default_factory=list)
    date_range_start: Optional[datetime] = None
    date_range_end: Optional[datetime] = None


class CalendarUiState(UiState):
    """日历页状态"""
    current_month: date  # 当月1号
    selected_date: date
    dates_with_entries: Set[date] = Field(default_factory=set)
    diaries_for_selected_date: List[DiaryWithDetails] = Field(default_factory=list)
    is_loading: bool = False


class TagUiState(UiState):
    """标签管理页状态"""
    tags: List[Tag] = Field(default_factory=list)
    is_loading: bool = True


class SettingsUiState(UiState):
    """设置页状态"""
    app_lock_enabled: bool = False
    use_biometric: bool = False
    has_pin: bool = False
    dark_mode: DarkMode = DarkMode.SYSTEM
    default_mood: Mood = Mood.NEUTRAL
    auto_save: bool = True
    font_size: FontSize = FontSize.MEDIUM
    is_loading: bool = True
