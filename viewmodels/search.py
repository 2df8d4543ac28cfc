"""
搜索ViewModel
输入防抖后执行全文检索，结果按心情、标签、时间范围过滤
"""
# 标准库导包
import asyncio
from datetime import datetime
from typing import List, Optional

# 项目内部导包
from config import Settings, settings
from models import SearchUiState
from storage.models import DiaryEntry, Mood, Tag
from viewmodels.base import BaseViewModel
from viewmodels.services.diary_service import DiaryService
from viewmodels.utils.debounce import Debouncer


class SearchViewModel(BaseViewModel[SearchUiState]):
    """日记搜索"""

    def __init__(self, service: DiaryService, app_settings: Settings = settings):
        super().__init__(SearchUiState())
        self.service = service
        self._debouncer = Debouncer(app_settings.SEARCH_DEBOUNCE_SECONDS)
        self._search_task: Optional[asyncio.Task] = None
        self._raw_results: List[DiaryEntry] = []

    def start(self) -> None:
        self.collect(self.service.observe_all_tags(), lambda tags: self._update(available_tags=tags))

    def update_search_query(self, query: str) -> None:
        """更新输入，停止输入一段时间后才真正检索"""
        self._update(search_query=query)
        self._cancel_search()
        self._debouncer.submit(self._perform_search)

    def _cancel_search(self) -> None:
        # 旧关键词的持续查询不能再写入结果
        if self._search_task is not None:
            self._search_task.cancel()
            self._search_task = None

    def _perform_search(self) -> None:
        self._cancel_search()

        query = self.state.search_query
        if not query.strip():
            self._raw_results = []
            self._update(search_results=[], is_searching=False)
            return

        self._update(is_searching=True)
        self._search_task = self.collect(self.service.observe_search(query), self._on_results, is_searching=False)

    def _on_results(self, results: List[DiaryEntry]) -> None:
        self._raw_results = results
        self._update(search_results=self._apply_filters(results), is_searching=False, error=None)

    def _apply_filters(self, results: List[DiaryEntry]) -> List[DiaryEntry]:
        state = self.state
        filtered = results

        if state.selected_moods:
            filtered = [d for d in filtered if d.mood in state.selected_moods]

        if state.selected_tag_ids:
            filtered = [d for d in filtered if any(t.id in state.selected_tag_ids for t in d.tags)]

        if state.date_range_start is not None:
            filtered = [d for d in filtered if d.created_at >= state.date_range_start]
        if state.date_range_end is not None:
            filtered = [d for d in filtered if d.created_at <= state.date_range_end]

        return filtered

    def _refilter(self) -> None:
        self._update(search_results=self._apply_filters(self._raw_results))

    # ========== 过滤条件 ==========

    def toggle_mood_filter(self, mood: Mood) -> None:
        moods = set(self.state.selected_moods)
        moods.symmetric_difference_update({mood})
        self._update(selected_moods=moods)
        self._refilter()

    def toggle_tag_filter(self, tag: Tag) -> None:
        tag_ids = set(self.state.selected_tag_ids)
        tag_ids.symmetric_difference_update({tag.id})
        self._update(selected_tag_ids=tag_ids)
        self._refilter()

    def set_date_range(self, start: Optional[datetime], end: Optional[datetime]) -> None:
        self._update(date_range_start=start, date_range_end=end)
        self._refilter()

    def clear_filters(self) -> None:
        self._update(selected_moods=set(), selected_tag_ids=set(), date_range_start=None, date_range_end=None)
        self._refilter()

    async def close(self) -> None:
        self._debouncer.cancel()
        await super().close()
