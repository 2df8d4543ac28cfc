"""
首页ViewModel
"""
# 标准库导包
from typing import List

# 项目内部导包
from models import HomeUiState
from storage.models import DiaryWithDetails
from viewmodels.base import BaseViewModel
from viewmodels.services.diary_service import DiaryService


class HomeViewModel(BaseViewModel[HomeUiState]):
    """首页：日记列表和总数"""

    def __init__(self, service: DiaryService):
        super().__init__(HomeUiState())
        self.service = service

    def start(self) -> None:
        self.collect(self.service.observe_all_diaries_with_details(), self._on_diaries, is_loading=False)
        self.collect(self.service.observe_diary_count(), lambda count: self._update(total_count=count))

    def _on_diaries(self, diaries: List[DiaryWithDetails]) -> None:
        self._update(diaries=diaries, is_loading=False, error=None)

    async def delete_diary(self, diary_id: int, permanent: bool = False) -> None:
        await self._guard(self.service.delete_diary(diary_id, permanent=permanent))

    async def toggle_favorite(self, diary_id: int, is_favorite: bool) -> None:
        await self._guard(self.service.toggle_favorite(diary_id, is_favorite))
