"""
标签管理ViewModel
"""
# 标准库导包
from typing import Optional

# 项目内部导包
from models import TagUiState
from viewmodels.base import BaseViewModel
from viewmodels.services.diary_service import DiaryService


class TagViewModel(BaseViewModel[TagUiState]):
    """标签列表的增删改"""

    def __init__(self, service: DiaryService):
        super().__init__(TagUiState())
        self.service = service

    def start(self) -> None:
        self.collect(
            self.service.observe_all_tags(),
            lambda tags: self._update(tags=tags, is_loading=False, error=None),
            is_loading=False
        )

    async def create_tag(self, name: str, color: Optional[int] = None) -> None:
        if not name.strip():
            self._update(error="标签名称不能为空")
            return
        await self._guard(self.service.create_tag(name.strip(), color))

    async def update_tag(self, tag_id: int, name: str, color: int) -> None:
        if not name.strip():
            self._update(error="标签名称不能为空")
            return
        await self._guard(self.service.update_tag(tag_id, name.strip(), color))

    async def delete_tag(self, tag_id: int) -> None:
        await self._guard(self.service.delete_tag(tag_id))
