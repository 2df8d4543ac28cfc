"""
日历ViewModel
"""
# 标准库导包
import asyncio
from datetime import date
from typing import Optional

# 项目内部导包
from models import CalendarUiState
from viewmodels.base import BaseViewModel
from viewmodels.services.diary_service import DiaryService


def shift_month(month: date, delta: int) -> date:
    """返回相差delta个月的月份（1号）"""
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


class CalendarViewModel(BaseViewModel[CalendarUiState]):
    """日历：有日记的日期标记，以及所选日期的日记"""

    def __init__(self, service: DiaryService, today: Optional[date] = None):
        today = today or date.today()
        super().__init__(CalendarUiState(current_month=today.replace(day=1), selected_date=today))
        self.service = service
        self._day_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self.collect(
            self.service.observe_dates_with_entries(),
            lambda dates: self._update(dates_with_entries=set(dates))
        )
        self._load_selected_date()

    def _load_selected_date(self) -> None:
        if self._day_task is not None:
            self._day_task.cancel()

        self._update(is_loading=True)
        self._day_task = self.collect(
            self.service.observe_diaries_for_date(self.state.selected_date),
            lambda diaries: self._update(diaries_for_selected_date=diaries, is_loading=False, error=None),
            is_loading=False
        )

    def select_date(self, day: date) -> None:
        self._update(selected_date=day)
        self._load_selected_date()

    def navigate_month(self, delta: int) -> None:
        self._update(current_month=shift_month(self.state.current_month, delta))

    def go_to_today(self, today: Optional[date] = None) -> None:
        today = today or date.today()
        self._update(selected_date=today, current_month=today.replace(day=1))
        self._load_selected_date()
