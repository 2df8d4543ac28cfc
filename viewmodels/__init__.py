"""
ViewModel层包
各界面的状态持有者，界面渲染不在本项目范围内
"""
from .base import BaseViewModel
from .home import HomeViewModel
from .edit_diary import EditDiaryViewModel
from .search import SearchViewModel
from .calendar import CalendarViewModel
from .tag import TagViewModel
from .settings import SettingsViewModel

__all__ = [
    "BaseViewModel",
    "HomeViewModel",
    "EditDiaryViewModel",
    "SearchViewModel",
    "CalendarViewModel",
    "TagViewModel",
    "SettingsViewModel",
]
