"""
Utils layer
工具函数层
"""

from .errors import (
    DiaryError,
    DiaryNotFoundError,
    TagNotFoundError,
    exception_summary,
    safe_str,
)

__all__ = [
    "DiaryError",
    "DiaryNotFoundError",
    "TagNotFoundError",
    "exception_summary",
    "safe_str",
]
