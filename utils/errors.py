"""
异常定义与错误信息工具
"""
# 标准库导包
import re
from typing import Any


_CONTROL_RE = re.compile(r"[\r\n\t]+")


class DiaryError(Exception):
    """日记数据层异常基类"""


class DiaryNotFoundError(DiaryError):
    """日记不存在"""

    def __init__(self, diary_id: int):
        super().__init__(f"日记不存在: diary_id={diary_id}")
        self.diary_id = diary_id


class TagNotFoundError(DiaryError):
    """标签不存在"""

    def __init__(self, tag_id: int):
        super().__init__(f"标签不存在: tag_id={tag_id}")
        self.tag_id = tag_id


def safe_str(value: Any, *, max_len: int = 200) -> str:
    """把任意值压缩成适合日志/界面展示的短文本（去掉换行、控制字符，截断超长）。"""
    if max_len <= 0:
        return ""
    cleaned = _CONTROL_RE.sub(" ", str(value)).strip()
    if len(cleaned) > max_len:
        return f"{cleaned[:max_len]}…"
    return cleaned


def exception_summary(exc: BaseException, *, max_len: int = 200) -> str:
    """生成异常摘要：业务异常只保留消息，其他异常保留类型 + 截断后的消息。"""
    msg = safe_str(exc, max_len=max_len)
    if isinstance(exc, DiaryError) and msg:
        return msg
    name = type(exc).__name__
    return f"{name}: {msg}" if msg else name
