"""
防抖工具
在最后一次提交后等待一段时间再执行，期间的新提交会取消之前的等待
"""
# 标准库导包
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

# 配置日志
logger = logging.getLogger(__name__)


class Debouncer:
    """可取消的防抖执行器"""

    def __init__(self, delay: float):
        """
        Args:
            delay: 默认等待时间（秒）
        """
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, fn: Callable[[], Any], delay: Optional[float] = None) -> asyncio.Task:
        """
        提交待执行函数，取消尚未执行的上一次提交

        Args:
            fn: 无参函数，可以是同步函数或返回awaitable的函数
            delay: 本次等待时间，不传使用默认值

        Returns:
            等待并执行的任务
        """
        self.cancel()
        self._task = asyncio.create_task(self._run(fn, self.delay if delay is None else delay))
        return self._task

    async def _run(self, fn: Callable[[], Any], delay: float) -> None:
        await asyncio.sleep(delay)
        result = fn()
        if inspect.isawaitable(result):
            await result

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None
