"""
ViewModel基类
持有不可变的界面状态，管理后台订阅任务，把异常转换为界面可展示的错误信息
"""
# 标准库导包
import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, Set, TypeVar

# 项目内部导包
from models import UiState
from storage.observer import LiveQuery
from utils.errors import exception_summary

# 配置日志
logger = logging.getLogger(__name__)

S = TypeVar("S", bound=UiState)
T = TypeVar("T")


class BaseViewModel(Generic[S]):
    """ViewModel基类"""

    def __init__(self, initial_state: S):
        self._state = initial_state
        self._updated = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[S], None]] = []
        self._closed = False

    @property
    def state(self) -> S:
        return self._state

    def add_listener(self, listener: Callable[[S], None]) -> Callable[[], None]:
        """
        监听状态变化

        Returns:
            取消监听的函数
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self._updated.set()
        for listener in list(self._listeners):
            listener(self._state)

    def _fail(self, e: BaseException, **changes: Any) -> None:
        logger.error(f"[{type(self).__name__}] 操作失败: {exception_summary(e)}")
        self._update(error=exception_summary(e), **changes)

    def clear_error(self) -> None:
        self._update(error=None)

    async def wait_until(self, predicate: Callable[[S], bool], timeout: float = 5.0) -> S:
        """等待状态满足条件"""
        async def _wait() -> S:
            while not predicate(self._state):
                self._updated.clear()
                await self._updated.wait()
            return self._state

        return await asyncio.wait_for(_wait(), timeout)

    # ========== 任务管理 ==========

    def launch(self, coro: Awaitable[Any]) -> asyncio.Task:
        """启动由ViewModel持有的后台任务，close()时统一取消"""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def collect(
        self,
        live_query: LiveQuery[T],
        on_value: Callable[[T], None],
        **on_error: Any
    ) -> asyncio.Task:
        """
        持续消费LiveQuery，每次结果交给on_value处理

        Args:
            live_query: 持续查询
            on_value: 结果处理函数
            **on_error: 查询失败时与error一起写入状态的字段
        """
        async def _collect() -> None:
            async with live_query:
                try:
                    async for value in live_query:
                        on_value(value)
                except Exception as e:
                    self._fail(e, **on_error)

        return self.launch(_collect())

    async def _guard(self, coro: Awaitable[T], **on_error: Any) -> Optional[T]:
        """执行业务操作，失败时写入error并返回None"""
        try:
            return await coro
        except Exception as e:
            self._fail(e, **on_error)
            return None

    async def close(self) -> None:
        """取消全部订阅任务"""
        if self._closed:
            return
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
